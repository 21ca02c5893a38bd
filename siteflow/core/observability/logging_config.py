"""
Logging setup for the siteflow CLI.

``main.cli`` calls ``setup_logging`` once per invocation; modules log
through ``logging.getLogger(__name__)``. What the operator is meant to
read (steps, prompts, tool output) goes through click. The log carries
diagnostics: which tier was detected, which command ran, why a gate
failed.

Console level: ``--debug`` > ``--verbose`` > ``--quiet`` >
``SITEFLOW_LOG_LEVEL`` > WARNING. A log file (``SITEFLOW_LOG_FILE``)
can keep more detail than the console (``SITEFLOW_LOG_FILE_LEVEL``),
which is how an operator keeps a record of a go-live.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── Formats ─────────────────────────────────────────────────────────

_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# level threshold → (format, datefmt); first match wins
_CONSOLE_FORMATS = (
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with siteflow's console (and file) handler."""
    console_level = _parse_level(level)
    fmt, datefmt = next((f, d) for limit, f, d in _CONSOLE_FORMATS if console_level <= limit)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_DETAILED, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)


def _parse_level(name: str | None) -> int:
    """Level name → number; anything unrecognised means WARNING."""
    value = logging.getLevelName((name or "").upper())
    return value if isinstance(value, int) else logging.WARNING
