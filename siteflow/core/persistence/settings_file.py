"""
Settings file — flat ``KEY="value"`` persistence.

The project's ``.env`` is read by siteflow and by the site itself
(settings.php loads it), so the format stays minimal: one assignment per
line, values double-quoted, no sections. Comment and blank lines are
carried through untouched but not modeled.

Writes keep every other line and its position; a key that already
exists is replaced in place, a new key is appended.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Mapping

from siteflow.core.config.loader import ConfigError

logger = logging.getLogger(__name__)


def format_line(key: str, value: str) -> str:
    """Render one assignment, escaping backslashes and double quotes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{key}="{escaped}"'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        inner = value[1:-1]
        out: list[str] = []
        chars = iter(inner)
        for ch in chars:
            if ch == "\\":
                nxt = next(chars, "")
                out.append(nxt if nxt in ('"', "\\") else ch + nxt)
            else:
                out.append(ch)
        return "".join(out)
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def _key_of(line: str) -> str | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    key, _, _ = stripped.partition("=")
    return key.strip()


def read_settings(path: Path) -> dict[str, str]:
    """Parse the file into an ordered key→value mapping.

    An absent file is an empty mapping.

    Raises:
        ConfigError: when the file is not valid UTF-8.
    """
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigError(f"Settings file {path} is not valid UTF-8 (byte {e.start}): {e.reason}") from e
    values: dict[str, str] = {}
    for line in text.splitlines():
        key = _key_of(line)
        if key is None or key in values:
            continue
        _, _, raw = line.strip().partition("=")
        values[key] = _unquote(raw.strip())
    return values


def _read_lines(path: Path) -> list[str]:
    if not path.is_file():
        return []
    return path.read_text(encoding="utf-8").splitlines()


def _write_lines(path: Path, lines: list[str]) -> None:
    """Write lines back with a trailing newline."""
    final = "\n".join(lines)
    if not final.endswith("\n"):
        final += "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(final, encoding="utf-8")


def upsert_many(path: Path, values: Mapping[str, str]) -> dict[str, str]:
    """Replace-or-append every key in ``values``, preserving all other lines.

    Returns:
        The settings as read back after the write.
    """
    lines = _read_lines(path)
    for key, value in values.items():
        new_line = format_line(key, value)
        for i, line in enumerate(lines):
            if _key_of(line) == key:
                lines[i] = new_line
                break
        else:
            lines.append(new_line)
    _write_lines(path, lines)
    logger.debug("Wrote %d key(s) to %s", len(values), path)
    return read_settings(path)


def upsert(path: Path, key: str, value: str) -> dict[str, str]:
    """Replace the first ``KEY=`` line, or append a new one."""
    return upsert_many(path, {key: value})


def write_settings(path: Path, values: Mapping[str, str]) -> None:
    """Create (or overwrite) a settings file holding exactly ``values``."""
    _write_lines(path, [format_line(k, v) for k, v in values.items()])
    logger.debug("Created %s with %d key(s)", path, len(values))


def copy_settings(template: Path, dest: Path) -> None:
    """Start ``dest`` as a byte-for-byte copy of ``template``."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(template, dest)
