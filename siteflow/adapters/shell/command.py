"""
Shell command adapter — run a local program and stream its output.

Commands are argv lists, never shell strings. Output (stdout and stderr
merged) is echoed line by line while the program runs, so a failure in
the middle of a long pipeline is visible where it happens, and is also
kept in full on the receipt.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Callable

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.core.models.action import Receipt

logger = logging.getLogger(__name__)

Echo = Callable[[str], None]


def run_streaming(
    argv: list[str],
    cwd: str,
    echo: Echo | None = None,
) -> tuple[int, str]:
    """Run ``argv`` to completion, echoing each output line as it arrives.

    Returns:
        (return_code, combined_output)

    Raises:
        OSError: if the program cannot be started.
    """
    lines: list[str] = []
    with subprocess.Popen(
        argv,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
        text=True,
        bufsize=1,
    ) as proc:
        assert proc.stdout is not None
        for line in proc.stdout:
            line = line.rstrip("\n")
            lines.append(line)
            if echo is not None:
                echo(line)
        return_code = proc.wait()
    return return_code, "\n".join(lines)


def receipt_for(
    adapter: str,
    context: ExecutionContext,
    argv: list[str],
    echo: Echo | None,
) -> Receipt:
    """Run argv in the context's working dir and wrap the outcome."""
    command = " ".join(argv)
    cwd = context.working_dir
    logger.debug("Executing: %s (cwd=%s)", command, cwd)
    start = time.monotonic()

    try:
        return_code, output = run_streaming(argv, cwd, echo)
    except OSError as e:
        return Receipt.failure(
            adapter=adapter,
            action_id=context.action.id,
            error=f"Cannot run {argv[0]}: {e}",
            command=command,
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if return_code == 0:
        return Receipt.success(
            adapter=adapter,
            action_id=context.action.id,
            output=output,
            duration_ms=elapsed_ms,
            command=command,
            return_code=0,
        )
    return Receipt.failure(
        adapter=adapter,
        action_id=context.action.id,
        error=f"{command} exited with code {return_code}",
        output=output,
        duration_ms=elapsed_ms,
        command=command,
        return_code=return_code,
    )


class ShellCommandAdapter(Adapter):
    """Execute local programs.

    Action params:
        argv (list[str]): Program and arguments.
        cwd (str): Override working directory (default: project root).
        quiet (bool): Capture output without echoing it.
    """

    def __init__(self, echo: Echo | None = None):
        self._echo = echo

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.action.params.get("argv")
        if not argv or not isinstance(argv, list):
            return False, "Missing required param: 'argv'"

        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv = [str(a) for a in context.action.params["argv"]]
        echo = None if context.action.params.get("quiet") else self._echo
        return receipt_for(self.name, context, argv, echo)
