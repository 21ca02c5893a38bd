"""
SSH adapter — commands and file transfer against the prod host.

Every remote command is one synchronous ``ssh`` invocation carrying an
already-quoted script (see ``siteflow.core.services.commands.Script``).
There is no batching and no retry: a failed remote step leaves the
remote host as the last successful step left it.
"""

from __future__ import annotations

import logging
import shutil

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.adapters.shell.command import Echo, receipt_for
from siteflow.core.models.action import Receipt

logger = logging.getLogger(__name__)

SSH_OPTIONS = ("-o", "BatchMode=yes")


class SshAdapter(Adapter):
    """Remote execution over ssh/scp/rsync.

    Action params:
        operation (str): One of 'run', 'copy', 'mirror'.
        target (str): ``user@host``.
        script (str): Quoted remote command line (for 'run').
        source (str): Local path (for 'copy' and 'mirror').
        dest (str): Remote path (for 'copy' and 'mirror').
        excludes (list[str]): rsync exclude patterns (for 'mirror').
        ssh / scp / rsync (str): Executables.
    """

    remote = True
    _OPERATIONS = {"run", "copy", "mirror"}

    def __init__(self, echo: Echo | None = None):
        self._echo = echo

    @property
    def name(self) -> str:
        return "ssh"

    def is_available(self) -> bool:
        return shutil.which("ssh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in self._OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self._OPERATIONS))}"
        if not params.get("target"):
            return False, "Missing required param: 'target'"
        if operation == "run" and not params.get("script"):
            return False, "Missing required param: 'script' for run"
        if operation in ("copy", "mirror") and not (params.get("source") and params.get("dest")):
            return False, f"Missing required params: 'source' and 'dest' for {operation}"
        return True, ""

    def argv(self, params: dict) -> list[str]:
        target = params["target"]
        operation = params["operation"]

        if operation == "run":
            return [params.get("ssh", "ssh"), *SSH_OPTIONS, target, params["script"]]
        if operation == "copy":
            return [params.get("scp", "scp"), *SSH_OPTIONS, params["source"], f"{target}:{params['dest']}"]

        argv = [params.get("rsync", "rsync"), "-az", "-e", " ".join([params.get("ssh", "ssh"), *SSH_OPTIONS])]
        for pattern in params.get("excludes", []):
            argv.append(f"--exclude={pattern}")
        argv += [params["source"], f"{target}:{params['dest']}"]
        return argv

    def execute(self, context: ExecutionContext) -> Receipt:
        return receipt_for(self.name, context, self.argv(context.action.params), self._echo)
