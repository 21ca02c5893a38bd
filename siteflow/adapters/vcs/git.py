"""
Git adapter — version control operations.

Provides the git operations the workflows need through the adapter
protocol. Uses the git CLI — never raw API calls.
"""

from __future__ import annotations

import logging
import shutil

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.adapters.shell.command import Echo, receipt_for
from siteflow.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """Git version control operations.

    Action params:
        operation (str): One of 'fetch', 'status', 'init', 'remote_add',
                         'push', 'pull', 'clean'.
        remote (str): Remote name (default: 'origin').
        branch (str): Branch (for 'push' and 'pull').
        url (str): Remote URL (for 'remote_add').
        path (str): Path to clean (for 'clean').
        executable (str): git binary (default: 'git').
    """

    _OPERATIONS = {"fetch", "status", "init", "remote_add", "push", "pull", "clean"}

    def __init__(self, echo: Echo | None = None):
        self._echo = echo

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in self._OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self._OPERATIONS))}"
        if operation == "remote_add" and not params.get("url"):
            return False, "Missing required param: 'url' for remote_add"
        if operation == "clean" and not params.get("path"):
            return False, "Missing required param: 'path' for clean"
        return True, ""

    def argv(self, params: dict) -> list[str]:
        git = params.get("executable", "git")
        remote = params.get("remote", "origin")
        branch = params.get("branch", "master")
        operation = params["operation"]

        if operation == "fetch":
            return [git, "fetch", remote]
        if operation == "status":
            return [git, "status"]
        if operation == "init":
            return [git, "init"]
        if operation == "remote_add":
            return [git, "remote", "add", remote, params["url"]]
        if operation == "push":
            return [git, "push", remote, branch]
        if operation == "pull":
            return [git, "pull", remote, branch]
        return [git, "clean", "-fd", params["path"]]

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        # status output is parsed, not shown
        echo = None if params["operation"] in ("status", "fetch") else self._echo
        return receipt_for(self.name, context, self.argv(params), echo)
