"""
Adapter registry — the one door between pipeline steps and external tools.

Steps and drift checks never call an adapter directly. They hand an
Action to ``execute_action``, which picks the adapter by name, validates
the parameters, honours ``--dry-run`` and always returns a Receipt.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the dry-run switch for a whole invocation."""

    def __init__(self, dry_run: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def is_remote(self, name: str) -> bool:
        """Whether a failure of this adapter happened on the production host."""
        adapter = self._adapters.get(name)
        return bool(adapter and adapter.remote)

    def tool_availability(self) -> dict[str, bool]:
        """Adapter name → whether its program (git, ssh, ...) is on PATH."""
        return {name: adapter.is_available() for name, adapter in self._adapters.items()}

    def execute_action(self, action: Action, project_root: str = ".") -> Receipt:
        """Run ``action`` through its adapter. Never raises."""
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(
            action=action,
            project_root=project_root,
            dry_run=self._dry_run,
            params=action.params,
        )
        ok, problem = adapter.validate(context)
        if not ok:
            logger.error("Invalid action %s: %s", action.id, problem)
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {problem}",
            )

        if self._dry_run:
            logger.info("Dry run, skipping %s", action.display)
            return Receipt.skip(adapter=action.adapter, action_id=action.id,
                                reason=f"[dry-run] {action.display}")

        start = time.monotonic()
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.exception("Adapter %s raised on %s", action.adapter, action.id)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt


def default_registry(echo: Callable[[str], None] | None = None, dry_run: bool = False) -> AdapterRegistry:
    """A registry wired to the real tools, streaming output through ``echo``."""
    from siteflow.adapters.remote.ssh import SshAdapter
    from siteflow.adapters.shell.command import ShellCommandAdapter
    from siteflow.adapters.shell.filesystem import FilesystemAdapter
    from siteflow.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry(dry_run=dry_run)
    registry.register(ShellCommandAdapter(echo=echo))
    registry.register(FilesystemAdapter())
    registry.register(GitAdapter(echo=echo))
    registry.register(SshAdapter(echo=echo))
    return registry
