"""
Adapter protocol — how siteflow reaches git, composer, drush, ssh and the
local filesystem.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from siteflow.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An Action bound to the project it runs in.

    Commands run in ``project_root`` unless the action passes ``cwd``.
    """

    action: Action
    project_root: str = "."
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str:
        return self.params.get("cwd") or self.project_root


class Adapter(ABC):
    """One external tool.

    ``execute`` reports every failure (non-zero exit, missing program,
    unreadable file) as a failed Receipt instead of raising.
    """

    # True when the adapter changes another host. Its failures are
    # reported as remote failures, since the remote side may be half done.
    remote: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, referenced by ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying program is installed."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action's params. Returns (ok, problem)."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r}>"
