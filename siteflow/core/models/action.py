"""
Action and Receipt — what a step asks an adapter to do, and what happened.

A pipeline step hands an Action to the registry; the adapter answers
with a Receipt. Adapters report failure through the receipt, they do
not raise.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One external operation: a drush call, a git command, an ssh script.

    ``params`` is the adapter's payload (``argv`` for the shell adapter,
    ``operation`` + ``script`` for ssh, ...). ``params["display"]`` is
    the human-readable command line shown in dry runs and logs.
    """

    id: str
    name: str = ""
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def display(self) -> str:
        return self.params.get("display") or self.name or self.id


class Receipt(BaseModel):
    """Outcome of one Action.

    ``output`` holds the combined stdout/stderr for commands, which the
    drift parsers read. ``return_code`` is None for actions that never
    reached a subprocess (validation errors, dry runs, in-process steps).
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    output: str = ""
    error: str | None = None
    command: str = ""
    return_code: int | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A step that was deliberately not run (dry run)."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
