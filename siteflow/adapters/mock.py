"""
Mock adapter — universal test double for all adapter operations.

Configurable to return success, failure, or custom output per action,
keyed by action id or by step name.
"""

from __future__ import annotations

from typing import Callable

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.core.models.action import Receipt


class MockAdapter(Adapter):
    """Universal mock adapter for testing.

    By default, returns success for everything. ``on_execute`` is called
    for every action before the response is chosen, so a test can create
    the files a real tool would have created.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
        remote: bool = False,
        on_execute: Callable[[ExecutionContext], None] | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []
        self._on_execute = on_execute
        self.remote = remote

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def called_names(self) -> list[str]:
        """Step names of all executed actions, in order."""
        return [c.action.name for c in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, key: str, receipt: Receipt) -> None:
        """Set a custom response for an action id or step name."""
        self._responses[key] = receipt

    def set_output(self, key: str, output: str) -> None:
        self._responses[key] = Receipt.success(
            adapter=self._name, action_id=key, output=output,
        )

    def set_failure(self, key: str, error: str = "Mock failure") -> None:
        """Configure an action id or step name to fail."""
        self._responses[key] = Receipt.failure(
            adapter=self._name,
            action_id=key,
            error=error,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        if self._on_execute is not None:
            self._on_execute(context)

        action = context.action
        for key in (action.id, action.name):
            if key in self._responses:
                return self._responses[key].model_copy(update={"action_id": action.id})

        return Receipt.success(
            adapter=self._name,
            action_id=action.id,
            output=self._default_output,
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
