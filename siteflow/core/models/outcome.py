"""
Typed failure outcome — what ended a workflow, and why.

Every gate, drift check and pipeline step reports its result as either
``None`` (passed) or a ``Failure``. Workflows stop at the first Failure
and hand it to the CLI, which maps the kind to an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    PRECONDITION = "precondition_violation"
    DRIFT = "drift_conflict"
    USER_ABORT = "user_abort"
    STEP = "step_failure"
    REMOTE = "remote_execution_failure"
    CONFIG = "configuration_error"


_EXIT_CODES = {
    FailureKind.STEP: 1,
    FailureKind.PRECONDITION: 2,
    FailureKind.DRIFT: 3,
    FailureKind.USER_ABORT: 4,
    FailureKind.REMOTE: 5,
    FailureKind.CONFIG: 6,
}


@dataclass(frozen=True)
class Failure:
    """Why a workflow stopped.

    ``step`` names the pipeline step for step/remote failures and is
    None for failures raised before any step ran.
    """

    kind: FailureKind
    reason: str
    step: str | None = None

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.kind]

    @property
    def is_step_failure(self) -> bool:
        """Remote failures are a subtype of step failures."""
        return self.kind in (FailureKind.STEP, FailureKind.REMOTE)

    @classmethod
    def precondition(cls, reason: str) -> Failure:
        return cls(FailureKind.PRECONDITION, reason)

    @classmethod
    def drift(cls, reason: str) -> Failure:
        return cls(FailureKind.DRIFT, reason)

    @classmethod
    def user_abort(cls, reason: str) -> Failure:
        return cls(FailureKind.USER_ABORT, reason)

    @classmethod
    def config(cls, reason: str) -> Failure:
        return cls(FailureKind.CONFIG, reason)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "reason": self.reason, "step": self.step}
