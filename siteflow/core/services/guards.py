"""
Precondition gates.

A gate is a predicate over the ProjectContext plus filesystem probes. It
returns None when satisfied and a precondition Failure otherwise. All
gates configured for a command must pass before any of its steps run;
``evaluate`` stops at the first one that does not.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from siteflow.core.models.context import ProjectContext
from siteflow.core.models.outcome import Failure

logger = logging.getLogger(__name__)

Gate = Callable[[ProjectContext], "Failure | None"]


def evaluate(ctx: ProjectContext, gates: Iterable[Gate]) -> Failure | None:
    for gate in gates:
        failure = gate(ctx)
        if failure is not None:
            logger.info("Precondition failed: %s", failure.reason)
            return failure
    return None


def files_present(*relative: str, reason: str) -> Gate:
    """All of the given paths (relative to the project root) must exist."""

    def gate(ctx: ProjectContext) -> Failure | None:
        missing = [p for p in relative if not ctx.path(p).exists()]
        if missing:
            logger.debug("Missing: %s", ", ".join(missing))
            return Failure.precondition(reason)
        return None

    return gate


def files_absent(*relative: str, reason: str) -> Gate:
    """None of the given paths may exist."""

    def gate(ctx: ProjectContext) -> Failure | None:
        if any(ctx.path(p).exists() for p in relative):
            return Failure.precondition(reason)
        return None

    return gate


def directory_present(relative: str, reason: str) -> Gate:
    def gate(ctx: ProjectContext) -> Failure | None:
        if not ctx.path(relative).is_dir():
            return Failure.precondition(reason)
        return None

    return gate


def settings_keys_unset(*keys: str, reason: str) -> Gate:
    """None of ``keys`` may carry a value in the layered settings."""

    def gate(ctx: ProjectContext) -> Failure | None:
        if any(ctx.settings.get(k) for k in keys):
            return Failure.precondition(reason)
        return None

    return gate

