"""
Step pipeline — the ordered execution loop behind every workflow.

A workflow builds a list of Steps and hands them to ``run_steps``, which
executes them strictly in order through the adapter registry and stops
at the first failure. Nothing is rolled back: the PipelineRun records
exactly which steps completed and which one failed, and that record is
what the operator (and the audit ledger) get to see.

Flow:
    gates → drift checks → steps → PipelineRun → audit entry
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable

from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.models.action import Action, Receipt
from siteflow.core.models.config import ToolPaths
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.outcome import Failure, FailureKind
from siteflow.core.operator import Operator
from siteflow.core.persistence.audit import AuditEntry, AuditWriter
from siteflow.core.services.commands import Command, Script

logger = logging.getLogger(__name__)


@dataclass
class Step:
    """A named unit of work.

    Exactly one of ``action`` (dispatched to an adapter) or ``func``
    (run in-process, may return an output line) is set.
    """

    name: str
    action: Action | None = None
    func: Callable[[], str | None] | None = None


@dataclass
class PipelineRun:
    """Progress and outcome of one workflow invocation."""

    workflow: str
    run_id: str = field(default_factory=lambda: generate_run_id())
    steps: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)
    current_index: int = -1
    receipts: list[Receipt] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    failure: Failure | None = None
    started: float = field(default_factory=time.monotonic)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def status(self) -> str:
        if self.failure is None:
            return "ok"
        if self.failure.is_step_failure:
            return "failed"
        return "aborted"

    @property
    def failed_step(self) -> str | None:
        return self.failure.step if self.failure else None

    @property
    def duration_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

    def abort(self, failure: Failure) -> PipelineRun:
        """Record a failure raised outside the step loop."""
        self.failure = failure
        logger.info("%s stopped: %s", self.workflow, failure.reason)
        return self

    def note(self, message: str) -> None:
        self.messages.append(message)

    def absorb(self, sub: PipelineRun) -> Failure | None:
        """Merge a sub-workflow's progress into this run."""
        offset = len(self.steps)
        self.steps.extend(sub.steps)
        self.completed.extend(sub.completed)
        self.receipts.extend(sub.receipts)
        self.messages.extend(sub.messages)
        if sub.current_index >= 0:
            self.current_index = offset + sub.current_index
        if sub.failure is not None:
            self.failure = sub.failure
        return sub.failure

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "workflow": self.workflow,
            "status": self.status,
            "steps": self.steps,
            "completed": self.completed,
            "current_index": self.current_index,
            "failure": self.failure.to_dict() if self.failure else None,
            "messages": self.messages,
        }


def generate_run_id() -> str:
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return f"run-{now}-{uuid.uuid4().hex[:6]}"


def run_steps(
    run: PipelineRun,
    steps: list[Step],
    registry: AdapterRegistry,
    ctx: ProjectContext,
    operator: Operator | None = None,
) -> Failure | None:
    """Execute ``steps`` in order, stopping at the first failure.

    ``run.current_index`` points at the step being executed, the step
    that failed, or one past the last step once all of them completed.

    Returns:
        The Failure that stopped the run, or None.
    """
    base = len(run.steps)
    run.steps.extend(s.name for s in steps)

    for i, step in enumerate(steps):
        run.current_index = base + i
        if operator is not None:
            operator.step(step.name)

        receipt = _execute(step, registry, ctx)
        run.receipts.append(receipt)

        marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.info("%s %s:%s → %s", marker, run.workflow, step.name, receipt.status)

        if receipt.failed:
            kind = FailureKind.STEP
            if step.action is not None and registry.is_remote(step.action.adapter):
                kind = FailureKind.REMOTE
            run.failure = Failure(kind, f"{step.name} failed: {receipt.error}", step=step.name)
            return run.failure

        run.completed.append(step.name)

    run.current_index = len(run.steps)
    return None


def _execute(step: Step, registry: AdapterRegistry, ctx: ProjectContext) -> Receipt:
    if step.action is not None:
        return registry.execute_action(step.action, project_root=str(ctx.root))

    assert step.func is not None
    if registry.dry_run:
        return Receipt.skip(adapter="local", action_id=step.name, reason=f"[dry-run] {step.name}")
    try:
        output = step.func() or ""
    except Exception as e:
        logger.debug("In-process step %s raised", step.name, exc_info=True)
        return Receipt.failure(adapter="local", action_id=step.name, error=str(e) or type(e).__name__)
    return Receipt.success(adapter="local", action_id=step.name, output=output)


# ── Step builders ───────────────────────────────────────────────────


def _action_id(name: str) -> str:
    return "-".join(name.lower().split())


def command_step(name: str, command: Command, quiet: bool = False) -> Step:
    """A local program run by the shell adapter."""
    return Step(name, Action(
        id=_action_id(name),
        name=name,
        adapter="shell",
        params={"argv": command.argv, "quiet": quiet, "display": command.render()},
    ))


def drush_step(ctx: ProjectContext, name: str, *args: str) -> Step:
    return command_step(name, Command.of(ctx.config.tools.drush, *args))


def composer_step(ctx: ProjectContext, name: str, *args: str) -> Step:
    return command_step(name, Command.of(ctx.config.tools.composer, *args))


def git_step(ctx: ProjectContext, name: str, operation: str, **params: str) -> Step:
    params = {
        "operation": operation,
        "remote": ctx.config.git.remote,
        "branch": ctx.config.git.branch,
        "executable": ctx.config.tools.git,
        **params,
    }
    return Step(name, Action(id=_action_id(name), name=name, adapter="git", params=params))


def file_step(name: str, operation: str, path: str, **params: object) -> Step:
    return Step(name, Action(
        id=_action_id(name),
        name=name,
        adapter="filesystem",
        params={"operation": operation, "path": path, **params},
    ))


def _ssh_params(tools: ToolPaths, target: str) -> dict[str, str]:
    return {"target": target, "ssh": tools.ssh, "scp": tools.scp, "rsync": tools.rsync}


def remote_step(tools: ToolPaths, target: str, name: str, script: Script) -> Step:
    """One ssh invocation running ``script`` on ``target``."""
    return Step(name, Action(
        id=_action_id(name),
        name=name,
        adapter="ssh",
        params={
            **_ssh_params(tools, target),
            "operation": "run",
            "script": script.render(),
            "display": f"ssh {target} {script.render()}",
        },
    ))


def upload_step(tools: ToolPaths, target: str, name: str, source: str, dest: str) -> Step:
    return Step(name, Action(
        id=_action_id(name),
        name=name,
        adapter="ssh",
        params={**_ssh_params(tools, target), "operation": "copy", "source": source, "dest": dest},
    ))


def mirror_step(
    tools: ToolPaths,
    target: str,
    name: str,
    source: str,
    dest: str,
    excludes: list[str],
) -> Step:
    return Step(name, Action(
        id=_action_id(name),
        name=name,
        adapter="ssh",
        params={
            **_ssh_params(tools, target),
            "operation": "mirror",
            "source": source,
            "dest": dest,
            "excludes": list(excludes),
        },
    ))


def local_step(name: str, func: Callable[[], str | None]) -> Step:
    return Step(name, func=func)


# ── Audit ───────────────────────────────────────────────────────────


def write_audit_entry(run: PipelineRun, ctx: ProjectContext, writer: AuditWriter) -> None:
    """Append the outcome of ``run`` to the audit ledger."""
    failure = run.failure
    writer.write(AuditEntry(
        run_id=run.run_id,
        workflow=run.workflow,
        project=ctx.project_name,
        tier=ctx.tier.value,
        status=run.status,
        steps_total=len(run.steps),
        steps_completed=list(run.completed),
        duration_ms=run.duration_ms,
        failure_kind=failure.kind.value if failure else None,
        failure_reason=failure.reason if failure else None,
        failed_step=failure.step if failure else None,
    ))
