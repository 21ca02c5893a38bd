"""
Tests for the step pipeline — ordering, stop-on-failure, partial state.
"""

from pathlib import Path

from siteflow.adapters.mock import MockAdapter
from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.engine.pipeline import (
    PipelineRun,
    command_step,
    local_step,
    remote_step,
    run_steps,
    write_audit_entry,
)
from siteflow.core.models import Failure, FailureKind, ToolPaths
from siteflow.core.persistence.audit import AuditWriter
from siteflow.core.services.commands import Command, Script


def _steps(*names: str):
    return [command_step(n, Command.of("true", n)) for n in names]


def _registry(*adapters) -> AdapterRegistry:
    registry = AdapterRegistry()
    for adapter in adapters:
        registry.register(adapter)
    return registry


class TestRunSteps:
    def test_all_steps_in_order(self, installed_root: Path, make_ctx, operator):
        shell = MockAdapter("shell")
        run = PipelineRun("test")
        assert run_steps(run, _steps("A", "B", "C"), _registry(shell), make_ctx(installed_root), operator) is None
        assert shell.called_names == ["A", "B", "C"]
        assert run.completed == ["A", "B", "C"]
        assert run.current_index == 3
        assert run.status == "ok"
        assert operator.steps == ["A", "B", "C"]

    def test_stops_at_first_failure(self, installed_root: Path, make_ctx):
        shell = MockAdapter("shell")
        shell.set_failure("B", "exited with code 1")
        run = PipelineRun("test")

        failure = run_steps(run, _steps("A", "B", "C"), _registry(shell), make_ctx(installed_root))

        assert shell.called_names == ["A", "B"]
        assert run.completed == ["A"]
        assert run.current_index == 1
        assert run.steps == ["A", "B", "C"]
        assert failure.kind is FailureKind.STEP
        assert failure.step == "B"
        assert "exited with code 1" in failure.reason
        assert run.status == "failed"
        assert len(run.receipts) == 2

    def test_remote_failure_kind(self, installed_root: Path, make_ctx):
        ssh = MockAdapter("ssh", remote=True)
        ssh.set_failure("clone")
        step = remote_step(ToolPaths(), "acme@prod01", "clone", Script.in_dir("/srv", Command.of("git", "clone")))

        run = PipelineRun("test")
        failure = run_steps(run, [step], _registry(ssh), make_ctx(installed_root))

        assert failure.kind is FailureKind.REMOTE
        assert failure.exit_code == 5
        assert failure.is_step_failure

    def test_in_process_step(self, installed_root: Path, make_ctx):
        seen = []
        run = PipelineRun("test")
        run_steps(run, [local_step("touch", lambda: seen.append(1) or "done")], _registry(), make_ctx(installed_root))
        assert seen == [1]
        assert run.receipts[0].output == "done"

    def test_in_process_exception_fails_step(self, installed_root: Path, make_ctx):
        def boom():
            raise OSError("disk full")

        shell = MockAdapter("shell")
        run = PipelineRun("test")
        steps = [local_step("write", boom), *_steps("after")]
        failure = run_steps(run, steps, _registry(shell), make_ctx(installed_root))

        assert failure.step == "write"
        assert "disk full" in failure.reason
        assert shell.call_count == 0

    def test_dry_run_executes_nothing(self, installed_root: Path, make_ctx):
        shell = MockAdapter("shell")
        registry = AdapterRegistry(dry_run=True)
        registry.register(shell)
        seen = []
        run = PipelineRun("test")
        steps = [*_steps("A"), local_step("local", lambda: seen.append(1))]

        assert run_steps(run, steps, registry, make_ctx(installed_root)) is None
        assert shell.call_count == 0
        assert seen == []
        assert [r.status for r in run.receipts] == ["skipped", "skipped"]
        assert "[dry-run] true A" in run.receipts[0].output

    def test_successive_batches_share_one_index(self, installed_root: Path, make_ctx):
        shell = MockAdapter("shell")
        shell.set_failure("D")
        ctx = make_ctx(installed_root)
        run = PipelineRun("test")
        run_steps(run, _steps("A", "B"), _registry(shell), ctx)
        run_steps(run, _steps("C", "D", "E"), _registry(shell), ctx)
        assert run.steps == ["A", "B", "C", "D", "E"]
        assert run.current_index == 3
        assert run.completed == ["A", "B", "C"]


class TestPipelineRun:
    def test_abort_is_not_a_step_failure(self):
        run = PipelineRun("push").abort(Failure.drift("Environment is behind origin repository."))
        assert run.status == "aborted"
        assert run.failed_step is None
        assert not run.ok

    def test_absorb(self, installed_root: Path, make_ctx):
        shell = MockAdapter("shell")
        shell.set_failure("sub-2")
        ctx = make_ctx(installed_root)

        outer = PipelineRun("outer")
        run_steps(outer, _steps("outer-1"), _registry(shell), ctx)
        sub = PipelineRun("sub")
        run_steps(sub, _steps("sub-1", "sub-2"), _registry(shell), ctx)

        failure = outer.absorb(sub)
        assert failure.step == "sub-2"
        assert outer.steps == ["outer-1", "sub-1", "sub-2"]
        assert outer.completed == ["outer-1", "sub-1"]
        assert outer.current_index == 2
        assert outer.failure is failure

    def test_to_dict(self):
        run = PipelineRun("install")
        data = run.to_dict()
        assert data["workflow"] == "install"
        assert data["status"] == "ok"
        assert data["run_id"].startswith("run-")


class TestAuditEntry:
    def test_failed_run_is_recorded(self, installed_root: Path, make_ctx, tmp_path: Path):
        shell = MockAdapter("shell")
        shell.set_failure("B")
        ctx = make_ctx(installed_root)
        run = PipelineRun("install")
        run_steps(run, _steps("A", "B"), _registry(shell), ctx)

        writer = AuditWriter(tmp_path / "audit.ndjson")
        write_audit_entry(run, ctx, writer)

        entry = writer.read_all()[0]
        assert entry.workflow == "install"
        assert entry.project == "example"
        assert entry.tier == "dev"
        assert entry.status == "failed"
        assert entry.steps_total == 2
        assert entry.steps_completed == ["A"]
        assert entry.failed_step == "B"
        assert entry.failure_kind == "step_failure"
