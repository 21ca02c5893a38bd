"""
Shared plumbing for the workflow commands: build the project context,
wire the adapters, report the outcome, write the audit entry.

Tests inject collaborators through ``ctx.obj``:

    runner.invoke(cli, ["install"], obj={"cwd": root, "hostname": "dev", "registry": reg})
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from siteflow.adapters.registry import AdapterRegistry, default_registry
from siteflow.core.config.loader import ConfigError, load_config
from siteflow.core.context import build_context
from siteflow.core.engine.pipeline import PipelineRun, write_audit_entry
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.outcome import Failure
from siteflow.core.persistence.audit import AuditWriter
from siteflow.ui.cli.operator import ClickOperator

logger = logging.getLogger(__name__)


def _echo_output(line: str) -> None:
    click.echo(f"   {line}")


def load_project(ctx: click.Context) -> ProjectContext:
    """Load siteflow.yml and classify the working directory.

    Exits with the configuration error code when either fails.
    """
    obj = ctx.obj
    cwd: Path | None = obj.get("cwd")
    try:
        config = load_config(path=obj.get("config_path"), start_dir=cwd)
        return build_context(config, cwd=cwd, hostname=obj.get("hostname"))
    except ConfigError as e:
        failure = Failure.config(str(e))
        click.secho(f"❌ {failure.reason}", fg="red")
        sys.exit(failure.exit_code)


def make_registry(ctx: click.Context) -> AdapterRegistry:
    registry = ctx.obj.get("registry")
    if registry is not None:
        return registry
    echo = None if ctx.obj.get("quiet") else _echo_output
    return default_registry(echo=echo, dry_run=ctx.obj.get("dry_run", False))


def make_operator(ctx: click.Context) -> ClickOperator:
    return ctx.obj.get("operator") or ClickOperator(quiet=ctx.obj.get("quiet", False))


def finish(project: ProjectContext, registry: AdapterRegistry, run: PipelineRun) -> None:
    """Audit the run, print its outcome and exit with its code."""
    if project.tier.known and not registry.dry_run:
        write_audit_entry(run, project, AuditWriter(project.path(project.config.audit_file)))

    failure = run.failure
    if failure is None:
        for message in run.messages:
            click.secho(f"✅ {message}", fg="green", bold=True)
        return

    for message in run.messages:
        click.echo(f"   {message}")
    click.secho(f"❌ {failure.reason}", fg="red")
    if failure.is_step_failure:
        done = ", ".join(run.completed) or "none"
        click.echo(f"   Completed steps: {done}")
        click.echo(f"   Stopped at step {run.current_index + 1} of {len(run.steps)}: {failure.step}")
    logger.debug("Run %s: %s", run.run_id, run.to_dict())
    sys.exit(failure.exit_code)
