"""
Sync use cases — move configuration and code through the shared repository.

    push    → export active config, commit, push
    pull    → pull, install dependencies, deploy (under maintenance mode)
    update  → update dependencies and the database on dev, export the result

push and pull check for repository drift first; pull also checks for
config that was changed in the database but never exported.
"""

from __future__ import annotations

import logging
from datetime import datetime

from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.engine.pipeline import (
    PipelineRun,
    command_step,
    composer_step,
    drush_step,
    git_step,
    run_steps,
)
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.drift import DriftTag
from siteflow.core.models.outcome import Failure, FailureKind
from siteflow.core.operator import Operator
from siteflow.core.services.classifier import ensure_any_project_dir, ensure_dev
from siteflow.core.services.commands import Command
from siteflow.core.services.drift import (
    check_config_drift,
    check_repo_drift,
    conflict_for_pull,
    conflict_for_push,
)
from siteflow.core.services.guards import evaluate

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("A commit message is required")
    return value


def default_commit_message(ctx: ProjectContext, now: datetime | None = None) -> str | None:
    """``Sync from <ENV> on <timestamp>``, or None when ENV is not set."""
    env = ctx.setting("ENV")
    if not env:
        return None
    return f"Sync from {env} on {(now or datetime.now()).strftime(TIMESTAMP_FORMAT)}"


def push(
    ctx: ProjectContext,
    registry: AdapterRegistry,
    operator: Operator,
    message: str | None = None,
) -> PipelineRun:
    """Export config with a commit and push it to the shared repository."""
    run = PipelineRun("push")

    failure = evaluate(ctx, [ensure_any_project_dir])
    if failure:
        return run.abort(failure)

    failure = conflict_for_push(check_repo_drift(ctx, registry))
    if failure:
        return run.abort(failure)

    if not message:
        message = default_commit_message(ctx)
    if not message:
        message = operator.ask("Commit message", validate=_required)

    steps = [
        drush_step(ctx, "drush config:export", "config:export", "-y", "--commit",
                   f"--message={message}"),
        git_step(ctx, "git push", "push"),
    ]
    if run_steps(run, steps, registry, ctx, operator):
        return run

    run.note("Pushed to origin repository.")
    return run


def pull(ctx: ProjectContext, registry: AdapterRegistry, operator: Operator) -> PipelineRun:
    """Bring this environment up to the state of the shared repository."""
    run = PipelineRun("pull")

    failure = evaluate(ctx, [ensure_any_project_dir])
    if failure:
        return run.abort(failure)

    failure = conflict_for_pull(check_repo_drift(ctx, registry))
    if failure:
        return run.abort(failure)

    config_report = check_config_drift(ctx, registry)
    if config_report.tag is DriftTag.UNKNOWN:
        return run.abort(Failure(
            FailureKind.STEP,
            f"Could not compare active config with the sync directory: {config_report.detail}",
            step="drush config:status",
        ))
    if not config_report.clean:
        operator.show("Config changes between DB and sync directory", config_report.detail)
        if not operator.confirm(
            "If you continue you'll lose the changes in active config. Continue?",
            default=False,
        ):
            return run.abort(Failure.user_abort("Aborted due to changes in active config."))

    steps = [
        drush_step(ctx, "maintenance mode on", "state:set", "system.maintenance_mode", "1"),
        git_step(ctx, "git pull", "pull"),
        git_step(ctx, "git clean config", "clean", path=ctx.config.config_sync_dir),
        composer_step(ctx, "composer install", "install", "--no-dev", "--prefer-dist"),
        drush_step(ctx, "drush deploy", "deploy"),
        drush_step(ctx, "maintenance mode off", "state:set", "system.maintenance_mode", "0"),
    ]
    if run_steps(run, steps, registry, ctx, operator):
        if "maintenance mode on" in run.completed:
            run.note("The site is still in maintenance mode.")
        return run

    run.note("Pulled everything from origin repository.")
    return run


def update(ctx: ProjectContext, registry: AdapterRegistry, operator: Operator) -> PipelineRun:
    """Update dependencies and the database on dev, then export the resulting config."""
    run = PipelineRun("update")

    failure = evaluate(ctx, [ensure_dev])
    if failure:
        return run.abort(failure)

    failure = conflict_for_push(check_repo_drift(ctx, registry))
    if failure:
        return run.abort(failure)

    steps = []
    merge = ctx.config.install.manifest_merge_command
    if merge:
        steps.append(command_step("merge package manifest", Command.of(*merge)))
    steps += [
        composer_step(ctx, "composer update", "update"),
        drush_step(ctx, "drush updatedb", "updatedb", "-y"),
        drush_step(ctx, "drush cache:rebuild", "cache:rebuild"),
        drush_step(ctx, "drush config:export", "config:export", "-y"),
    ]
    if run_steps(run, steps, registry, ctx, operator):
        return run

    run.note('Dependencies and database updated. Review and "siteflow push" the exported config.')
    return run
