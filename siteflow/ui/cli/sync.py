"""
CLI commands for syncing through the shared repository.

Thin wrappers over ``siteflow.core.use_cases.sync``.
"""

from __future__ import annotations

import click

from siteflow.ui.cli.common import finish, load_project, make_operator, make_registry


@click.command()
@click.argument("message", required=False)
@click.pass_context
def push(ctx: click.Context, message: str | None) -> None:
    """Export config, commit it and push (like "drush cex && git push")."""
    from siteflow.core.use_cases.sync import push as run_push

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_push(project, registry, make_operator(ctx), message=message))


@click.command()
@click.pass_context
def pull(ctx: click.Context) -> None:
    """Pull, install dependencies and deploy (like "git pull && drush deploy")."""
    from siteflow.core.use_cases.sync import pull as run_pull

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_pull(project, registry, make_operator(ctx)))


@click.command()
@click.pass_context
def update(ctx: click.Context) -> None:
    """Update dependencies and the database on dev, then export config."""
    from siteflow.core.use_cases.sync import update as run_update

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_update(project, registry, make_operator(ctx)))
