"""
CLI commands for project kickoff on the dev server.

Thin wrappers over ``siteflow.core.use_cases.kickoff``.
"""

from __future__ import annotations

import click

from siteflow.ui.cli.common import finish, load_project, make_operator, make_registry


@click.command("init-dev")
@click.pass_context
def init_dev(ctx: click.Context) -> None:
    """Create the settings files a new dev project needs."""
    from siteflow.core.use_cases.kickoff import init_dev as run_init_dev

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_init_dev(project, registry, make_operator(ctx)))


@click.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """Install the site from its exported configuration."""
    from siteflow.core.use_cases.kickoff import install as run_install

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_install(project, registry, make_operator(ctx)))


@click.command("init-git")
@click.pass_context
def init_git(ctx: click.Context) -> None:
    """Connect the project to its repository and push the initial commit."""
    from siteflow.core.use_cases.kickoff import init_git as run_init_git

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_init_git(project, registry, make_operator(ctx)))
