"""
CLI command for promoting a dev project to production.

Thin wrapper over ``siteflow.core.use_cases.go_live``.
"""

from __future__ import annotations

import click

from siteflow.ui.cli.common import finish, load_project, make_operator, make_registry


@click.command("go-live")
@click.pass_context
def go_live(ctx: click.Context) -> None:
    """Copy this dev project to its prod account and switch it live."""
    from siteflow.core.use_cases.go_live import go_live as run_go_live

    project = load_project(ctx)
    registry = make_registry(ctx)
    finish(project, registry, run_go_live(project, registry, make_operator(ctx)))
