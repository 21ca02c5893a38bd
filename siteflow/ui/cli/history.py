"""
CLI command for reading the audit ledger.
"""

from __future__ import annotations

import json

import click

from siteflow.ui.cli.common import load_project

_STATUS_COLORS = {"ok": "green", "failed": "red", "aborted": "yellow"}


@click.command()
@click.option("-n", "count", default=10, type=int, help="Number of runs.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show the most recent workflow runs in this project."""
    from siteflow.core.persistence.audit import AuditWriter

    project = load_project(ctx)
    entries = AuditWriter(project.path(project.config.audit_file)).read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No runs recorded yet.")
        return

    for entry in entries:
        click.echo(f"{entry.timestamp[:19]}  {entry.workflow:<9} ", nl=False)
        click.secho(f"{entry.status:<8}", fg=_STATUS_COLORS.get(entry.status, "white"), nl=False)
        click.echo(f" {len(entry.steps_completed)}/{entry.steps_total} steps")
        if entry.failure_reason:
            click.echo(f"      {entry.failure_reason}")
