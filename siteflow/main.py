"""
siteflow — CLI entrypoint.

Usage:
    siteflow --help
    siteflow status
    siteflow push "Add contact form"
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import click

from siteflow import __version__
from siteflow.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="siteflow")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    envvar="SITEFLOW_CONFIG",
    help="Path to siteflow.yml (default: auto-detect).",
)
@click.option("--dry-run", is_flag=True, help="Show the steps without running them.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    dry_run: bool,
) -> None:
    """siteflow — set up, sync and launch Drupal sites."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["dry_run"] = dry_run

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("SITEFLOW_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("SITEFLOW_LOG_FILE"),
        log_file_level=os.environ.get("SITEFLOW_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--drift", "with_drift", is_flag=True, help="Also fetch and compare with the repository.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, with_drift: bool, as_json: bool) -> None:
    """Show tier, project and settings of the current directory."""
    from siteflow.core.use_cases.status import get_status
    from siteflow.ui.cli.common import load_project, make_registry

    project = load_project(ctx)
    registry = make_registry(ctx)
    result = get_status(project, registry, with_drift=with_drift)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    tier_color = {"dev": "green", "prod": "magenta"}.get(project.tier.value, "yellow")
    click.secho(f"\n📋 {project.project_name or project.root.name}", fg="cyan", bold=True)
    click.echo(f"   Root: {project.root}")
    click.echo("   Tier: ", nl=False)
    click.secho(project.tier.value, fg=tier_color, bold=True)
    click.echo(f"   Host: {project.hostname}")
    if project.family_name:
        click.echo(f"   Family: {project.family_name}")

    click.echo()
    click.secho(f"   Settings: {project.settings_path}", fg="white", bold=True)
    if not result.settings:
        click.echo("     (none)")
    for key, value in result.settings.items():
        click.echo(f"     • {key} = {value}")

    missing = [name for name, available in result.tools.items() if not available]
    if missing:
        click.echo()
        click.secho(f"   ⚠️  Tools not found: {', '.join(missing)}", fg="yellow")

    if result.drift is not None:
        click.echo()
        drift_color = "green" if result.drift.clean else "yellow"
        click.echo("   Repository: ", nl=False)
        click.secho(result.drift.tag.value, fg=drift_color)
        if result.drift.detail:
            click.echo(f"     {result.drift.detail}")

    if result.last_run is not None:
        run = result.last_run
        status_color = {"ok": "green", "failed": "red", "aborted": "yellow"}.get(run.status, "white")
        click.echo()
        click.secho("   Last run:", fg="white", bold=True)
        click.echo(f"     {run.workflow} — ", nl=False)
        click.secho(run.status, fg=status_color)
        click.echo(f"     at {run.timestamp}")
        if run.failure_reason:
            click.echo(f"     {run.failure_reason}")

    click.echo()


# ── Register workflow commands from siteflow/ui/cli/ ──────────────

from siteflow.ui.cli.golive import go_live
from siteflow.ui.cli.history import history
from siteflow.ui.cli.kickoff import init_dev, init_git, install
from siteflow.ui.cli.sync import pull, push, update

cli.add_command(init_dev)
cli.add_command(install)
cli.add_command(init_git)
cli.add_command(push)
cli.add_command(pull)
cli.add_command(update)
cli.add_command(update, name="sync")
cli.add_command(go_live)
cli.add_command(history)


if __name__ == "__main__":
    cli()
