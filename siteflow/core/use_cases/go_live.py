"""
Go-live — promote a dev project to its production account.

The promotion runs through fixed phases, strictly in order:

    preflight        ensure dev, show the checklist
    parameters       prompt for prod host, account, domain, database
    settings         persist them locally, build the prod settings file
    confirmation     show that file, last point to back out
    housekeeping     drush cron + cache:rebuild locally
    code             push, then clone/install/mirror on the prod host
    finalization     settings file, database, cache, prod settings
    post checklist   manual follow-ups

Any failure stops the promotion where it is. Nothing is rolled back;
the run records which steps completed so the operator can pick up from
there. Remote commands run one ssh invocation each.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.engine.pipeline import (
    PipelineRun,
    Step,
    drush_step,
    local_step,
    mirror_step,
    remote_step,
    run_steps,
    upload_step,
)
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.outcome import Failure
from siteflow.core.operator import Operator
from siteflow.core.persistence.settings_file import copy_settings, upsert_many
from siteflow.core.services.classifier import ensure_dev
from siteflow.core.services.commands import (
    Command,
    Script,
    validate_db_identifier,
    validate_domain,
    validate_host,
    validate_password,
    validate_user,
)
from siteflow.core.services.guards import evaluate, files_present
from siteflow.core.use_cases.sync import TIMESTAMP_FORMAT, push

logger = logging.getLogger(__name__)


# ── Parameters ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Parameter:
    key: str
    prompt: str
    validate: Callable[[str], str]
    hidden: bool = False
    default: str = ""


PARAMETERS: tuple[Parameter, ...] = (
    Parameter("PROD_HOST", "Prod host", validate_host),
    Parameter("PROD_USER", "Prod account name", validate_user),
    Parameter("PROD_DOMAIN", "Public domain (e.g. www.example.com)", validate_domain),
    Parameter("PROD_DB_NAME", "Prod database name", validate_db_identifier),
    Parameter("PROD_DB_USER", "Prod database user", validate_db_identifier),
    Parameter("PROD_DB_PASSWORD", "Prod database password", validate_password, hidden=True),
    Parameter("PROD_DB_HOST", "Prod database host", validate_host, default="localhost"),
)


@dataclass(frozen=True)
class GoLiveParameters:
    host: str
    user: str
    domain: str
    db_name: str
    db_user: str
    db_password: str
    db_host: str

    @property
    def target(self) -> str:
        return f"{self.user}@{self.host}"

    def as_settings(self) -> dict[str, str]:
        return {
            "PROD_HOST": self.host,
            "PROD_USER": self.user,
            "PROD_DOMAIN": self.domain,
            "PROD_DB_NAME": self.db_name,
            "PROD_DB_USER": self.db_user,
            "PROD_DB_PASSWORD": self.db_password,
            "PROD_DB_HOST": self.db_host,
        }

    def as_prod_settings(self) -> dict[str, str]:
        """What the site reads on the prod host."""
        return {
            **self.as_settings(),
            "DB_NAME": self.db_name,
            "DB_USER": self.db_user,
            "DB_PASSWORD": self.db_password,
            "DB_HOST": self.db_host,
            "ENV": "prod",
        }


def collect_parameters(ctx: ProjectContext, operator: Operator) -> GoLiveParameters:
    """Prompt for every parameter, offering the stored value as default."""
    values = {}
    for param in PARAMETERS:
        values[param.key] = operator.ask(
            param.prompt,
            default=ctx.setting(param.key, param.default),
            hidden=param.hidden,
            validate=param.validate,
        )
    return GoLiveParameters(
        host=values["PROD_HOST"],
        user=values["PROD_USER"],
        domain=values["PROD_DOMAIN"],
        db_name=values["PROD_DB_NAME"],
        db_user=values["PROD_DB_USER"],
        db_password=values["PROD_DB_PASSWORD"],
        db_host=values["PROD_DB_HOST"],
    )


def _bullets(lines: list[str], **fmt: str) -> str:
    return "\n".join(f"• {line.format(**fmt)}" for line in lines)


# ── Remote plan ─────────────────────────────────────────────────────


def remote_root(ctx: ProjectContext, params: GoLiveParameters) -> str:
    return ctx.config.go_live.remote_root_template.format(user=params.user)


def code_promotion_steps(ctx: ProjectContext, params: GoLiveParameters) -> list[Step]:
    """Prepare the prod account and put the code in place."""
    config = ctx.config
    tools = config.tools
    settings = config.go_live
    root = remote_root(ctx, params)
    target = params.target
    url = config.git.url_template.format(project=ctx.project_name, family=ctx.family_name)

    return [
        remote_step(tools, target, "remove placeholder files", Script.in_dir(
            root, Command.of("rm", "-rf", "--", *settings.placeholder_files),
        )),
        remote_step(tools, target, "register known hosts", Script.all_of(
            Command.of("mkdir", "-p", ".ssh"),
            Script.append_to(
                Command.of(tools.ssh_keyscan, "-H", *config.git.known_hosts),
                ".ssh/known_hosts",
            ),
        )),
        remote_step(tools, target, "add PATH to .bashrc", Script.either(
            Command.of("grep", "-qxF", "--", settings.path_line, ".bashrc"),
            Script.append_to(Command.of("printf", "%s\\n", settings.path_line), ".bashrc"),
        )),
        remote_step(tools, target, "git clone", Script.in_dir(
            root, Command.of(tools.git, "clone", url, "."),
        )),
        remote_step(tools, target, "composer install", Script.in_dir(
            root, Command.of(tools.composer, "install", "--no-dev", "--prefer-dist"),
        )),
        mirror_step(
            tools, target, "mirror untracked files",
            source=f"{ctx.root}/",
            dest=f"{root}/",
            excludes=[*settings.rsync_excludes, config.settings_file, settings.staging_file],
        ),
    ]


def finalization_steps(ctx: ProjectContext, params: GoLiveParameters) -> list[Step]:
    """Settings file, database and production settings on the prod host."""
    config = ctx.config
    tools = config.tools
    settings = config.go_live
    root = remote_root(ctx, params)
    target = params.target

    staging = ctx.path(settings.staging_file)
    dump = ctx.path(settings.dump_file + ".gz")
    remote_dump = dump.name

    steps = [
        upload_step(tools, target, "upload settings file",
                    source=str(staging), dest=f"{root}/{config.settings_file}"),
        local_step("remove local settings staging file", lambda: _remove(staging)),
        local_step("prepare dump directory", lambda: _make_dir(dump.parent)),
        drush_step(ctx, "drush sql:dump", "sql:dump", "--gzip",
                   f"--result-file={ctx.path(settings.dump_file)}"),
        upload_step(tools, target, "upload database dump",
                    source=str(dump), dest=f"{root}/{remote_dump}"),
        remote_step(tools, target, "import database", Script.in_dir(
            root,
            Script.pipe(
                Command.of("gunzip", "-c", remote_dump),
                Command.of(tools.drush, "sql:cli"),
            ),
            Command.of("rm", "-f", remote_dump),
        )),
        local_step("remove local database dump", lambda: _remove(dump)),
        remote_step(tools, target, "remote drush cache:rebuild", Script.in_dir(
            root, Command.of(tools.drush, "cache:rebuild"),
        )),
    ]
    for args in settings.production_settings:
        steps.append(remote_step(tools, target, f"remote drush {' '.join(args)}", Script.in_dir(
            root, Command.of(tools.drush, *args),
        )))
    return steps


def _remove(path: Path) -> str:
    path.unlink(missing_ok=True)
    return f"Removed {path}"


def _make_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _deploy(
    run: PipelineRun,
    ctx: ProjectContext,
    registry: AdapterRegistry,
    operator: Operator,
    params: GoLiveParameters,
    now: datetime | None,
) -> Failure | None:
    """Everything after the confirmation, up to a working production site."""
    # ── Housekeeping ────────────────────────────────────────────
    failure = run_steps(run, [
        drush_step(ctx, "drush cron", "cron"),
        drush_step(ctx, "drush cache:rebuild", "cache:rebuild"),
    ], registry, ctx, operator)
    if failure:
        return failure

    # ── Code ────────────────────────────────────────────────────
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    failure = run.absorb(push(ctx, registry, operator, message=f"Go-live of {params.domain} on {stamp}"))
    if failure:
        return failure

    failure = run_steps(run, code_promotion_steps(ctx, params), registry, ctx, operator)
    if failure:
        return failure

    # ── Finalization ────────────────────────────────────────────
    return run_steps(run, finalization_steps(ctx, params), registry, ctx, operator)


# ── Workflow ────────────────────────────────────────────────────────


def go_live(
    ctx: ProjectContext,
    registry: AdapterRegistry,
    operator: Operator,
    now: datetime | None = None,
) -> PipelineRun:
    """Promote the dev project in ``ctx`` to production."""
    run = PipelineRun("go-live")
    config = ctx.config
    settings = config.go_live

    # ── Preflight ───────────────────────────────────────────────
    failure = evaluate(ctx, [
        ensure_dev,
        files_present(config.settings_file,
                      reason='Settings file is missing. Run "siteflow init-dev" first.'),
    ])
    if failure:
        return run.abort(failure)
    operator.show("Before going live, make sure that", _bullets(settings.preflight_checklist))

    # ── Parameters ──────────────────────────────────────────────
    params = collect_parameters(ctx, operator)
    logger.info("Going live: %s → %s:%s", ctx.project_name, params.target, remote_root(ctx, params))

    # ── Settings ────────────────────────────────────────────────
    staging = ctx.path(settings.staging_file)
    template = ctx.path(settings.settings_template) if settings.settings_template else ctx.settings_path

    def persist_local() -> str:
        upsert_many(ctx.settings_path, params.as_settings())
        return f"Stored prod parameters in {ctx.settings_path}"

    def build_staging() -> str:
        copy_settings(template, staging)
        upsert_many(staging, params.as_prod_settings())
        return f"Wrote {staging}"

    if run_steps(run, [
        local_step("store prod parameters", persist_local),
        local_step("build prod settings file", build_staging),
    ], registry, ctx, operator):
        return run

    # ── Confirmation ────────────────────────────────────────────
    if staging.is_file():
        operator.show(f"{staging.name} (will become {config.settings_file} on {params.host})",
                      staging.read_text(encoding="utf-8"))
    if not operator.confirm(
        f"Deploy {ctx.project_name} to {params.target} as {params.domain}?",
        default=False,
    ):
        staging.unlink(missing_ok=True)
        return run.abort(Failure.user_abort("Go-live cancelled by operator."))

    if _deploy(run, ctx, registry, operator, params, now):
        if staging.exists():
            run.note(f"{staging} still holds the prod database password. Delete it by hand.")
        return run

    # ── Post checklist ──────────────────────────────────────────
    fmt = {"domain": params.domain, "root": remote_root(ctx, params), "host": params.host}
    operator.show("Still to do by hand", _bullets(settings.post_checklist, **fmt))
    if settings.optional_followups:
        operator.show("Optional", _bullets(settings.optional_followups, **fmt))

    run.note(f"{params.domain} is live on {params.target}.")
    return run
