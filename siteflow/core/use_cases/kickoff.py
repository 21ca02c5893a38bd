"""
Kickoff use cases — take a freshly created dev project to a running,
version-controlled site.

    init-dev  → write the project settings file and settings.php
    install   → drush site:install from the exported config
    init-git  → first commit and push to the shared repository

Each is dev-only and refuses to run twice: the gates look at the files
the previous run would have left behind.
"""

from __future__ import annotations

import logging

from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.engine.pipeline import (
    PipelineRun,
    drush_step,
    file_step,
    git_step,
    run_steps,
)
from siteflow.core.models.context import ProjectContext
from siteflow.core.operator import Operator
from siteflow.core.services.classifier import ensure_dev
from siteflow.core.services.guards import (
    directory_present,
    evaluate,
    files_absent,
    files_present,
    settings_keys_unset,
)

logger = logging.getLogger(__name__)


def init_dev(ctx: ProjectContext, registry: AdapterRegistry, operator: Operator) -> PipelineRun:
    """Create the minimal settings file and settings.php for a dev site."""
    run = PipelineRun("init-dev")
    config = ctx.config

    failure = evaluate(ctx, [
        ensure_dev,
        files_present(
            *config.scaffold_files,
            reason="This command can only be used in projects created from the starterkit "
                   f"(missing {', '.join(config.scaffold_files)}).",
        ),
        settings_keys_unset("PROJECT_NAME", "DB_NAME",
                            reason="Project specific settings detected. Aborting."),
        files_absent(config.settings_file,
                     reason=f'A "{config.settings_file}" file was found. Aborting.'),
        files_absent(config.site_settings,
                     reason='A "settings.php" file was found. Aborting.'),
    ])
    if failure:
        return run.abort(failure)

    values = {
        "PROJECT_NAME": ctx.project_name,
        "DB_NAME": f"{ctx.family_name}_{ctx.project_name}",
    }
    steps = [
        file_step("write settings file", "write_settings", config.settings_file, values=values),
        file_step("create settings.php", "copy", config.site_settings,
                  source=config.default_site_settings),
    ]
    if run_steps(run, steps, registry, ctx, operator):
        return run

    run.note("Created minimal settings files for the dev system.")
    return run


def install(ctx: ProjectContext, registry: AdapterRegistry, operator: Operator) -> PipelineRun:
    """Install the site from the exported configuration and seed it."""
    run = PipelineRun("install")
    config = ctx.config

    failure = evaluate(ctx, [
        ensure_dev,
        files_present(
            config.settings_file, config.site_settings,
            reason='"settings.php" or settings file is missing. Run "siteflow init-dev" first.',
        ),
        files_absent(
            config.files_dir,
            reason='Drupal "files" storage directory found. This project already seems to be installed.',
        ),
    ])
    if failure:
        return run.abort(failure)

    settings = config.install
    steps = [
        file_step("make site directory writable", "make_writable", config.site_dir),
        drush_step(
            ctx, "drush site:install",
            "site:install",
            "--existing-config",
            f"--site-name={ctx.project_name}",
            f"--account-name={settings.account_name}",
            f"--account-mail={settings.account_mail}",
            "--no-interaction",
        ),
        file_step("make site directory writable again", "make_writable", config.site_dir),
        drush_step(ctx, "drush cache:rebuild", "cache:rebuild"),
        drush_step(ctx, "drush create default content", "maintenance:create-default-content", "-y"),
    ]
    # translations for modules not available on drupal.org
    for po_file in settings.translations:
        steps.append(drush_step(ctx, f"drush locale:import {po_file}",
                                "locale:import", settings.locale, po_file))

    if run_steps(run, steps, registry, ctx, operator):
        return run

    run.note(f"Site {ctx.project_name} was created.")
    return run


def init_git(ctx: ProjectContext, registry: AdapterRegistry, operator: Operator) -> PipelineRun:
    """Connect the installed site to its repository and push the first commit."""
    run = PipelineRun("init-git")
    config = ctx.config

    failure = evaluate(ctx, [
        ensure_dev,
        directory_present(
            config.files_dir,
            reason='Drupal "files" storage directory not found. Run "siteflow install" first.',
        ),
    ])
    if failure:
        return run.abort(failure)

    url = config.git.url_template.format(project=ctx.project_name, family=ctx.family_name)
    steps = [
        git_step(ctx, "git init", "init"),
        git_step(ctx, "git remote add", "remote_add", url=url),
        drush_step(ctx, "drush config:export", "config:export", "-y", "--commit",
                   "--message=Initial commit"),
        git_step(ctx, "git push", "push"),
    ]
    if run_steps(run, steps, registry, ctx, operator):
        return run

    run.note(f"Initial commit pushed to {url}.")
    return run
