"""
Project context construction — the single point that reads the process
environment.

The CLI calls ``build_context`` once at startup. Tests call it with an
explicit ``cwd`` and ``hostname`` and never touch ``os.environ``.

Settings are layered: the shared family file (``../.env``) first, the
project's own ``.env`` on top.
"""

from __future__ import annotations

import logging
import os
import socket
from pathlib import Path

from siteflow.core.models.config import SiteflowConfig
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.tier import EnvironmentTier
from siteflow.core.persistence.settings_file import read_settings
from siteflow.core.services.classifier import classify_candidates

logger = logging.getLogger(__name__)


def _path_forms(cwd: Path, logical: str | None) -> list[str]:
    """The logical ($PWD, may run through symlinks) and physical forms of cwd."""
    physical = str(cwd.resolve())
    forms: list[str] = []
    if logical:
        try:
            if Path(logical).resolve() == Path(physical):
                forms.append(logical.rstrip("/") or "/")
        except OSError:
            pass
    if str(cwd) not in forms:
        forms.append(str(cwd))
    if physical not in forms:
        forms.append(physical)
    return forms


def load_settings(root: Path, config: SiteflowConfig) -> dict[str, str]:
    settings = read_settings((root / config.shared_settings_file))
    settings.update(read_settings(root / config.settings_file))
    return settings


def build_context(
    config: SiteflowConfig,
    cwd: Path | None = None,
    hostname: str | None = None,
) -> ProjectContext:
    """Classify the working directory and load its settings.

    Raises:
        ConfigError: when the tier rules overlap for this directory, or a
            settings file cannot be decoded.
    """
    if cwd is None:
        cwd = Path.cwd()
        logical = os.environ.get("PWD")
    else:
        logical = None
    if hostname is None:
        hostname = socket.gethostname()

    classification = classify_candidates(_path_forms(cwd, logical), hostname, config)
    root = cwd.resolve()
    settings = load_settings(root, config)

    project = classification.project
    if classification.tier is EnvironmentTier.PROD:
        project = settings.get("PROJECT_NAME") or project

    ctx = ProjectContext(
        root=root,
        tier=classification.tier,
        hostname=hostname,
        project_name=project,
        family_name=classification.family,
        settings_path=root / config.settings_file,
        settings=settings,
        config=config,
    )
    logger.info("Context: %s project=%r tier=%s host=%s",
                root, ctx.project_name, ctx.tier.value, hostname)
    return ctx


def refresh_settings(ctx: ProjectContext) -> ProjectContext:
    """A new snapshot reflecting the settings file as it is now on disk."""
    return ctx.with_settings(load_settings(ctx.root, ctx.config))
