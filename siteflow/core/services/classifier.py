"""
Environment classification — which tier is this directory?

A tier matches when one of its path patterns matches the directory AND,
when the tier lists hostnames, the local hostname is one of them. The dev
and prod rules are expected to be mutually exclusive; when both match,
the configuration is wrong and classification refuses to guess.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from siteflow.core.config.loader import ConfigError
from siteflow.core.models.config import SiteflowConfig, TierRule
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.outcome import Failure
from siteflow.core.models.tier import EnvironmentTier

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """Tier plus whatever the matching path pattern captured."""

    tier: EnvironmentTier = EnvironmentTier.UNKNOWN
    groups: dict[str, str] = field(default_factory=dict)

    @property
    def project(self) -> str:
        return self.groups.get("project", "")

    @property
    def family(self) -> str:
        return self.groups.get("family", "")


def _match_rule(rule: TierRule, path: str, hostname: str) -> dict[str, str] | None:
    if rule.hostnames and hostname not in rule.hostnames:
        return None
    for pattern in rule.path_patterns:
        m = re.match(pattern, path)
        if m:
            return {k: v for k, v in m.groupdict().items() if v is not None}
    return None


def classify_path(path: str, hostname: str, config: SiteflowConfig) -> Classification:
    """Classify a single (path, hostname) pair.

    Raises:
        ConfigError: if the dev and prod rules both match.
    """
    dev = _match_rule(config.dev, path, hostname)
    prod = _match_rule(config.prod, path, hostname)

    if dev is not None and prod is not None:
        raise ConfigError(
            f"Both dev and prod rules match {path} on host {hostname!r}; "
            "the tier patterns in siteflow.yml must be mutually exclusive."
        )
    if dev is not None:
        return Classification(EnvironmentTier.DEV, dev)
    if prod is not None:
        return Classification(EnvironmentTier.PROD, prod)
    return Classification()


def classify(path: str, hostname: str, config: SiteflowConfig) -> EnvironmentTier:
    return classify_path(path, hostname, config).tier


def classify_candidates(
    paths: Iterable[str],
    hostname: str,
    config: SiteflowConfig,
) -> Classification:
    """Classify the logical and physical forms of one directory.

    The first form that matches wins. Forms that match different tiers
    are a configuration error, as for a single path.
    """
    paths = list(paths)
    found: Classification | None = None
    for path in paths:
        result = classify_path(path, hostname, config)
        if not result.tier.known:
            continue
        if found is None:
            found = result
        elif found.tier is not result.tier:
            raise ConfigError(
                f"{path} classifies as {result.tier.value} but another form of "
                f"the same directory classifies as {found.tier.value}."
            )
    logger.debug("Classified %s on %s as %s", paths, hostname,
                  found.tier.value if found else "unknown")
    return found or Classification()


# ── Tier gates ──────────────────────────────────────────────────────


def ensure_dev(ctx: ProjectContext) -> Failure | None:
    if ctx.tier is not EnvironmentTier.DEV:
        return Failure.precondition(
            "This command must be run in the root directory of a project on the dev server."
        )
    return None


def ensure_prod(ctx: ProjectContext) -> Failure | None:
    if ctx.tier is not EnvironmentTier.PROD:
        return Failure.precondition(
            "This command must be run in the root directory of a project on the prod server."
        )
    return None


def ensure_any_project_dir(ctx: ProjectContext) -> Failure | None:
    if not ctx.tier.known:
        return Failure.precondition(
            "This command must be run in the root directory of a dev or prod project."
        )
    return None
