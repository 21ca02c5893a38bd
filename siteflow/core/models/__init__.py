"""
Domain models for siteflow.

    from siteflow.core.models import ProjectContext, EnvironmentTier, Failure
"""

from siteflow.core.models.action import Action, Receipt
from siteflow.core.models.config import (
    GitSettings,
    GoLiveSettings,
    InstallSettings,
    SiteflowConfig,
    TierRule,
    ToolPaths,
)
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.drift import DriftReport, DriftTag
from siteflow.core.models.outcome import Failure, FailureKind
from siteflow.core.models.tier import EnvironmentTier

__all__ = [
    "Action",
    "DriftReport",
    "DriftTag",
    "EnvironmentTier",
    "Failure",
    "FailureKind",
    "GitSettings",
    "GoLiveSettings",
    "InstallSettings",
    "ProjectContext",
    "Receipt",
    "SiteflowConfig",
    "TierRule",
    "ToolPaths",
]
