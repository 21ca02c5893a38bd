"""
ProjectContext — the immutable per-run view of "which project, where".

Created once by ``siteflow.core.context.build_context`` and threaded
through every gate, check and workflow. Nothing downstream reads the
process environment; a changed settings file yields a new snapshot via
``with_settings``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from siteflow.core.models.config import SiteflowConfig
from siteflow.core.models.tier import EnvironmentTier


class ProjectContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: Path
    tier: EnvironmentTier = EnvironmentTier.UNKNOWN
    hostname: str = ""
    project_name: str = ""
    family_name: str = ""
    settings_path: Path
    settings: Mapping[str, str] = Field(default_factory=dict)
    config: SiteflowConfig = Field(default_factory=SiteflowConfig)

    def path(self, relative: str) -> Path:
        """Resolve a configured path against the project root."""
        return self.root / relative

    def setting(self, key: str, default: str = "") -> str:
        return self.settings.get(key, default) or default

    def with_settings(self, settings: Mapping[str, str]) -> ProjectContext:
        return self.model_copy(update={"settings": dict(settings)})
