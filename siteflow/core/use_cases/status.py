"""
Status use case — what siteflow sees in the current directory.

Read-only: tier, project, settings (secrets masked), the last audited
run and, on request, repository drift.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.drift import DriftReport
from siteflow.core.persistence.audit import AuditEntry, AuditWriter
from siteflow.core.services.drift import check_repo_drift

_SECRET_RE = re.compile(r"PASSWORD|SECRET|TOKEN|KEY|SALT", re.IGNORECASE)


def mask(key: str, value: str) -> str:
    if value and _SECRET_RE.search(key):
        return "********"
    return value


@dataclass
class StatusResult:
    """Aggregated project status."""

    ctx: ProjectContext
    settings: dict[str, str] = field(default_factory=dict)
    last_run: AuditEntry | None = None
    drift: DriftReport | None = None
    tools: dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result: dict = {
            "root": str(self.ctx.root),
            "tier": self.ctx.tier.value,
            "hostname": self.ctx.hostname,
            "project": self.ctx.project_name,
            "family": self.ctx.family_name,
            "settings_file": str(self.ctx.settings_path),
            "settings": self.settings,
            "tools": self.tools,
        }
        if self.last_run:
            result["last_run"] = self.last_run.model_dump(mode="json")
        if self.drift:
            result["drift"] = self.drift.model_dump(mode="json")
        return result


def get_status(
    ctx: ProjectContext,
    registry: AdapterRegistry | None = None,
    with_drift: bool = False,
) -> StatusResult:
    result = StatusResult(
        ctx=ctx,
        settings={k: mask(k, v) for k, v in ctx.settings.items()},
    )
    recent = AuditWriter(ctx.path(ctx.config.audit_file)).read_recent(1)
    if recent:
        result.last_run = recent[0]
    if registry is not None:
        result.tools = registry.tool_availability()
    if with_drift and registry is not None and ctx.tier.known:
        result.drift = check_repo_drift(ctx, registry)
    return result
