"""
Drift detection — local vs. remote repository, active vs. exported config.

Repository drift is read from ``git status`` after a ``git fetch``. git
localizes that text, so both the English and the German phrasing are
recognized:

    Your branch is behind 'origin/master' by 2 commits ...
    Ihr Branch ist 2 Commits hinter 'origin/master' ...
    Your branch is ahead of 'origin/master' by 1 commit.
    Ihr Branch ist 1 Commit vor 'origin/master'.
    Your branch and 'origin/master' have diverged, ...
    Ihr Branch und 'origin/master' sind divergiert, ...

Config drift is read from ``drush config:status``.
"""

from __future__ import annotations

import logging
import re

from siteflow.adapters.registry import AdapterRegistry
from siteflow.core.models.action import Action, Receipt
from siteflow.core.models.context import ProjectContext
from siteflow.core.models.drift import DriftReport, DriftTag
from siteflow.core.models.outcome import Failure, FailureKind

logger = logging.getLogger(__name__)

_DIVERGED_RE = re.compile(r"\b(diverged|divergiert)\b", re.IGNORECASE)
_BEHIND_RE = re.compile(r"\s(behind|hinter)\s", re.IGNORECASE)
_AHEAD_RE = re.compile(r"\s(ahead|vor)\s", re.IGNORECASE)

CONFIG_CLEAN_MARKER = "No differences between DB and sync directory."


def parse_repo_status(text: str) -> DriftReport:
    """Classify ``git status`` output."""
    for line in text.splitlines():
        padded = f" {line} "
        if _DIVERGED_RE.search(padded):
            return DriftReport(tag=DriftTag.DIVERGED, detail=line.strip())
        if _BEHIND_RE.search(padded):
            return DriftReport(tag=DriftTag.BEHIND, detail=line.strip())
        if _AHEAD_RE.search(padded):
            return DriftReport(tag=DriftTag.AHEAD, detail=line.strip())
    return DriftReport(tag=DriftTag.CLEAN)


def parse_config_status(text: str) -> DriftReport:
    """Classify ``drush config:status`` output."""
    if CONFIG_CLEAN_MARKER in text:
        return DriftReport(tag=DriftTag.CLEAN)
    return DriftReport(tag=DriftTag.CONFIG_DIRTY, detail=text.strip())


def _git_action(ctx: ProjectContext, operation: str) -> Action:
    return Action(
        id=f"drift:git-{operation}",
        name=f"git {operation}",
        adapter="git",
        params={
            "operation": operation,
            "remote": ctx.config.git.remote,
            "executable": ctx.config.tools.git,
        },
    )


def _failure_detail(receipt: Receipt, tail: int = 5) -> str:
    """The receipt error plus the last lines the command printed."""
    lines = [line for line in receipt.output.splitlines() if line.strip()][-tail:]
    return "\n".join([receipt.error or "", *lines]).strip()


def check_repo_drift(ctx: ProjectContext, registry: AdapterRegistry) -> DriftReport:
    """Fetch the remote and compare. A failing git command yields UNKNOWN."""
    for operation in ("fetch", "status"):
        receipt = registry.execute_action(_git_action(ctx, operation), project_root=str(ctx.root))
        if receipt.failed:
            logger.warning("git %s failed: %s", operation, receipt.error)
            return DriftReport(tag=DriftTag.UNKNOWN, detail=_failure_detail(receipt))
        if receipt.status == "skipped":
            return DriftReport(tag=DriftTag.CLEAN, detail="not checked (dry run)")
    report = parse_repo_status(receipt.output)
    logger.info("Repository drift: %s", report.tag.value)
    return report


def check_config_drift(ctx: ProjectContext, registry: AdapterRegistry) -> DriftReport:
    action = Action(
        id="drift:config-status",
        name="drush config:status",
        adapter="shell",
        params={"argv": [ctx.config.tools.drush, "config:status"], "quiet": True},
    )
    receipt = registry.execute_action(action, project_root=str(ctx.root))
    if receipt.status == "skipped":
        return DriftReport(tag=DriftTag.CLEAN, detail="not checked (dry run)")
    if receipt.failed:
        logger.warning("config:status failed: %s", receipt.error)
        return DriftReport(tag=DriftTag.UNKNOWN, detail=_failure_detail(receipt))
    report = parse_config_status(receipt.output)
    logger.info("Config drift: %s", report.tag.value)
    return report


# ── Conflict rules ──────────────────────────────────────────────────


def _unknown(report: DriftReport) -> Failure:
    return Failure(
        FailureKind.STEP,
        f"Could not determine the repository state: {report.detail}",
        step="drift check",
    )


def conflict_for_push(report: DriftReport) -> Failure | None:
    """Pushing is refused while the remote has commits we don't."""
    if report.tag in (DriftTag.BEHIND, DriftTag.DIVERGED):
        return Failure.drift(f"Environment is behind origin repository. ({report.detail})")
    if report.tag is DriftTag.UNKNOWN:
        return _unknown(report)
    return None


def conflict_for_pull(report: DriftReport) -> Failure | None:
    """Pulling is refused while we have commits the remote doesn't."""
    if report.tag in (DriftTag.AHEAD, DriftTag.DIVERGED):
        return Failure.drift(f"Environment is ahead of origin repository. ({report.detail})")
    if report.tag is DriftTag.UNKNOWN:
        return _unknown(report)
    return None
