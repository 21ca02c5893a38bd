"""DriftReport — result of comparing local state against a baseline."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class DriftTag(str, Enum):
    CLEAN = "clean"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"
    CONFIG_DIRTY = "config_dirty"
    UNKNOWN = "unknown"          # the comparison command itself failed


class DriftReport(BaseModel):
    """Transient comparison result, consumed by a single precondition check."""

    tag: DriftTag
    detail: str = ""

    @property
    def clean(self) -> bool:
        return self.tag is DriftTag.CLEAN
