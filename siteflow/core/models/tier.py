"""Environment tiers a project directory can belong to."""

from __future__ import annotations

from enum import Enum


class EnvironmentTier(str, Enum):
    DEV = "dev"
    PROD = "prod"
    UNKNOWN = "unknown"

    @property
    def known(self) -> bool:
        return self is not EnvironmentTier.UNKNOWN
