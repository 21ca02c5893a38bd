"""Adapters — bindings to the external tools a workflow drives.

Public re-exports for convenient access.
"""

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.adapters.mock import MockAdapter
from siteflow.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
