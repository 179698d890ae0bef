"""Adapters — tool bindings for shell steps and cache stores.

Public re-exports for convenient access.
"""

from e2e_action.adapters.base import Adapter, ExecutionContext
from e2e_action.adapters.mock import MockAdapter, MockCacheBackend
from e2e_action.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "MockCacheBackend",
]
