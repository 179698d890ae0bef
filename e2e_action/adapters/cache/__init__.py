"""Cache backends — where npm and Cypress snapshots are stored."""

from e2e_action.adapters.cache.base import CacheBackend, CacheError
from e2e_action.adapters.cache.local import LocalCacheBackend

__all__ = [
    "CacheBackend",
    "CacheError",
    "LocalCacheBackend",
]
