"""
Cache backend base — the contract between the pipeline and a cache store.

A backend snapshots a directory under a key and brings it back later.
Unlike shell adapters, cache backends raise ``CacheError`` on I/O
failure: a broken cache store fails the job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from e2e_action.core.models.cache import CacheResult, CacheSpec


class CacheError(Exception):
    """Raised when the cache store can't be read or written."""


class CacheBackend(ABC):
    """Abstract base class for cache stores."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'local')."""

    @abstractmethod
    def restore(self, spec: CacheSpec) -> CacheResult:
        """Restore ``spec.input_path`` from the store.

        Tries ``spec.primary_key`` first, then the newest entry whose key
        starts with ``spec.restore_keys``. Only an exact primary-key
        match counts as a hit.
        """

    @abstractmethod
    def save(self, spec: CacheSpec) -> bool:
        """Snapshot ``spec.input_path`` under ``spec.primary_key``.

        Returns:
            True if a new entry was written. False if the key already
            exists or there's nothing to save.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
