"""
Cache models — what gets snapshotted and under which key.
"""

from __future__ import annotations

from pydantic import BaseModel


class CacheSpec(BaseModel):
    """A cached directory and the keys that address it.

    ``restore_keys`` is the key prefix (``npm-linux-x64-``) used for a
    partial restore; ``primary_key`` appends the lockfile hash.
    """

    name: str
    input_path: str
    restore_keys: str
    primary_key: str


class CacheResult(BaseModel):
    """Outcome of a cache restore."""

    name: str
    hit: bool = False                # exact primary-key match
    matched_key: str | None = None   # key actually restored, if any

    @property
    def restored(self) -> bool:
        """Whether anything was restored (exact or partial match)."""
        return self.matched_key is not None
