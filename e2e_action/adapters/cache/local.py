"""
Local cache backend — gzipped tarballs in a directory.

Each entry is ``<root>/<key>.tar.gz``. The root is typically a volume
that survives between jobs on a self-hosted runner. Entries are
immutable: once a key is written it is never replaced, so concurrent
jobs racing to save the same key keep the first snapshot.
"""

from __future__ import annotations

import logging
import os
import tarfile
import tempfile
from pathlib import Path

from e2e_action.adapters.cache.base import CacheBackend, CacheError
from e2e_action.core.models.cache import CacheResult, CacheSpec

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".tar.gz"
DEFAULT_CACHE_DIR = "~/.cache/e2e-action"


def default_cache_root(configured: str | None = None) -> Path:
    """Resolve the cache root: E2E_CACHE_DIR > settings > default."""
    raw = os.environ.get("E2E_CACHE_DIR") or configured or DEFAULT_CACHE_DIR
    return Path(raw).expanduser()


class LocalCacheBackend(CacheBackend):
    """Filesystem-backed cache store."""

    def __init__(self, root: Path):
        self._root = Path(root).expanduser()

    @property
    def name(self) -> str:
        return "local"

    @property
    def root(self) -> Path:
        return self._root

    def archive_path(self, key: str) -> Path:
        if "/" in key or os.sep in key or key in ("", ".", ".."):
            raise CacheError(f"Invalid cache key: {key!r}")
        return self._root / f"{key}{ARCHIVE_SUFFIX}"

    def _find(self, spec: CacheSpec) -> tuple[str, Path] | None:
        exact = self.archive_path(spec.primary_key)
        if exact.is_file():
            return spec.primary_key, exact

        if not self._root.is_dir():
            return None

        # Newest partial match wins
        candidates: list[tuple[float, str, Path]] = []
        try:
            for entry in self._root.glob(f"*{ARCHIVE_SUFFIX}"):
                key = entry.name[: -len(ARCHIVE_SUFFIX)]
                if key.startswith(spec.restore_keys) and entry.is_file():
                    candidates.append((entry.stat().st_mtime, key, entry))
        except OSError as e:
            raise CacheError(f"Cannot list {spec.name} cache entries in {self._root}: {e}") from e
        if not candidates:
            return None
        _mtime, key, path = max(candidates)
        return key, path

    def restore(self, spec: CacheSpec) -> CacheResult:
        found = self._find(spec)
        if found is None:
            logger.info("Cache not found for %s", spec.primary_key)
            return CacheResult(name=spec.name)

        key, archive = found
        target = Path(spec.input_path).expanduser()
        try:
            target.mkdir(parents=True, exist_ok=True)
            with tarfile.open(archive, "r:gz") as tar:
                tar.extractall(target, filter="data")
        except (OSError, tarfile.TarError) as e:
            raise CacheError(f"Cannot restore {spec.name} cache from {archive}: {e}") from e

        hit = key == spec.primary_key
        logger.info(
            "Restored %s cache from key %s%s",
            spec.name, key, "" if hit else " (partial match)",
        )
        return CacheResult(name=spec.name, hit=hit, matched_key=key)

    def save(self, spec: CacheSpec) -> bool:
        archive = self.archive_path(spec.primary_key)
        if archive.is_file():
            logger.info("Cache entry %s already exists, not saving", spec.primary_key)
            return False

        source = Path(spec.input_path).expanduser()
        if not source.is_dir():
            logger.warning("Nothing to cache: %s does not exist", source)
            return False

        # Atomic write: temp file in the store, then rename
        tmp_path = None
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._root, prefix=".cache_", suffix=".tmp",
            )
            os.close(fd)
            with tarfile.open(tmp_path, "w:gz") as tar:
                for child in sorted(source.iterdir()):
                    tar.add(child, arcname=child.name)
            os.replace(tmp_path, archive)
            tmp_path = None
        except (OSError, tarfile.TarError) as e:
            raise CacheError(f"Cannot save {spec.name} cache to {archive}: {e}") from e
        finally:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)

        logger.info("Saved %s cache under key %s", spec.name, spec.primary_key)
        return True
