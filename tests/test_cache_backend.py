"""
Tests for cache backends — local tarball store and the in-memory mock.
"""

import os
import tarfile
from pathlib import Path

import pytest

from e2e_action.adapters.cache.base import CacheError
from e2e_action.adapters.cache.local import LocalCacheBackend, default_cache_root
from e2e_action.adapters.mock import MockCacheBackend
from e2e_action.core.services.cache_keys import cache_spec


def _spec(source: Path, lock_hash: str = "aaa"):
    return cache_spec("npm", str(source), lock_hash, "linux-x64")


def _populate(directory: Path) -> None:
    (directory / "_cacache" / "index").mkdir(parents=True)
    (directory / "_cacache" / "index" / "entry").write_text("tarball")
    (directory / "top.txt").write_text("hello")


class TestLocalCacheBackend:
    def test_restore_empty_store_is_miss(self, tmp_path: Path, cache_root: Path):
        backend = LocalCacheBackend(cache_root)
        result = backend.restore(_spec(tmp_path / "npm"))
        assert not result.hit
        assert result.matched_key is None
        assert not result.restored

    def test_restore_missing_root_is_miss(self, tmp_path: Path):
        backend = LocalCacheBackend(tmp_path / "does-not-exist")
        assert not backend.restore(_spec(tmp_path / "npm")).hit

    def test_save_then_restore_is_hit(self, tmp_path: Path, cache_root: Path):
        source = tmp_path / "npm"
        _populate(source)
        spec = _spec(source)
        backend = LocalCacheBackend(cache_root)

        assert backend.save(spec) is True
        assert (cache_root / f"{spec.primary_key}.tar.gz").is_file()

        target = tmp_path / "restored"
        restored_spec = spec.model_copy(update={"input_path": str(target)})
        result = backend.restore(restored_spec)

        assert result.hit
        assert result.matched_key == spec.primary_key
        assert (target / "top.txt").read_text() == "hello"
        assert (target / "_cacache" / "index" / "entry").read_text() == "tarball"

    def test_partial_match_is_not_a_hit(self, tmp_path: Path, cache_root: Path):
        source = tmp_path / "npm"
        _populate(source)
        backend = LocalCacheBackend(cache_root)
        backend.save(_spec(source, "old"))

        target = tmp_path / "restored"
        result = backend.restore(_spec(target, "new"))

        assert not result.hit
        assert result.matched_key == "npm-linux-x64-old"
        assert (target / "top.txt").is_file()

    def test_partial_match_prefers_newest(self, tmp_path: Path, cache_root: Path):
        source = tmp_path / "npm"
        _populate(source)
        backend = LocalCacheBackend(cache_root)
        backend.save(_spec(source, "one"))
        backend.save(_spec(source, "two"))
        older = cache_root / "npm-linux-x64-two.tar.gz"
        os.utime(older, (1_000_000, 1_000_000))

        result = backend.restore(_spec(tmp_path / "restored", "three"))
        assert result.matched_key == "npm-linux-x64-one"

    def test_other_prefix_not_restored(self, tmp_path: Path, cache_root: Path):
        source = tmp_path / "cy"
        _populate(source)
        backend = LocalCacheBackend(cache_root)
        backend.save(cache_spec("cypress", str(source), "aaa", "linux-x64"))

        result = backend.restore(_spec(tmp_path / "npm"))
        assert result.matched_key is None

    def test_existing_key_not_overwritten(self, tmp_path: Path, cache_root: Path):
        source = tmp_path / "npm"
        _populate(source)
        backend = LocalCacheBackend(cache_root)
        spec = _spec(source)

        assert backend.save(spec) is True
        (source / "top.txt").write_text("changed")
        assert backend.save(spec) is False

        with tarfile.open(cache_root / f"{spec.primary_key}.tar.gz", "r:gz") as tar:
            data = tar.extractfile("top.txt").read()
        assert data == b"hello"

    def test_save_missing_source(self, tmp_path: Path, cache_root: Path):
        backend = LocalCacheBackend(cache_root)
        assert backend.save(_spec(tmp_path / "nothing")) is False
        assert list(cache_root.iterdir()) == []

    def test_save_creates_root(self, tmp_path: Path):
        source = tmp_path / "npm"
        _populate(source)
        root = tmp_path / "new" / "store"
        assert LocalCacheBackend(root).save(_spec(source))
        assert root.is_dir()

    def test_no_temp_files_left(self, tmp_path: Path, cache_root: Path):
        source = tmp_path / "npm"
        _populate(source)
        LocalCacheBackend(cache_root).save(_spec(source))
        assert [p.name for p in cache_root.iterdir()] == ["npm-linux-x64-aaa.tar.gz"]

    def test_corrupt_archive_raises(self, tmp_path: Path, cache_root: Path):
        spec = _spec(tmp_path / "npm")
        (cache_root / f"{spec.primary_key}.tar.gz").write_bytes(b"not a tarball")
        with pytest.raises(CacheError, match="Cannot restore npm cache"):
            LocalCacheBackend(cache_root).restore(spec)

    def test_member_outside_target_rejected(self, tmp_path: Path, cache_root: Path):
        spec = _spec(tmp_path / "npm")
        payload = tmp_path / "payload.txt"
        payload.write_text("overwritten")
        with tarfile.open(cache_root / f"{spec.primary_key}.tar.gz", "w:gz") as tar:
            tar.add(payload, arcname="../escaped.txt")

        with pytest.raises(CacheError, match="Cannot restore npm cache"):
            LocalCacheBackend(cache_root).restore(spec)
        assert not (tmp_path / "escaped.txt").exists()

    def test_unlistable_store_raises(self, tmp_path: Path, cache_root: Path, monkeypatch):
        def unreadable(self, pattern):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "glob", unreadable)
        with pytest.raises(CacheError, match="Cannot list npm cache entries"):
            LocalCacheBackend(cache_root).restore(_spec(tmp_path / "npm"))

    def test_invalid_key(self, cache_root: Path):
        with pytest.raises(CacheError, match="Invalid cache key"):
            LocalCacheBackend(cache_root).archive_path("../escape")

    def test_name(self, cache_root: Path):
        assert LocalCacheBackend(cache_root).name == "local"


class TestDefaultCacheRoot:
    def test_env_wins(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("E2E_CACHE_DIR", str(tmp_path))
        assert default_cache_root("/configured") == tmp_path

    def test_configured(self):
        assert default_cache_root("/configured") == Path("/configured")

    def test_default_under_home(self):
        assert default_cache_root() == Path("~/.cache/e2e-action").expanduser()


class TestMockCacheBackend:
    def test_miss_then_save_then_hit(self, tmp_path: Path):
        backend = MockCacheBackend()
        spec = _spec(tmp_path)
        assert not backend.restore(spec).hit
        assert backend.save(spec)
        assert backend.restore(spec).hit
        assert backend.saved == [spec.primary_key]
        assert backend.restored == [spec.primary_key, spec.primary_key]

    def test_partial_entry(self, tmp_path: Path):
        backend = MockCacheBackend({"npm-linux-x64-old"})
        result = backend.restore(_spec(tmp_path, "new"))
        assert not result.hit
        assert result.matched_key == "npm-linux-x64-old"

    def test_save_existing(self, tmp_path: Path):
        spec = _spec(tmp_path)
        backend = MockCacheBackend({spec.primary_key})
        assert backend.save(spec) is False
