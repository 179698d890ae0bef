"""
Tests for cache key derivation — lockfile hashing and platform naming.
"""

import hashlib
from pathlib import Path

import pytest

from e2e_action.core.config.loader import ConfigError
from e2e_action.core.services.cache_keys import (
    cache_spec,
    default_cache_specs,
    hash_file,
    node_arch,
    node_platform,
    platform_and_arch,
)


class TestHashFile:
    def test_sha512_hex(self, tmp_path: Path):
        path = tmp_path / "package-lock.json"
        path.write_bytes(b"lock")
        assert hash_file(path) == hashlib.sha512(b"lock").hexdigest()

    def test_stable_across_calls(self, tmp_path: Path):
        path = tmp_path / "package-lock.json"
        path.write_text("{}")
        assert hash_file(path) == hash_file(path)

    def test_content_change_changes_hash(self, tmp_path: Path):
        path = tmp_path / "package-lock.json"
        path.write_text("{}")
        before = hash_file(path)
        path.write_text('{"a": 1}')
        assert hash_file(path) != before

    def test_large_file(self, tmp_path: Path):
        data = b"x" * (200 * 1024 + 7)
        path = tmp_path / "big.json"
        path.write_bytes(data)
        assert hash_file(path) == hashlib.sha512(data).hexdigest()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot hash lockfile"):
            hash_file(tmp_path / "nope.json")


class TestPlatformNames:
    @pytest.mark.parametrize("value,expected", [
        ("linux", "linux"),
        ("darwin", "darwin"),
        ("win32", "win32"),
        ("freebsd14", "freebsd"),
        ("plan9", "plan9"),
    ])
    def test_node_platform(self, value, expected):
        assert node_platform(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("x86_64", "x64"),
        ("AMD64", "x64"),
        ("aarch64", "arm64"),
        ("arm64", "arm64"),
        ("i686", "ia32"),
        ("riscv64", "riscv64"),
    ])
    def test_node_arch(self, value, expected):
        assert node_arch(value) == expected

    def test_platform_and_arch(self):
        assert platform_and_arch("linux", "x86_64") == "linux-x64"
        assert platform_and_arch("darwin", "arm64") == "darwin-arm64"


class TestCacheSpecs:
    def test_key_format(self):
        spec = cache_spec("npm", "~/.npm", "abc123", "linux-x64")
        assert spec.restore_keys == "npm-linux-x64-"
        assert spec.primary_key == "npm-linux-x64-abc123"
        assert spec.input_path == "~/.npm"

    def test_default_specs(self, project_dir: Path):
        lockfile = project_dir / "package-lock.json"
        digest = hashlib.sha512(lockfile.read_bytes()).hexdigest()

        npm, cypress = default_cache_specs(lockfile, platform_arch="linux-x64")

        assert npm.name == "npm"
        assert npm.input_path == "~/.npm"
        assert npm.primary_key == f"npm-linux-x64-{digest}"
        assert cypress.name == "cypress"
        assert cypress.input_path == "~/.cache/Cypress"
        assert cypress.primary_key == f"cypress-linux-x64-{digest}"

    def test_deterministic(self, project_dir: Path):
        lockfile = project_dir / "package-lock.json"
        first = default_cache_specs(lockfile, platform_arch="linux-x64")
        second = default_cache_specs(lockfile, platform_arch="linux-x64")
        assert first == second

    def test_platform_changes_key(self, project_dir: Path):
        lockfile = project_dir / "package-lock.json"
        linux, _ = default_cache_specs(lockfile, platform_arch="linux-x64")
        mac, _ = default_cache_specs(lockfile, platform_arch="darwin-arm64")
        assert linux.primary_key != mac.primary_key

    def test_custom_paths(self, project_dir: Path):
        npm, cypress = default_cache_specs(
            project_dir / "package-lock.json",
            npm_path="/cache/npm",
            cypress_path="/cache/cy",
            platform_arch="linux-x64",
        )
        assert npm.input_path == "/cache/npm"
        assert cypress.input_path == "/cache/cy"
