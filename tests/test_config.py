"""
Tests for configuration loading — e2e-action.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from e2e_action.core.config.loader import ConfigError, find_settings_file, load_settings
from e2e_action.core.models.settings import Settings


@pytest.fixture
def settings_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        commands:
          install: pnpm install --frozen-lockfile
          build: pnpm build
          start: preview
          url: http://localhost:4173
        cache:
          dir: /mnt/runner-cache
          lockfile: pnpm-lock.yaml
    """)
    path = tmp_path / "e2e-action.yml"
    path.write_text(content)
    return path


class TestFindSettingsFile:
    def test_finds_in_dir(self, settings_yml: Path):
        assert find_settings_file(settings_yml.parent) == settings_yml

    def test_walks_up(self, settings_yml: Path):
        nested = settings_yml.parent / "packages" / "site"
        nested.mkdir(parents=True)
        assert find_settings_file(nested) == settings_yml

    def test_not_found(self, tmp_path: Path):
        assert find_settings_file(tmp_path) is None


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = load_settings(start_dir=tmp_path)
        assert settings.commands.install == "npm ci"
        assert settings.commands.verify == "npx cypress verify"
        assert settings.commands.build == "npm run build"
        assert settings.commands.start == "start"
        assert settings.commands.url == "3000"
        assert settings.cache.lockfile == "package-lock.json"
        assert settings.cache.npm_path == "~/.npm"
        assert settings.cache.cypress_path == "~/.cache/Cypress"
        assert settings.cache.dir is None

    def test_explicit_file(self, settings_yml: Path):
        settings = load_settings(settings_yml)
        assert settings.commands.install == "pnpm install --frozen-lockfile"
        assert settings.commands.url == "http://localhost:4173"
        assert settings.commands.verify == "npx cypress verify"
        assert settings.cache.dir == "/mnt/runner-cache"
        assert settings.cache.lockfile == "pnpm-lock.yaml"

    def test_auto_detect(self, settings_yml: Path):
        settings = load_settings(start_dir=settings_yml.parent)
        assert settings.commands.build == "pnpm build"

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "e2e-action.yml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "e2e-action.yml"
        path.write_text("commands: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "e2e-action.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_settings(path)

    def test_invalid_types(self, tmp_path: Path):
        path = tmp_path / "e2e-action.yml"
        path.write_text("commands:\n  install: [1, 2]\n")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(path)
