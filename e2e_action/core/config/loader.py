"""
Configuration loader — reads e2e-action.yml into the Settings model.

The file is optional. When none is found the defaults are returned,
which reproduce the stock npm + Cypress + start-server-and-test flow.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from e2e_action.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
SETTINGS_FILE = "e2e-action.yml"


class ConfigError(Exception):
    """Raised when configuration is invalid or a required file is missing."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for e2e-action.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to e2e-action.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None, start_dir: Path | None = None) -> Settings:
    """Load and validate action settings.

    Args:
        path: Explicit path to e2e-action.yml. If None, searches upward
            from ``start_dir``; no file found means defaults.
        start_dir: Where the upward search begins (default: cwd).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_settings_file(start_dir)
        if path is None:
            logger.debug("No %s found, using defaults", SETTINGS_FILE)
            return Settings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.info("Loaded settings from %s", path)
    return settings
