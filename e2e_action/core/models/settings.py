"""
Settings model — the optional ``e2e-action.yml`` file.

Every field has the default the action has always used, so a project
without a settings file behaves exactly like one with an empty file.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommandSettings(BaseModel):
    """Shell commands run by the pipeline."""

    install: str = "npm ci"
    verify: str = "npx cypress verify"
    percy_install: str = "npm install --save-dev @percy/cypress"
    build: str = "npm run build"
    start: str = "start"        # npm script that serves the built site
    url: str = "3000"           # port or URL start-server-and-test waits on


class CacheSettings(BaseModel):
    """Where caches live and what they are keyed on."""

    dir: str | None = None      # local cache store root
    lockfile: str = "package-lock.json"
    npm_path: str = "~/.npm"
    cypress_path: str = "~/.cache/Cypress"


class Settings(BaseModel):
    """Root of ``e2e-action.yml``."""

    commands: CommandSettings = Field(default_factory=CommandSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
