"""
Run use case — execute the whole action in a project checkout.

Loads settings and inputs, derives the cache keys from the lockfile,
wires the shell adapter and cache backend, and runs the pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from e2e_action.adapters.cache.base import CacheBackend
from e2e_action.adapters.registry import AdapterRegistry
from e2e_action.core.config.inputs import load_inputs
from e2e_action.core.config.loader import ConfigError, load_settings
from e2e_action.core.engine.pipeline import PipelineError, PipelineReport, run_pipeline
from e2e_action.core.models.cache import CacheSpec
from e2e_action.core.models.inputs import ActionInputs
from e2e_action.core.models.settings import Settings
from e2e_action.core.services.cache_keys import default_cache_specs

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of running the action."""

    report: PipelineReport | None = None
    inputs: ActionInputs | None = None
    npm_spec: CacheSpec | None = None
    cypress_spec: CacheSpec | None = None
    project_root: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error

        result["project_root"] = str(self.project_root) if self.project_root else None
        if self.inputs:
            result["inputs"] = self.inputs.model_dump()
        if self.npm_spec and self.cypress_spec:
            result["keys"] = {
                self.npm_spec.name: self.npm_spec.primary_key,
                self.cypress_spec.name: self.cypress_spec.primary_key,
            }
        if self.report:
            result["report"] = self.report.to_dict()

        return result


@dataclass
class ActionContext:
    """Everything resolved before the first step runs."""

    project_root: Path
    settings: Settings
    inputs: ActionInputs
    npm_spec: CacheSpec
    cypress_spec: CacheSpec


def prepare(
    project_root: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ActionContext:
    """Load settings and inputs and derive the cache specs.

    Raises:
        ConfigError: Invalid settings file or unreadable lockfile.
    """
    root = (project_root or Path.cwd()).resolve()
    settings = load_settings(config_path, start_dir=root)
    inputs = load_inputs(environ, overrides)

    lockfile = root / settings.cache.lockfile
    if not lockfile.is_file():
        raise ConfigError(f"Lockfile not found: {lockfile}")

    npm_spec, cypress_spec = default_cache_specs(
        lockfile,
        npm_path=settings.cache.npm_path,
        cypress_path=settings.cache.cypress_path,
    )
    return ActionContext(
        project_root=root,
        settings=settings,
        inputs=inputs,
        npm_spec=npm_spec,
        cypress_spec=cypress_spec,
    )


def run_action(
    project_root: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    cache: CacheBackend | None = None,
) -> RunResult:
    """Run the action end to end.

    Args:
        project_root: Checkout to run in (default: cwd).
        config_path: Optional explicit path to e2e-action.yml.
        environ: Environment to read inputs from (default: os.environ).
        overrides: Input values that win over the environment.
        dry_run: Validate steps and print commands; run and cache nothing.
        mock_mode: Use mock shell and cache adapters.
        registry: Optional pre-configured adapter registry.
        cache: Optional pre-configured cache backend.

    Returns:
        RunResult; ``error`` is set when any step failed.
    """
    result = RunResult()

    try:
        ctx = prepare(project_root, config_path, environ, overrides)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.project_root = ctx.project_root
    result.inputs = ctx.inputs
    result.npm_spec = ctx.npm_spec
    result.cypress_spec = ctx.cypress_spec

    # ── Set up adapters ──────────────────────────────────────────
    if registry is None:
        from e2e_action.adapters.shell.command import ShellCommandAdapter

        registry = AdapterRegistry(mock_mode=mock_mode)
        registry.register(ShellCommandAdapter())

    if cache is None:
        if mock_mode:
            from e2e_action.adapters.mock import MockCacheBackend

            cache = MockCacheBackend()
        else:
            from e2e_action.adapters.cache.local import LocalCacheBackend, default_cache_root

            cache = LocalCacheBackend(default_cache_root(ctx.settings.cache.dir))

    logger.debug("Using %r for caches", cache)

    # ── Execute ──────────────────────────────────────────────────
    try:
        result.report = run_pipeline(
            inputs=ctx.inputs,
            settings=ctx.settings,
            npm_spec=ctx.npm_spec,
            cypress_spec=ctx.cypress_spec,
            registry=registry,
            cache=cache,
            project_root=str(ctx.project_root),
            dry_run=dry_run,
            environ=environ,
        )
    except PipelineError as e:
        result.report = e.report
        result.error = e.message

    return result
