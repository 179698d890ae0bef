"""
Pipeline — the restore → install → build → test sequence.

Flow:
    restore npm + Cypress caches (together)
      ├─ miss on either → npm ci → cypress verify → [percy] → save both caches
      └─ hit on both    → [percy]
    → build → start server and run Cypress

Every shell step goes through the adapter registry and comes back as a
Receipt. The first failed receipt, or any cache store error, stops the
run with a PipelineError that carries the report so far.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from e2e_action.adapters.cache.base import CacheBackend, CacheError
from e2e_action.adapters.registry import AdapterRegistry
from e2e_action.core.models.action import Action, Receipt
from e2e_action.core.models.cache import CacheResult, CacheSpec
from e2e_action.core.models.inputs import ActionInputs
from e2e_action.core.models.settings import Settings
from e2e_action.core.services import actions_runtime
from e2e_action.core.services.commands import (
    build_server_and_test_command,
    build_test_command,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineReport:
    """What happened during a pipeline run."""

    dry_run: bool = False
    npm_cache: CacheResult | None = None
    cypress_cache: CacheResult | None = None
    receipts: list[Receipt] = field(default_factory=list)
    saved: dict[str, bool] = field(default_factory=dict)
    failed_step: str | None = None
    error: str | None = None

    @property
    def cache_hit(self) -> bool:
        """True only when both caches were exact hits."""
        return bool(
            self.npm_cache and self.npm_cache.hit
            and self.cypress_cache and self.cypress_cache.hit
        )

    @property
    def steps(self) -> list[str]:
        return [r.action_id for r in self.receipts]

    @property
    def status(self) -> str:
        return "failed" if self.error else "ok"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "dry_run": self.dry_run,
            "cache_hit": self.cache_hit,
            "caches": {
                c.name: c.model_dump(mode="json")
                for c in (self.npm_cache, self.cypress_cache)
                if c is not None
            },
            "saved": self.saved,
            "steps": self.steps,
            "failed_step": self.failed_step,
            "error": self.error,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class PipelineError(Exception):
    """A pipeline step failed; the run was aborted."""

    def __init__(self, step: str, message: str, report: PipelineReport | None = None):
        super().__init__(message)
        self.step = step
        self.message = message
        self.report = report


def restore_caches(
    backend: CacheBackend,
    npm_spec: CacheSpec,
    cypress_spec: CacheSpec,
) -> tuple[CacheResult, CacheResult]:
    """Restore both caches concurrently and wait for both.

    Raises:
        CacheError: From whichever restore failed first.
    """
    logger.info("trying to restore cached NPM modules")
    logger.info("trying to restore cached Cypress binary")
    with ThreadPoolExecutor(max_workers=2) as pool:
        npm_future = pool.submit(backend.restore, npm_spec)
        cypress_future = pool.submit(backend.restore, cypress_spec)
        return npm_future.result(), cypress_future.result()


class Pipeline:
    """One run of the action against a project checkout."""

    def __init__(
        self,
        inputs: ActionInputs,
        settings: Settings,
        npm_spec: CacheSpec,
        cypress_spec: CacheSpec,
        registry: AdapterRegistry,
        cache: CacheBackend,
        project_root: str = ".",
        dry_run: bool = False,
        environ: Mapping[str, str] | None = None,
    ):
        self.inputs = inputs
        self.settings = settings
        self.npm_spec = npm_spec
        self.cypress_spec = cypress_spec
        self.registry = registry
        self.cache = cache
        self.project_root = project_root
        self.dry_run = dry_run
        self.environ = environ
        self.report = PipelineReport(dry_run=dry_run)

    # ── Steps ───────────────────────────────────────────────────

    def _export(self, step: str, name: str, value: str) -> None:
        if self.dry_run:
            logger.debug("[dry-run] would export %s=%s", name, value)
            return
        try:
            actions_runtime.export_variable(name, value)
        except OSError as e:
            raise PipelineError(step, f"Could not export {name}: {e}") from e

    def _shell(self, step: str, command: str) -> Receipt:
        action = Action(id=step, name=command, params={"command": command})
        receipt = self.registry.execute_action(
            action,
            project_root=self.project_root,
            dry_run=self.dry_run,
        )
        self.report.receipts.append(receipt)
        if receipt.failed:
            raise PipelineError(step, receipt.error or f"Step '{step}' failed")
        return receipt

    def restore(self) -> tuple[CacheResult, CacheResult]:
        if self.dry_run:
            npm = CacheResult(name=self.npm_spec.name)
            cypress = CacheResult(name=self.cypress_spec.name)
        else:
            try:
                npm, cypress = restore_caches(self.cache, self.npm_spec, self.cypress_spec)
            except (CacheError, OSError) as e:
                raise PipelineError("restore-cache", str(e)) from e

        self.report.npm_cache = npm
        self.report.cypress_cache = cypress
        logger.info("npm cache hit %s", npm.hit)
        logger.info("cypress cache hit %s", cypress.hit)

        if not self.dry_run:
            try:
                actions_runtime.set_output("npm-cache-hit", str(npm.hit).lower())
                actions_runtime.set_output("cypress-cache-hit", str(cypress.hit).lower())
            except OSError as e:
                raise PipelineError("restore-cache", f"Could not set outputs: {e}") from e
        return npm, cypress

    def save(self, spec: CacheSpec, label: str) -> None:
        if self.dry_run:
            return
        logger.info("saving %s", label)
        try:
            self.report.saved[spec.name] = self.cache.save(spec)
        except (CacheError, OSError) as e:
            raise PipelineError("save-cache", str(e)) from e

    def install(self) -> None:
        logger.info("installing NPM dependencies")
        # prevent lots of progress messages during install
        self._export("install", "CI", "1")
        self._shell("install", self.settings.commands.install)

    def verify_cypress_binary(self) -> None:
        logger.info("Verifying Cypress")
        self._shell("verify", self.settings.commands.verify)

    def install_percy(self) -> None:
        if not self.inputs.percy:
            logger.info("Skipping Percy install: percy is false/undefined")
            return
        self._shell("percy-install", self.settings.commands.percy_install)

    def build(self) -> None:
        logger.info("Running: %s", self.settings.commands.build)
        self._shell("build", self.settings.commands.build)

    def start_server_and_test(self) -> None:
        test_command = build_test_command(self.inputs, self.environ)
        if test_command is None:
            logger.info("Skipping running tests: runTests parameter is false")
            return

        logger.info("Running Cypress tests")
        self._export("test", "TERM", "xterm")
        self._shell(
            "test",
            build_server_and_test_command(
                test_command,
                start_script=self.settings.commands.start,
                url=self.settings.commands.url,
            ),
        )

    # ── Flow ────────────────────────────────────────────────────

    def run(self) -> PipelineReport:
        """Run every step in order.

        Raises:
            PipelineError: On the first failing step, with ``report`` set.
        """
        try:
            npm, cypress = self.restore()

            if not npm.hit or not cypress.hit:
                self.install()
                self.verify_cypress_binary()
                self.install_percy()
                self.save(self.npm_spec, "NPM modules")
                self.save(self.cypress_spec, "Cypress binary")
            else:
                self.install_percy()

            self.build()
            self.start_server_and_test()
        except PipelineError as e:
            self.report.failed_step = e.step
            self.report.error = e.message
            e.report = self.report
            logger.error("Step '%s' failed: %s", e.step, e.message)
            raise

        return self.report


def run_pipeline(
    inputs: ActionInputs,
    settings: Settings,
    npm_spec: CacheSpec,
    cypress_spec: CacheSpec,
    registry: AdapterRegistry,
    cache: CacheBackend,
    project_root: str = ".",
    dry_run: bool = False,
    environ: Mapping[str, str] | None = None,
) -> PipelineReport:
    """Build a Pipeline and run it. See ``Pipeline.run``."""
    return Pipeline(
        inputs=inputs,
        settings=settings,
        npm_spec=npm_spec,
        cypress_spec=cypress_spec,
        registry=registry,
        cache=cache,
        project_root=project_root,
        dry_run=dry_run,
        environ=environ,
    ).run()
