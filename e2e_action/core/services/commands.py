"""
Command builders — turn input flags into shell command lines.

Pure functions, no I/O. The pipeline decides when to run them.
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping

from e2e_action.core.models.inputs import ActionInputs

logger = logging.getLogger(__name__)


def parallel_build_id(environ: Mapping[str, str] | None = None) -> str:
    """Id that ties parallel jobs of one workflow run together.

    On GitHub Actions the workflow name plus the commit SHA is shared by
    every job of the run and differs between runs.
    """
    env = os.environ if environ is None else environ
    return f"{env.get('GITHUB_WORKFLOW', '')} - {env.get('GITHUB_SHA', '')}"


def build_test_command(
    inputs: ActionInputs,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Cypress run command for the given flags.

    Returns:
        The command line, or None when tests are disabled.
    """
    if not inputs.run_tests:
        return None

    cmd = "percy exec -- " if inputs.percy else ""
    cmd += "cypress run"

    if inputs.headed:
        cmd += " --headed"
    if inputs.record:
        cmd += " --record"
    if inputs.parallel:
        cmd += f" --parallel --ci-build-id {shlex.quote(parallel_build_id(environ))}"
    if inputs.group:
        cmd += f" --group {shlex.quote(inputs.group)}"

    logger.info("Cypress test command: %s", cmd)
    return cmd


def build_server_and_test_command(
    test_command: str,
    start_script: str = "start",
    url: str = "3000",
) -> str:
    """Wrap a test command in start-server-and-test.

    The server is started with ``npm run <start_script>``; tests run once
    ``url`` (a port or URL) responds, and the server is stopped after.
    """
    return " ".join([
        "npx start-server-and-test",
        shlex.quote(start_script),
        shlex.quote(url),
        shlex.quote(test_command),
    ])
