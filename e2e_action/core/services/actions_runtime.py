"""
GitHub Actions runtime — talk back to the workflow runner.

Variables exported here are visible to this process and its children
immediately, and to later workflow steps through the ``GITHUB_ENV``
file. Outside of Actions (no ``GITHUB_ENV``/``GITHUB_OUTPUT``) the
file writes are skipped.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

import click

logger = logging.getLogger(__name__)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _append_file_command(env_var: str, name: str, value: str) -> bool:
    """Append ``name<<delim / value / delim`` to the file named by env_var."""
    path = os.environ.get(env_var)
    if not path:
        return False

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: {name!r} contains the delimiter")

    with Path(path).open("a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


def export_variable(name: str, value: str) -> None:
    """Set an environment variable for this process and later steps."""
    os.environ[name] = value
    if _append_file_command("GITHUB_ENV", name, value):
        logger.debug("Exported %s to GITHUB_ENV", name)


def set_output(name: str, value: str) -> None:
    """Set a step output (no-op outside of Actions)."""
    if _append_file_command("GITHUB_OUTPUT", name, value):
        logger.debug("Set output %s=%s", name, value)


def error(message: str, err: bool = False) -> None:
    """Emit an ``::error::`` annotation (on stderr when ``err`` is set)."""
    click.echo(f"::error::{_escape_data(message)}", err=err)


def set_failed(message: str, err: bool = False) -> int:
    """Report the job failure reason.

    Pass ``err=True`` when stdout is reserved for machine-readable output.

    Returns:
        The exit code the caller should terminate with.
    """
    error(message, err=err)
    return 1
