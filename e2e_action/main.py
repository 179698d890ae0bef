"""
e2e-action — CLI entrypoint.

Usage:
    e2e-action --help
    e2e-action run
    e2e-action keys
    e2e-action command --record --parallel
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from e2e_action import __version__
from e2e_action.core.observability.logging_config import setup_logging


def _overrides(**flags: object) -> dict[str, object]:
    """CLI flags that were actually given (None means 'use the input')."""
    return {k: v for k, v in flags.items() if v is not None}


def _input_options(func):
    """Flags mirroring the action inputs. Unset flags fall back to INPUT_*."""
    options = [
        click.option("--percy/--no-percy", default=None, help="Wrap the run in 'percy exec'."),
        click.option(
            "--run-tests/--no-run-tests", "run_tests", default=None,
            help="Run the server-and-test step.",
        ),
        click.option("--record/--no-record", default=None, help="Record to the Cypress dashboard."),
        click.option("--parallel/--no-parallel", default=None, help="Run specs in parallel."),
        click.option("--headed/--no-headed", default=None, help="Show the browser."),
        click.option("--group", default=None, help="Dashboard group name."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="e2e-action")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to e2e-action.yml (default: auto-detect).",
)
@click.option(
    "--working-directory",
    "-C",
    "working_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Project checkout to run in (default: cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    working_dir: str | None,
) -> None:
    """e2e-action — cache, build, serve and run Cypress tests in CI."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["project_root"] = Path(working_dir) if working_dir else Path.cwd()

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("E2E_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("E2E_LOG_FILE"),
        log_file_level=os.environ.get("E2E_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Print the steps but don't run or cache anything.")
@click.option("--mock", is_flag=True, help="Use mock adapters (no real execution).")
@_input_options
@click.pass_context
def run(
    ctx: click.Context,
    as_json: bool,
    dry_run: bool,
    mock: bool,
    **flags: object,
) -> None:
    """Restore caches, install, build, start the server and run Cypress.

    Examples:

        e2e-action run

        e2e-action run --record --parallel --group smoke

        e2e-action run --dry-run --no-run-tests
    """
    from e2e_action.core.services.actions_runtime import set_failed
    from e2e_action.core.use_cases.run import run_action

    result = run_action(
        project_root=ctx.obj["project_root"],
        config_path=ctx.obj.get("config_path"),
        overrides=_overrides(**flags),
        dry_run=dry_run,
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(set_failed(result.error, err=True))
        sys.exit(0)

    report = result.report
    if report is not None and not ctx.obj.get("quiet"):
        mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
        click.secho(f"\n⚡ {mode_label}e2e — {result.project_root}", fg="cyan", bold=True)
        for cache in (report.npm_cache, report.cypress_cache):
            if cache is None:
                continue
            icon = "✓" if cache.hit else "✗"
            click.echo(f"   {icon} {cache.name} cache {'hit' if cache.hit else 'miss'}")
        for receipt in report.receipts:
            if receipt.ok:
                click.secho(f"   ✓ {receipt.action_id}", fg="green", nl=False)
                click.echo(f" ({receipt.duration_ms}ms)")
            elif receipt.failed:
                click.secho(f"   ✗ {receipt.action_id}", fg="red")
            else:
                click.secho(f"   ⊘ {receipt.action_id} ", fg="yellow", nl=False)
                click.echo(f"({receipt.output})")
        click.echo()

    if result.error:
        sys.exit(set_failed(result.error))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def keys(ctx: click.Context, as_json: bool) -> None:
    """Print the npm and Cypress cache keys for this checkout."""
    from e2e_action.core.config.loader import ConfigError
    from e2e_action.core.services.actions_runtime import set_failed
    from e2e_action.core.use_cases.run import prepare

    try:
        action = prepare(ctx.obj["project_root"], ctx.obj.get("config_path"))
    except ConfigError as e:
        sys.exit(set_failed(str(e)))

    specs = (action.npm_spec, action.cypress_spec)
    if as_json:
        click.echo(json.dumps({s.name: s.model_dump() for s in specs}, indent=2))
        return

    for spec in specs:
        click.secho(f"{spec.name}", fg="cyan", bold=True)
        click.echo(f"   path:         {spec.input_path}")
        click.echo(f"   primary key:  {spec.primary_key}")
        click.echo(f"   restore keys: {spec.restore_keys}")


@cli.command()
@_input_options
@click.option("--start", "start_script", default=None, help="npm script that starts the server.")
@click.option("--url", default=None, help="Port or URL to wait for.")
@click.pass_context
def command(
    ctx: click.Context,
    start_script: str | None,
    url: str | None,
    **flags: object,
) -> None:
    """Print the Cypress and start-server-and-test command lines."""
    from e2e_action.core.config.inputs import load_inputs
    from e2e_action.core.config.loader import ConfigError, load_settings
    from e2e_action.core.services.actions_runtime import set_failed
    from e2e_action.core.services.commands import (
        build_server_and_test_command,
        build_test_command,
    )

    try:
        settings = load_settings(ctx.obj.get("config_path"), start_dir=ctx.obj["project_root"])
    except ConfigError as e:
        sys.exit(set_failed(str(e)))

    inputs = load_inputs(overrides=_overrides(**flags))
    test_command = build_test_command(inputs)
    if test_command is None:
        click.secho("Tests disabled (runTests is false)", fg="yellow")
        return

    click.echo(test_command)
    click.echo(
        build_server_and_test_command(
            test_command,
            start_script=start_script or settings.commands.start,
            url=url or settings.commands.url,
        )
    )


if __name__ == "__main__":
    cli()
