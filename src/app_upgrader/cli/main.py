"""Command-line interface for app-upgrader."""

import importlib
import logging
import os
import sys
from pathlib import Path

import click

from app_upgrader.__version__ import __version__
from app_upgrader.config import UpgraderConfig, load_config
from app_upgrader.upgrade import (
    AppUpgrader,
    StepRegistry,
    UpgradeCanceled,
    UpgradeCompletedWithErrors,
    UpgraderError,
    format_version,
)


def load_steps(import_path: str) -> StepRegistry:
    """Import a StepRegistry from a ``module:attribute`` path.

    The current directory is put on ``sys.path`` first, so project-local
    modules resolve without being installed.

    Raises:
        click.BadParameter: If the path cannot be resolved to a registry.
    """
    module_name, _, attr = import_path.partition(":")
    if not module_name or not attr:
        raise click.BadParameter(
            f"Expected 'module:attribute', got {import_path!r}", param_hint="--steps"
        )

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(
            f"Cannot import {module_name!r}: {e}", param_hint="--steps"
        ) from e

    registry = getattr(module, attr, None)
    if not isinstance(registry, StepRegistry):
        raise click.BadParameter(
            f"{import_path!r} is not a StepRegistry", param_hint="--steps"
        )
    return registry


def _make_upgrader(config: UpgraderConfig, steps: StepRegistry) -> AppUpgrader:
    return AppUpgrader(steps.versions, config.create_store(), name=config.name)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML config file",
)
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON version store (overrides config and APP_UPGRADER_STATE_FILE)",
)
@click.option("--name", help="Version slot name (overrides config and APP_UPGRADER_NAME)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    state_file: Path | None,
    name: str | None,
    verbose: bool,
) -> None:
    """app-upgrader - Run ordered, one-time upgrade steps for an app version slot.

    Steps are loaded from a StepRegistry given as 'module:attribute'.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    overrides = {}
    if state_file is not None:
        overrides["state_file"] = state_file.expanduser()
    if name:
        overrides["name"] = name

    ctx.obj = config.model_copy(update=overrides)


steps_option = click.option(
    "--steps",
    "steps_path",
    required=True,
    help="Import path of the StepRegistry, e.g. myapp.upgrades:steps",
)


@main.command()
@steps_option
@click.pass_obj
def status(config: UpgraderConfig, steps_path: str) -> None:
    """Show the current version and pending upgrades."""
    steps = load_steps(steps_path)
    upgrader = _make_upgrader(config, steps)

    try:
        info = upgrader.get_status()
    except UpgraderError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)

    click.echo("Upgrade Status:")
    click.echo(f"  Slot: {info['name']}")
    click.echo(f"  Store: {config.state_file}")
    click.echo(f"  Current version: {info['current_label']}")
    click.echo(f"  Latest version: {format_version(steps.versions.latest)}")
    click.echo(f"  Pending: {info['pending_count']}")
    click.echo("")

    missing = steps.missing([v["version"] for v in info["pending_versions"]])
    if info["pending_versions"]:
        click.echo("Pending versions:")
        for v in info["pending_versions"]:
            marker = " (no step registered)" if v["version"] in missing else ""
            click.echo(f"  - {v['label']}{marker}")
        click.echo("")
        click.echo("Run 'app-upgrader run' to apply pending upgrades.")
    else:
        click.echo("✓ Up to date.")


@main.command()
@steps_option
@click.pass_obj
def run(config: UpgraderConfig, steps_path: str) -> None:
    """Run pending upgrade steps.

    Exits with status 1 if a fatal error cancels the run. Non-fatal
    errors are reported but do not change the exit status.
    """
    steps = load_steps(steps_path)
    upgrader = _make_upgrader(config, steps)
    upgrader.set_progress_callback(click.echo)

    try:
        report = upgrader.run(steps)
    except UpgraderError as e:
        click.echo(f"❌ Upgrade aborted: {e}")
        sys.exit(1)

    error = report.error

    click.echo("")
    if isinstance(error, UpgradeCanceled):
        click.echo("❌ Upgrade failed:")
        click.echo(f"  - on version {format_version(error.at_version)}")
        click.echo(f"  - fatal errors: {error.fatal_errors!r}")
        click.echo(f"  - non-fatal errors: {error.non_fatal_errors!r}")
        click.echo(f"  Version remains at {format_version(report.to_version)}")
        sys.exit(1)

    if isinstance(error, UpgradeCompletedWithErrors):
        click.echo(f"⚠️  Upgrade completed with errors: {error.errors!r}")
    else:
        click.echo("✓ Upgrade completed successfully")
    click.echo(f"Current version: {format_version(report.to_version)}")


@main.command()
@click.argument("version", type=int)
@steps_option
@click.pass_obj
def stamp(config: UpgraderConfig, version: int, steps_path: str) -> None:
    """Record VERSION as current without running any step."""
    steps = load_steps(steps_path)
    upgrader = _make_upgrader(config, steps)

    try:
        upgrader.set_current_version(version)
    except UpgraderError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)

    click.echo(f"✓ Stamped {config.name!r} at version {format_version(upgrader.get_current_version())}")


if __name__ == "__main__":
    main()
