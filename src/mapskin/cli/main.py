#!/usr/bin/env python
"""
Main CLI entry point for mapskin.
"""

import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
from loguru import logger
from rich import print as rprint

from mapskin import __version__
from mapskin.config import ENVIRONMENT_ALIASES, AppConfig, ConfigurationError, load_config
from mapskin.utils.logging import mapskin_logger, setup_logging


@click.group(context_settings={"show_default": True})
@click.version_option(version=__version__, prog_name="mapskin")
@click.option(
    "--config", "-c", type=click.Path(exists=True, path_type=Path), help="Configuration file path"
)
@click.option(
    "--env",
    "-e",
    type=click.Choice(sorted(ENVIRONMENT_ALIASES.keys())),
    default="development",
    envvar="MAPSKIN_ENVIRONMENT",
    help="Environment (dev/test/prod)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output and debug logging")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Custom log file path (default: from configuration)",
)
@click.pass_context
def cli(ctx, config, env, verbose, log_file):
    """mapskin - re-skin vector basemap styles"""
    ctx.ensure_object(dict)
    environment = ENVIRONMENT_ALIASES[env.lower()]

    try:
        app_config: AppConfig = load_config(config_path=config, environment=environment)
    except ConfigurationError as e:
        rprint(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    ctx.obj["app_config"] = app_config
    ctx.obj["config_path"] = config
    ctx.obj["environment"] = environment
    ctx.obj["verbose"] = verbose

    setup_logging(
        verbose=verbose, log_file=log_file, environment=environment, app_config=app_config
    )
    logger.debug(f"mapskin CLI started (environment: {environment}, config={config})")


@cli.command()
def info() -> None:
    """Display information about the mapskin installation."""
    click.echo(f"mapskin version: {__version__}")
    click.echo(f"Python version: {sys.version.split()[0]}")

    click.echo("\nDependencies:")
    for distribution in ("click", "rich", "loguru", "pydantic", "PyYAML", "requests"):
        try:
            click.echo(f"  ✓ {distribution} {version(distribution)}")
        except PackageNotFoundError:
            click.echo(f"  ✗ {distribution} (not available)")


@cli.group()
def logs():
    """Logging and diagnostics commands."""
    pass


@logs.command("show")
def show_logs():
    """Show current logging configuration."""
    mapskin_logger.show_log_info()


from .style_cmd import apply, classify, entities, presets, snapshot  # noqa: E402

for command in (presets, classify, entities, snapshot, apply):
    cli.add_command(command)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
