"""Command-line interface for the persistent volume dashboard."""

from __future__ import annotations

from pathlib import Path

import click
import uvicorn
from safir.click import display_help
from safir.logging import LogLevel, Profile

from .config import Config
from .constants import CONFIG_FILE, CONFIG_FILE_ENV_VAR
from .main import create_app

__all__ = ["help", "main", "run"]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Command-line interface for pvdashboard."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.argument("subtopic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None, subtopic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic, subtopic)


@main.command()
@click.option(
    "--config-file",
    "-c",
    type=click.Path(path_type=Path, dir_okay=False),
    envvar=CONFIG_FILE_ENV_VAR,
    default=CONFIG_FILE,
    help="Configuration file, which need not exist",
)
@click.option("--host", default=None, help="Address on which to listen")
@click.option(
    "--port", "-p", type=int, default=None, help="Port on which to listen"
)
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    envvar="DEBUG",
    help="Enable debug logging",
)
def run(
    *, config_file: Path, host: str | None, port: int | None, debug: bool
) -> None:
    """Gather volumes and claims and serve the dashboard.

    Data is gathered from Kubernetes once, before the server starts
    listening. If it cannot be gathered, the command exits with an error.
    """
    config = Config.load(config_file)
    if host:
        config.host = host
    if port:
        config.port = port
    if debug:
        config.log_level = LogLevel.DEBUG
        config.log_profile = Profile.development

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)
