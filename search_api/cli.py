"""Command-line interface for search-api."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from rich.logging import RichHandler

from search_api import __version__
from search_api.commands import EXIT_USAGE_ERROR
from search_api.config import Config, load_config, set_current_config
from search_api.exceptions import ConfigError
from search_api.utils.output import (
    error,
    error_console,
    set_color,
    set_verbosity,
    warning,
)


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def _setup_logging(debug: bool) -> None:
    """Route library log records through Rich when debugging."""
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/search-api/config.toml)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.version_option(version=__version__, prog_name="search-api")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """search-api: compose search conditions from named search attributes.

    Inspect how free-text queries are parsed and which find options a
    search class produces.

    Configuration is loaded from ~/.config/search-api/config.toml by default.
    Use --config to specify an alternative configuration file.

    Examples:

        # Show the keywords of a free-text query
        search-api parse 'bonjour +les -toto' -F name -F city

        # Show the find options of a search class
        search-api compose myapp.searches:PersonSearch min_age=18
    """
    app_ctx = ctx.ensure_object(Context)
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    set_verbosity(verbose=verbose, debug=debug)
    _setup_logging(debug)

    # NO_COLOR: https://no-color.org
    color = not no_color and "NO_COLOR" not in os.environ
    if not color:
        set_color(False)

    try:
        app_ctx.config, warnings = load_config(config)
    except ConfigError as e:
        error(str(e))
        ctx.exit(EXIT_USAGE_ERROR)
        return

    set_current_config(app_ctx.config)
    if color and not app_ctx.config.colored_output:
        set_color(False)
    if not quiet:
        for message in warnings:
            warning(message)


def register_commands() -> None:
    """Add every command found in search_api.commands to the group."""
    from search_api.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


register_commands()
