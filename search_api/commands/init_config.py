"""Initialize configuration file for search-api."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from search_api.cli import Context, pass_context
from search_api.commands import EXIT_USAGE_ERROR
from search_api.config import get_default_config_path
from search_api.utils.output import error, info, print_path, success


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("search_api").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/search-api/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Create a new configuration file with default settings.

    Creates a configuration file at the default location
    (~/.config/search-api/config.toml) or at a custom path
    specified with --output.

    Examples:

    \b
      # Create config at default location
      search-api init-config

    \b
      # Create config at custom location
      search-api init-config --output ./search-api.toml

    \b
      # Overwrite existing config
      search-api init-config --force
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(EXIT_USAGE_ERROR)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(_load_example_config())
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(EXIT_USAGE_ERROR)

    success("Created config file")
    print_path(str(config_path), prefix="  ")
    info("Edit this file to tune full-text exclusion and type casting.")
