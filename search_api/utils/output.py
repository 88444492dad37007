"""Rich console output helpers for search-api."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

# Set by the CLI group; library code logs instead.
_verbose_enabled: bool = False


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Turn verbose command output on. --debug implies --verbose."""
    global _verbose_enabled
    _verbose_enabled = verbose or debug


def set_color(enabled: bool) -> None:
    """Enable or disable color on both console instances."""
    console.no_color = not enabled
    error_console.no_color = not enabled


# Custom theme for search-api
THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "path": "blue underline",
        "keyword.mandatory": "bold green",
        "keyword.negative": "bold red",
        "keyword.optional": "bold",
        "keyword.meta": "magenta",
        "sql": "blue",
        "sql.params": "dim",
    }
)

# Global console instances
console = Console(theme=THEME, stderr=False)
error_console = Console(theme=THEME, stderr=True)


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/info]")


def warning(message: str) -> None:
    """Print a warning message to stderr."""
    error_console.print(f"[warning]Warning:[/warning] {message}")


def error(message: str, hint: str | None = None) -> None:
    """Print an error message to stderr.

    Args:
        message: The error message.
        hint: Optional hint for resolution.
    """
    error_console.print(f"[error]Error:[/error] {message}")
    if hint:
        error_console.print(f"  [info]Hint:[/info] {hint}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/success]")


def verbose(message: str) -> None:
    """Print a message only when verbose mode is enabled."""
    if _verbose_enabled:
        console.print(f"[info]{message}[/info]")


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    """Create a styled two-column table.

    Args:
        title: Optional table title.
        **kwargs: Additional arguments passed to Table.

    Returns:
        Rich Table instance.
    """
    table = Table(title=title, show_header=True, header_style="bold", **kwargs)
    table.add_column("Key", style="info", no_wrap=True)
    table.add_column("Value")
    return table


def print_path(path: str, prefix: str = "") -> None:
    """Print a file path with styling.

    Args:
        path: The file path to print.
        prefix: Optional prefix text.
    """
    if prefix:
        console.print(f"{prefix} [path]{path}[/path]")
    else:
        console.print(f"[path]{path}[/path]")
