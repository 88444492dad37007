"""Show the find options a search class composes."""

from __future__ import annotations

import importlib
import json
import os
import sys
from typing import Any

import click
from rich.markup import escape

from search_api.cli import Context, pass_context
from search_api.commands import EXIT_SEARCH_ERROR, EXIT_SUCCESS, EXIT_USAGE_ERROR
from search_api.exceptions import SearchApiError
from search_api.fragment import SqlFragment
from search_api.search import Search
from search_api.utils.output import console, create_table, error, info, verbose


def _load_search_class(target: str) -> type[Search]:
    """Import ``module:SearchClass``.

    Raises:
        click.BadParameter: If the target can't be imported or isn't a Search class.
    """
    module_name, _, class_name = target.partition(":")
    if not module_name or not class_name:
        raise click.BadParameter("expected module:SearchClass", param_hint="TARGET")

    # Allow targets relative to the working directory
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"can't import {module_name}: {e}", param_hint="TARGET") from e

    search_class = getattr(module, class_name, None)
    if not isinstance(search_class, type) or not issubclass(search_class, Search):
        raise click.BadParameter(
            f"{class_name} is not a Search class in {module_name}", param_hint="TARGET"
        )
    return search_class


def _parse_assignments(assignments: tuple[str, ...]) -> dict[str, Any]:
    """Parse NAME=VALUE pairs; values are JSON when they decode, strings otherwise."""
    values: dict[str, Any] = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {assignment!r}")
        try:
            values[name] = json.loads(raw)
        except json.JSONDecodeError:
            values[name] = raw
    return values


def _jsonable(value: Any) -> Any:
    if isinstance(value, SqlFragment):
        return {"sql": value.sql, "params": list(value.params)}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@click.command("compose")
@click.argument("target")
@click.argument("assignments", nargs=-1)
@click.option(
    "--statement",
    "-s",
    is_flag=True,
    default=False,
    help="Also show the SELECT statement (SQLAlchemy models only)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@pass_context
def cli(
    ctx: Context,
    target: str,
    assignments: tuple[str, ...],
    statement: bool,
    output_format: str,
) -> None:
    """Compose the find options of a search.

    TARGET names a Search subclass as module:SearchClass. Each NAME=VALUE
    assigns a search attribute; VALUE is decoded as JSON when possible
    (18, true, null, ["a", "b"]) and used as a string otherwise.

    \b
    Examples:
      search-api compose myapp.searches:PersonSearch min_age=18 keyword=bob
      search-api compose myapp.searches:PersonSearch 'city=["Paris", "Lyon"]' -s
    """
    try:
        search_class = _load_search_class(target)
        values = _parse_assignments(assignments)
    except click.BadParameter as e:
        error(e.format_message())
        raise SystemExit(EXIT_USAGE_ERROR)

    verbose(f"Search attributes: {', '.join(search_class.search_attributes())}")

    try:
        search = search_class(values)
        options = search.find_options()
        sql = _statement(search_class, options) if statement else None
    except SearchApiError as e:
        error(str(e))
        raise SystemExit(EXIT_SEARCH_ERROR)

    if output_format == "json":
        data: dict[str, Any] = {key: _jsonable(value) for key, value in options.items()}
        if sql is not None:
            data["statement"] = _jsonable(sql)
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        _print_table(search, options, sql)

    raise SystemExit(EXIT_SUCCESS)


def _statement(search_class: type[Search], options: dict[str, Any]) -> SqlFragment | None:
    from search_api.bridge.relational import is_mapped_class
    from search_api.persistence import build_statement

    model = search_class.schema.model
    if not is_mapped_class(model):
        info(f"{model!r} is not a SQLAlchemy model, no statement to show")
        return None
    return build_statement(model, options)


def _print_table(search: Search, options: dict[str, Any], sql: SqlFragment | None) -> None:
    """Print merged find options as a table."""
    if not options:
        info(f"{escape(repr(search))} has no find options")
    else:
        table = create_table(title=escape(repr(search)))
        for key, value in options.items():
            if isinstance(value, SqlFragment):
                cell = f"[sql]{escape(value.sql)}[/sql]"
                if value.params:
                    cell += f"\n[sql.params]{escape(repr(list(value.params)))}[/sql.params]"
            else:
                cell = escape(str(value))
            table.add_row(key, cell)
        console.print(table)

    if sql is not None:
        console.print(f"[sql]{escape(sql.sql)}[/sql]")
        if sql.params:
            console.print(f"[sql.params]{escape(repr(list(sql.params)))}[/sql.params]")
