"""Show how a free-text query is parsed and compiled."""

from __future__ import annotations

import json
import re

import click
from rich.markup import escape

from search_api.cli import Context, pass_context
from search_api.commands import EXIT_SUCCESS, EXIT_USAGE_ERROR
from search_api.exceptions import TextCriterionParseError
from search_api.text import TextCriterion
from search_api.utils.output import console, create_table, error, verbose

BUCKETS = ("mandatory", "negative", "optional")


def _criterion_data(criterion: TextCriterion, fields: tuple[str, ...]) -> dict:
    data = {
        "query": criterion.search_string,
        "mandatory": criterion.mandatory_keywords,
        "negative": criterion.negative_keywords,
        "optional": criterion.optional_keywords,
        "meta": criterion.meta_keywords,
        "normalized": str(criterion),
    }
    if fields:
        condition = criterion.condition(list(fields))
        data["condition"] = {"sql": condition.sql, "params": list(condition.params)}
    return data


@click.command("parse")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--field",
    "-F",
    "fields",
    multiple=True,
    help="Column to compile the query against (repeatable)",
)
@click.option(
    "--no-meta",
    is_flag=True,
    default=False,
    help="Keep key:value pairs as plain keywords",
)
@click.option(
    "--exclude",
    "-x",
    "excludes",
    multiple=True,
    help="Regular expression of keywords to drop (repeatable, default: from config)",
)
@click.option(
    "--no-exclude",
    is_flag=True,
    default=False,
    help="Keep every keyword",
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
    query: tuple[str, ...],
    fields: tuple[str, ...],
    no_meta: bool,
    excludes: tuple[str, ...],
    no_exclude: bool,
    output_format: str,
) -> None:
    """Parse a free-text search query.

    QUERY is a free-text search string. Multiple arguments are joined
    with spaces.

    \b
    Syntax:
      word          optional keyword
      +word         mandatory keyword
      -word         negative keyword
      "two words"   phrase (works with + and -)
      key:value     meta keyword

    \b
    Examples:
      search-api parse 'bonjour +les +amis -toto -"allons bon"'
      search-api parse 'define:"salut poulette"' --no-meta
      search-api parse 'bob paris' -F people.name -F people.city
    """
    config = ctx.config
    query_string = " ".join(query)

    try:
        if no_exclude:
            exclude = []
        elif excludes:
            exclude = [re.compile(pattern) for pattern in excludes]
        else:
            exclude = config.exclude_patterns() if config is not None else []
    except re.error as e:
        error(f"Invalid exclude pattern: {e}")
        raise SystemExit(EXIT_USAGE_ERROR)

    parse_meta = not no_meta and (config.parse_meta if config is not None else True)
    verbose(f"Excluding {len(exclude)} pattern(s), meta keywords {'on' if parse_meta else 'off'}")

    try:
        criterion = TextCriterion(query_string, exclude=exclude, parse_meta=parse_meta)
    except TextCriterionParseError as e:
        error(f"Invalid search query: {e}")
        raise SystemExit(EXIT_USAGE_ERROR)

    data = _criterion_data(criterion, fields)

    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        _print_table(data)

    raise SystemExit(EXIT_SUCCESS)


def _print_table(data: dict) -> None:
    """Print keyword buckets and the compiled condition."""
    table = create_table(title=f"Query: {escape(data['query'])}")
    for bucket in BUCKETS:
        keywords = ", ".join(escape(keyword) for keyword in data[bucket])
        table.add_row(bucket, f"[keyword.{bucket}]{keywords}[/keyword.{bucket}]")
    for key, values in data["meta"].items():
        table.add_row(
            f"meta {escape(key)}",
            f"[keyword.meta]{escape(', '.join(values))}[/keyword.meta]",
        )
    table.add_row("normalized", escape(data["normalized"]))
    console.print(table)

    if "condition" in data:
        condition = data["condition"]
        console.print(f"[sql]{escape(condition['sql'] or '(no condition)')}[/sql]")
        if condition["params"]:
            console.print(f"[sql.params]{escape(repr(condition['params']))}[/sql.params]")
