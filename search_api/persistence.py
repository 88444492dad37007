"""Execute merged find options with SQLAlchemy.

Fragments use positional ``?`` placeholders; they are converted to named
bind parameters of a ``text()`` clause here, at the boundary, and nowhere
else.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import TextClause, select, text
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.engine import Dialect
from sqlalchemy.engine.default import DefaultDialect
from sqlalchemy.exc import CompileError
from sqlalchemy.orm import Session, selectinload

from search_api.bridge.relational import RelationalBridge
from search_api.exceptions import InvalidFindOptionError, InvalidFragmentError
from search_api.fragment import FragmentLike, SqlFragment

log = logging.getLogger(__name__)

COUNT_ALIAS = "search_api_count"


def _placeholder_sql(sql: str) -> tuple[str, int]:
    """Rewrite ``?`` outside single-quoted literals as ``:pN`` and escape colons."""
    out: list[str] = []
    count = 0
    quoted = False
    for char in sql:
        if char == "'":
            quoted = not quoted
            out.append(char)
        elif char == "?" and not quoted:
            if out and (out[-1][-1:].isalnum() or out[-1][-1:] == "_"):
                out.append(" ")
            out.append(f":p{count}")
            count += 1
        elif char == ":":
            out.append("\\:")
        else:
            out.append(char)
    return "".join(out), count


def to_text_clause(fragment: FragmentLike) -> TextClause:
    """Bind a fragment's parameters into a SQLAlchemy ``text()`` clause.

    Raises:
        InvalidFragmentError: Placeholder and parameter counts differ.
    """
    fragment = SqlFragment.build(fragment)
    sql, placeholders = _placeholder_sql(fragment.sql)
    if placeholders != len(fragment.params):
        raise InvalidFragmentError(fragment.sql, placeholders, len(fragment.params))

    clause = text(sql)
    if fragment.params:
        clause = clause.bindparams(
            **{f"p{index}": value for index, value in enumerate(fragment.params)}
        )
    return clause


def build_statement(model: type, options: Mapping[str, Any]) -> SqlFragment:
    """Assemble a SELECT statement from merged find options."""
    table_name = RelationalBridge(model).table_name

    def part(key: str) -> SqlFragment:
        return SqlFragment.build(options.get(key))

    select_list = part("select") or SqlFragment(f"{table_name}.*")
    clauses = [
        SqlFragment(f"SELECT {select_list.sql} FROM {table_name}", select_list.params),
        part("joins"),
    ]
    for keyword, key in (("WHERE", "conditions"), ("GROUP BY", "group"), ("ORDER BY", "order")):
        clause = part(key)
        if clause:
            clauses.append(SqlFragment(f"{keyword} {clause.sql}", clause.params))

    statement = SqlFragment.join(" ", clauses)
    log.debug("Search statement: %s %r", statement.sql, statement.params)
    return statement


def _loader_options(model: type, include: Any) -> list[Any]:
    if not include:
        return []
    if isinstance(include, str):
        include = [include]
    relationships = sa_inspect(model).relationships
    loaders = []
    for name in include:
        if name not in relationships:
            raise InvalidFindOptionError(
                ["include"], f"{model.__name__} has no relationship '{name}'"
            )
        loaders.append(selectinload(getattr(model, name)))
    return loaders


def find_all(session: Session, model: type, options: Mapping[str, Any]) -> list[Any]:
    """Load the model instances matching merged find options.

    Relationships named by ``include`` are eager-loaded.
    """
    clause = to_text_clause(build_statement(model, options))
    stmt = (
        select(model)
        .options(*_loader_options(model, options.get("include")))
        .from_statement(clause)
    )
    return list(session.scalars(stmt).unique())


def count(session: Session, model: type, options: Mapping[str, Any]) -> int:
    """Count the rows matching merged find options."""
    statement = build_statement(model, options)
    wrapped = SqlFragment(
        f"SELECT COUNT(*) FROM ({statement.sql}) AS {COUNT_ALIAS}", statement.params
    )
    return session.execute(to_text_clause(wrapped)).scalar_one()


def render(fragment: FragmentLike, dialect: Dialect | None = None) -> str:
    """Render a fragment with its parameters inlined, for display only."""
    fragment = SqlFragment.build(fragment)
    clause = to_text_clause(fragment)
    try:
        compiled = clause.compile(
            dialect=dialect or DefaultDialect(),
            compile_kwargs={"literal_binds": True},
        )
    except CompileError:
        log.debug("Can't inline parameters of %r", fragment)
        return f"{fragment.sql} -- {list(fragment.params)!r}"
    return str(compiled)
