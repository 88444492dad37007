"""Relational bridge: searches over SQLAlchemy mapped classes.

Binding a mapped class predefines one equality search attribute per column,
plus ``min_<column>`` and ``max_<column>`` bounds for comparable columns.

Declarations may use an ``operator`` option::

    PersonSearch.search_accessor("min_age", operator="gte", column="age")
    PersonSearch.search_accessor("keyword", operator="full_text", columns=["name", "city"])

Single-column operators (``column`` required): eq, neq, lt, lte, gt, gte,
contains, starts_with, ends_with. Multi-column operator (``columns`` or
``column`` required): full_text.
"""

from __future__ import annotations

import datetime
import decimal
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sqlalchemy import Column
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.engine.default import DefaultDialect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from search_api.bridge.base import Bridge
from search_api.bridge.merge import merge_find_options
from search_api.config import Config, current_config
from search_api.exceptions import (
    InvalidOptionError,
    MissingOptionError,
    UnknownColumnError,
    UnknownOperatorError,
)
from search_api.fragment import SqlFragment
from search_api.search.attributes import Block, SearchAttributeBuilder
from search_api.text.criterion import TextCriterion

log = logging.getLogger(__name__)

SINGLE_COLUMN_OPERATORS: tuple[str, ...] = (
    "eq",
    "neq",
    "lt",
    "lte",
    "gt",
    "gte",
    "contains",
    "starts_with",
    "ends_with",
)
MULTI_COLUMN_OPERATORS: tuple[str, ...] = ("full_text",)

AUTOMATIC_BUILDER_OPTIONS: frozenset[str] = frozenset({"type_cast"})

_COMPARISONS = {"lt": "<", "lte": "<=", "gt": ">", "gte": ">="}
_LIKE_PATTERNS = {"contains": "%{}%", "starts_with": "{}%", "ends_with": "%{}"}

_COMPARABLE_TYPES = (
    int,
    float,
    decimal.Decimal,
    str,
    datetime.date,
    datetime.time,
    datetime.timedelta,
)

_TRUE_STRINGS = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "f", "false", "n", "no", "off"})


def is_mapped_class(model: Any) -> bool:
    """Whether ``model`` is a SQLAlchemy mapped class."""
    if not isinstance(model, type):
        return False
    try:
        return isinstance(sa_inspect(model), Mapper)
    except NoInspectionAvailable:
        return False


def _python_type(column: Column) -> type | None:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _is_comparable(python_type: type | None) -> bool:
    if python_type is None or issubclass(python_type, bool):
        return False
    return issubclass(python_type, _COMPARABLE_TYPES)


def _to_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return value


def _cast(value: Any, python_type: type) -> Any:
    """Cast a raw value to ``python_type``; values that don't cast pass through."""
    if value is None or isinstance(value, python_type):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    try:
        if python_type is bool:
            return _to_bool(value)
        if python_type is datetime.datetime:
            return datetime.datetime.fromisoformat(str(value))
        if python_type is datetime.date:
            return datetime.date.fromisoformat(str(value))
        if python_type is datetime.time:
            return datetime.time.fromisoformat(str(value))
        if python_type in (int, float, decimal.Decimal, str):
            return python_type(value)
    except (ValueError, TypeError, ArithmeticError):
        return value
    return value


def type_caster(column: Column) -> Callable[[Any], Any] | None:
    """Return a function casting raw values to the column's Python type."""
    python_type = _python_type(column)
    if python_type is None:
        return None

    def cast(value: Any) -> Any:
        return _cast(value, python_type)

    return cast


def _compose(first: Callable[[Any], Any], then: Callable[[Any], Any] | None) -> Callable[[Any], Any]:
    if then is None:
        return first
    return lambda value: then(first(value))


def equality_condition(sql_column: str, value: Any) -> SqlFragment:
    """``column = value``, ``IS NULL`` for None and ``IN (...)`` for collections."""
    if value is None:
        return SqlFragment(f"{sql_column} IS NULL")
    if isinstance(value, (list, tuple, set, frozenset, range)):
        values = list(value)
        if not values:
            return SqlFragment(f"{sql_column} IN (NULL)")
        placeholders = ", ".join("?" for _ in values)
        return SqlFragment(f"{sql_column} IN ({placeholders})", tuple(values))
    return SqlFragment(f"{sql_column} = ?", (value,))


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class RelationalBridge(Bridge):
    """Bridge for SQLAlchemy mapped classes."""

    def __init__(self, model: type, config: Config | None = None) -> None:
        self.model = model
        self.config = config if config is not None else current_config()
        self.mapper: Mapper = sa_inspect(model)
        self._preparer = DefaultDialect().identifier_preparer

    @property
    def table_name(self) -> str:
        return self._preparer.format_table(self.mapper.local_table)

    @property
    def primary_key(self) -> str | None:
        """The quoted name of the first primary key column, if any."""
        if not self.mapper.primary_key:
            return None
        return self._preparer.quote(self.mapper.primary_key[0].name)

    def columns(self) -> dict[str, Column]:
        """Mapped table columns by attribute name."""
        return {
            key: column
            for key, column in self.mapper.columns.items()
            if isinstance(column, Column)
        }

    def column(self, name: str) -> Column:
        """Look a column up by attribute name, then by column name."""
        columns = self.columns()
        if name in columns:
            return columns[name]
        for column in columns.values():
            if column.name == name:
                return column
        raise UnknownColumnError(self.model, name)

    def sql_column(self, column: Column) -> str:
        return f"{self.table_name}.{self._preparer.quote(column.name)}"

    # ------------------------------------------------------------------
    # Bridge contract
    # ------------------------------------------------------------------

    def automatic_search_attribute_builders(
        self, options: Mapping[str, Any]
    ) -> list[SearchAttributeBuilder]:
        """Equality attributes for every column, bounds for comparable ones.

        The ``type_cast`` option (default from config) casts incoming values
        according to column types.
        """
        invalid = set(options) - AUTOMATIC_BUILDER_OPTIONS
        if invalid:
            raise InvalidOptionError(invalid)
        type_cast = bool(options.get("type_cast", self.config.type_cast))

        builders = []
        for key, column in self.columns().items():
            base = {"type_cast": type_cast, "column": key}
            builders.append(SearchAttributeBuilder(key, {**base, "operator": "eq"}))
            if _is_comparable(_python_type(column)):
                builders.append(SearchAttributeBuilder(f"min_{key}", {**base, "operator": "gte"}))
                builders.append(SearchAttributeBuilder(f"max_{key}", {**base, "operator": "lte"}))
        return builders

    def rewrite_search_attribute_builder(self, builder: SearchAttributeBuilder) -> None:
        """Consume ``operator`` and its options, installing the matching block."""
        options = builder.options
        operator = options.pop("operator", None)
        if operator is None:
            return
        operator = str(operator)

        if operator in SINGLE_COLUMN_OPERATORS:
            column_name = options.pop("column", None)
            if not column_name or not isinstance(column_name, str):
                raise MissingOptionError(operator, "the column option to contain a column name")
            column = self.column(column_name)

            if options.pop("type_cast", False):
                caster = type_caster(column)
                if caster is not None:
                    options["store_as"] = _compose(caster, options.get("store_as"))

            builder.block = self._single_column_block(operator, builder.name, self.sql_column(column))

        elif operator in MULTI_COLUMN_OPERATORS:
            column_names = options.pop("columns", None) or options.pop("column", None)
            options.pop("column", None)
            # Queries are text; there is no single column type to cast to
            options.pop("type_cast", None)
            if isinstance(column_names, str):
                column_names = [column_names]
            if not column_names:
                raise MissingOptionError(operator, "the column or columns options to contain column names")
            sql_columns = [self.sql_column(self.column(name)) for name in column_names]

            if "exclude" in options:
                exclude = options.pop("exclude")
            else:
                exclude = self.config.exclude_patterns()

            builder.block = self._full_text_block(builder.name, sql_columns, exclude)

        else:
            raise UnknownOperatorError(operator)

        log.debug("Rewrote %s with %s operator", builder.name, operator)

    def merge_find_options(self, options_list: Iterable[Mapping[str, Any] | None]) -> dict[str, Any]:
        return merge_find_options(
            options_list,
            table_name=self.table_name,
            primary_key=self.primary_key,
        )

    # ------------------------------------------------------------------
    # Operator blocks
    # ------------------------------------------------------------------

    def _single_column_block(self, operator: str, name: str, sql_column: str) -> Block:
        if operator == "eq":

            def block(search: Any) -> dict[str, Any]:
                return {"conditions": equality_condition(sql_column, getattr(search, name))}

        elif operator == "neq":

            def block(search: Any) -> dict[str, Any]:
                value = getattr(search, name)
                if value is None:
                    return {"conditions": SqlFragment(f"{sql_column} IS NOT NULL")}
                return {
                    "conditions": SqlFragment(
                        f"{sql_column} <> ? OR {sql_column} IS NULL", (value,)
                    )
                }

        elif operator in _COMPARISONS:
            comparison = _COMPARISONS[operator]

            def block(search: Any) -> dict[str, Any] | None:
                value = getattr(search, name)
                if value is None:
                    return None
                return {"conditions": SqlFragment(f"{sql_column} {comparison} ?", (value,))}

        else:
            pattern = _LIKE_PATTERNS[operator]

            def block(search: Any) -> dict[str, Any] | None:
                value = _text(getattr(search, name))
                if not value:
                    return None
                return {"conditions": SqlFragment(f"{sql_column} LIKE ?", (pattern.format(value),))}

        return block

    def _full_text_block(self, name: str, sql_columns: list[str], exclude: Any) -> Block:
        parse_meta = self.config.parse_meta

        def block(search: Any) -> dict[str, Any] | None:
            value = _text(getattr(search, name))
            if not value:
                return None
            criterion = TextCriterion(value, exclude=exclude, parse_meta=parse_meta)
            return {"conditions": criterion.condition(sql_columns)}

        return block

    def __repr__(self) -> str:
        return f"RelationalBridge({self.model.__name__})"
