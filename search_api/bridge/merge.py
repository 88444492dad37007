"""Merge engine: fold the option-maps of several search attributes into one.

Each option-map may carry any of the keys in ``VALID_FIND_OPTIONS``. Values
are bare SQL strings, ``(template, *params)`` sequences or SqlFragments;
``include`` holds association names.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from search_api.exceptions import InvalidFindOptionError
from search_api.fragment import SqlFragment

log = logging.getLogger(__name__)

VALID_FIND_OPTIONS: tuple[str, ...] = (
    "conditions",
    "include",
    "joins",
    "order",
    "select",
    "group",
    "having",
)


def validate_find_options(options: Any) -> None:
    """Raise InvalidFindOptionError unless ``options`` is a valid option-map.

    ``None`` is accepted: it contributes nothing.
    """
    if options is None:
        return
    if not isinstance(options, Mapping):
        raise InvalidFindOptionError([], f"Find options must be a mapping, got {options!r}")
    unknown = [key for key in options if key not in VALID_FIND_OPTIONS]
    if unknown:
        raise InvalidFindOptionError(unknown)


def is_blank(value: Any) -> bool:
    """None, whitespace-only strings, empty fragments and empty collections are blank."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, SqlFragment):
        return not value.sql.strip()
    if isinstance(value, (Sequence, Mapping, set, frozenset)):
        return len(value) == 0
    return False


def _unique(fragments: Iterable[SqlFragment]) -> list[SqlFragment]:
    unique: list[SqlFragment] = []
    for fragment in fragments:
        if fragment not in unique:
            unique.append(fragment)
    return unique


def _include_names(value: Any) -> list[Any]:
    if isinstance(value, Mapping):
        return list(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def merge_find_options(
    options_list: Iterable[Mapping[str, Any] | None],
    *,
    table_name: str | None = None,
    primary_key: str | None = None,
) -> dict[str, Any]:
    """Merge option-maps in order.

    Args:
        options_list: Option-maps, ``None`` entries are skipped.
        table_name: Base table, used for the default ``group`` of ``having``
            clauses and the ``DISTINCT`` select of joined searches.
        primary_key: Primary key column, the default ``group`` of ``having``.

    Returns:
        An option-map of SqlFragments (``include`` is a list of names).

    Raises:
        InvalidFindOptionError: ``having`` without ``group`` and no primary key.
    """
    collected: dict[str, list[Any]] = {}
    for options in options_list:
        if options is None:
            continue
        for key, value in options.items():
            if is_blank(value):
                continue
            collected.setdefault(key, []).append(value)

    def fragments(key: str) -> list[SqlFragment]:
        return [f for f in (SqlFragment.build(v) for v in collected.get(key, [])) if f]

    merged: dict[str, Any] = {}

    conditions = _unique(fragments("conditions"))
    if conditions:
        merged["conditions"] = SqlFragment.join(" AND ", conditions, wrap=True)

    if "include" in collected:
        includes: list[Any] = []
        for value in collected["include"]:
            for name in _include_names(value):
                if name not in includes:
                    includes.append(name)
        merged["include"] = includes

    joins = _unique(fragments("joins"))
    if joins:
        merged["joins"] = SqlFragment.join(" ", joins)

    having = _unique(fragments("having"))
    groups = _unique(fragments("group"))
    if having and not groups:
        if primary_key is None:
            raise InvalidFindOptionError(
                ["having"], "A having clause needs a group clause or a known primary key"
            )
        default_group = f"{table_name}.{primary_key}" if table_name else primary_key
        groups = [SqlFragment(default_group)]

    if groups:
        group = SqlFragment.join(", ", groups)
        if having:
            clause = SqlFragment.join(" AND ", having, wrap=True)
            group = SqlFragment(f"{group.sql} HAVING {clause.sql}", group.params + clause.params)
        merged["group"] = group

    order = fragments("order")
    if order:
        merged["order"] = SqlFragment.join(", ", order)

    select = _unique(fragments("select"))
    if select:
        merged["select"] = SqlFragment.join(", ", select)
    elif joins and table_name:
        # joined rows would otherwise carry the joined tables' columns
        merged["select"] = SqlFragment(f"DISTINCT {table_name}.*")

    log.debug("Merged find options: %s", merged)
    return merged
