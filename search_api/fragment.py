"""SQL fragments: a template string with positional ``?`` placeholders and its parameters.

Fragments are immutable. Combining two fragments parenthesizes both sides and
concatenates their parameters from left to right; the empty fragment is the
identity of every combination::

    >>> a = SqlFragment("a=?", (1,))
    >>> a | SqlFragment()
    SqlFragment(sql='a=?', params=(1,))
    >>> (a | ("b=?", 2)) & "c=3"
    SqlFragment(sql='((a=?) OR (b=?)) AND (c=3)', params=(1, 2))
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Union

AND = "AND"
OR = "OR"
LOGICAL_OPERATORS: frozenset[str] = frozenset({AND, OR})

# Anything SqlFragment.build() accepts.
FragmentLike = Union["SqlFragment", str, tuple, list, None]


@dataclass(frozen=True)
class SqlFragment:
    """A ``(sql, params)`` pair with boolean combinators."""

    sql: str = ""
    params: tuple[Any, ...] = ()
    logical_operator: str = field(default=AND, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))
        operator = (self.logical_operator or AND).upper()
        if operator not in LOGICAL_OPERATORS:
            raise ValueError(f"Unsupported logical operator {self.logical_operator!r}")
        object.__setattr__(self, "logical_operator", operator)

    @classmethod
    def build(cls, value: FragmentLike = None) -> SqlFragment:
        """Build a fragment from a bare string, a ``(sql, *params)`` sequence or a fragment."""
        if value is None:
            return cls()
        if isinstance(value, SqlFragment):
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, (tuple, list)):
            if not value:
                return cls()
            sql, *params = value
            if not isinstance(sql, str):
                raise TypeError(f"SQL fragment template must be a string, got {sql!r}")
            return cls(sql, tuple(params))
        raise TypeError(f"Can't build a SQL fragment from {value!r}")

    @classmethod
    def join(
        cls,
        separator: str,
        fragments: Iterable[FragmentLike],
        *,
        wrap: bool = False,
    ) -> SqlFragment:
        """Glue non-empty fragments with ``separator``, optionally parenthesizing each."""
        parts = [part for part in (cls.build(f) for f in fragments) if part]
        sql = separator.join(f"({part.sql})" if wrap else part.sql for part in parts)
        params = tuple(chain.from_iterable(part.params for part in parts))
        return cls(sql, params)

    def __bool__(self) -> bool:
        return bool(self.sql)

    def __str__(self) -> str:
        return self.sql

    def combine(self, other: FragmentLike, operator: str) -> SqlFragment:
        """Return ``(self) OPERATOR (other)``; an empty operand yields the other one."""
        operator = operator.upper()
        if operator not in LOGICAL_OPERATORS:
            raise ValueError(f"Unsupported logical operator {operator!r}")
        other = SqlFragment.build(other)
        if not other:
            return self
        if not self:
            return other
        return SqlFragment(
            f"({self.sql}) {operator} ({other.sql})",
            self.params + other.params,
        )

    def and_(self, other: FragmentLike) -> SqlFragment:
        return self.combine(other, AND)

    def or_(self, other: FragmentLike) -> SqlFragment:
        return self.combine(other, OR)

    def negate(self) -> SqlFragment:
        """Return ``NOT(self)``; negating the empty fragment is a no-op."""
        if not self:
            return self
        return SqlFragment(f"NOT({self.sql})", self.params)

    def extend(self, other: FragmentLike) -> SqlFragment:
        """Combine with ``other`` using this fragment's own logical operator."""
        combined = self.combine(other, self.logical_operator)
        if combined.logical_operator != self.logical_operator:
            combined = SqlFragment(combined.sql, combined.params, self.logical_operator)
        return combined

    def __and__(self, other: FragmentLike) -> SqlFragment:
        return self.and_(other)

    def __or__(self, other: FragmentLike) -> SqlFragment:
        return self.or_(other)

    def __invert__(self) -> SqlFragment:
        return self.negate()

    def __lshift__(self, other: FragmentLike) -> SqlFragment:
        return self.extend(other)
