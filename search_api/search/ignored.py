"""The value of search attributes that take no part in a search."""

from __future__ import annotations

import enum
from typing import Any, Literal, TypeVar, Union

T = TypeVar("T")


class IgnoredValue(enum.Enum):
    """Single-member enum: an attribute is either a real value or ``IGNORED``.

    ``None`` and ``False`` are legitimate search values, so absence needs its
    own marker. Enum members compare by identity only.
    """

    IGNORED = "ignored"

    def __repr__(self) -> str:
        return "<ignored>"


IGNORED = IgnoredValue.IGNORED

# A search attribute value: present, or IGNORED.
MaybeIgnored = Union[T, Literal[IgnoredValue.IGNORED]]


def is_ignored(value: Any) -> bool:
    """Whether ``value`` is the ignored marker."""
    return value is IGNORED
