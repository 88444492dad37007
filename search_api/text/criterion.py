"""Google-like full-text criteria.

    >>> t = TextCriterion('bonjour +les +amis -toto -"allons bon" define:"salut poulette"')
    >>> t.meta_keywords
    {'define': ['salut poulette']}
    >>> t.mandatory_keywords
    ['les', 'amis']
    >>> t.optional_keywords
    ['bonjour']
    >>> t.negative_keywords
    ['toto', 'allons bon']
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Union

from search_api.fragment import SqlFragment
from search_api.text.parser import tokenize

# What the exclude option accepts: literal strings (matched case-insensitively
# anywhere in the keyword), compiled patterns, or an iterable of both.
ExcludeLike = Union[str, re.Pattern, Iterable[Union[str, re.Pattern]], None]

_WHITESPACE = re.compile(r"\s+")


def compile_exclude(exclude: ExcludeLike) -> list[re.Pattern]:
    """Normalize an exclude option into a list of compiled patterns."""
    if exclude is None:
        return []
    if isinstance(exclude, (str, re.Pattern)):
        exclude = [exclude]

    patterns: list[re.Pattern] = []
    for item in exclude:
        if isinstance(item, re.Pattern):
            patterns.append(item)
        else:
            patterns.append(re.compile(re.escape(str(item)), re.IGNORECASE))
    return patterns


def _quote(keyword: str) -> str:
    return f'"{keyword}"' if " " in keyword else keyword


def _any_field(fields: Sequence[str], template: str, value: str) -> SqlFragment:
    """OR the template over every field, binding ``value`` once per field."""
    fragment = SqlFragment()
    for field in fields:
        fragment |= SqlFragment(template.format(field=field), (value,))
    return fragment


class TextCriterion:
    """Mandatory, negative, optional and meta keywords parsed from a search string.

    Args:
        search_string: The free-text query.
        exclude: Keywords matching any of these are dropped (see ``ExcludeLike``).
        parse_meta: Whether ``key:value`` pairs become meta keywords.
    """

    def __init__(
        self,
        search_string: str | None = "",
        exclude: ExcludeLike = None,
        parse_meta: bool = True,
    ) -> None:
        self.search_string = search_string or ""
        self.parse_meta = parse_meta
        self._exclude = compile_exclude(exclude)

        self.meta_keywords: dict[str, list[str]] = {}
        self.mandatory_keywords: list[str] = []
        self.negative_keywords: list[str] = []
        self.optional_keywords: list[str] = []

        if self.search_string.strip():
            self._parse(self.search_string)

    def _parse(self, search_string: str) -> None:
        current_meta: str | None = None

        for keyword in tokenize(_WHITESPACE.sub(" ", search_string)):
            if current_meta is not None:
                self.meta_keywords.setdefault(current_meta, []).append(keyword)
                current_meta = None
            elif keyword.startswith("-"):
                self._collect(self.negative_keywords, keyword[1:])
            elif keyword.startswith("+"):
                self._collect(self.mandatory_keywords, keyword[1:])
            elif keyword.endswith(":") and self.parse_meta:
                current_meta = keyword[:-1]
            else:
                self._collect(self.optional_keywords, keyword)

        # if everything is excluded, look for the whole search string
        if not (
            self.meta_keywords
            or self.mandatory_keywords
            or self.negative_keywords
            or self.optional_keywords
        ):
            self.optional_keywords.append(search_string)

    def _collect(self, bucket: list[str], keyword: str) -> None:
        if not self.is_excluded(keyword):
            bucket.append(keyword)

    def is_excluded(self, keyword: str) -> bool:
        """Whether the keyword matches one of the exclude patterns."""
        return any(pattern.search(keyword) for pattern in self._exclude)

    @property
    def positive_keywords(self) -> list[str]:
        return self.mandatory_keywords + self.optional_keywords

    def condition(self, fields: Sequence[str]) -> SqlFragment:
        """Compile keywords into a LIKE-based condition over ``fields``.

        Mandatory keywords must all appear in some field, negative keywords
        are excluded as a group, and at least one optional keyword must
        appear. Meta keywords are left to the caller.
        """
        mandatory = SqlFragment()
        for keyword in self.mandatory_keywords:
            mandatory &= _any_field(fields, "{field} LIKE ?", f"%{keyword}%")

        negative = SqlFragment()
        for keyword in self.negative_keywords:
            negative &= _any_field(
                fields, "{field} IS NOT NULL AND {field} LIKE ?", f"%{keyword}%"
            )

        optional = SqlFragment()
        for keyword in self.optional_keywords:
            optional |= _any_field(fields, "{field} LIKE ?", f"%{keyword}%")

        return mandatory & ~negative & optional

    def __str__(self) -> str:
        chunks = [f"+{_quote(keyword)}" for keyword in self.mandatory_keywords]
        chunks += [f"-{_quote(keyword)}" for keyword in self.negative_keywords]
        chunks += [_quote(keyword) for keyword in self.optional_keywords]
        chunks += [
            f"{key}:{_quote(value)}"
            for key, values in self.meta_keywords.items()
            for value in values
        ]
        return " ".join(chunks)

    def __repr__(self) -> str:
        return f"TextCriterion({str(self)!r})"
