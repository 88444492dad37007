"""Tokenize free-text search strings with a Lark grammar."""

from __future__ import annotations

from importlib import resources
from typing import Any

from lark import Lark, Token, Transformer, UnexpectedInput

from search_api.exceptions import TextCriterionParseError


def _load_grammar() -> str:
    """Load the Lark grammar from the package resources."""
    return resources.files("search_api.text").joinpath("grammar.lark").read_text()


_GRAMMAR_TEXT = _load_grammar()

_parser = Lark(
    _GRAMMAR_TEXT,
    parser="lalr",
)


class _KeywordTransformer(Transformer):
    """Transform the Lark parse tree into a flat list of keywords."""

    def start(self, items: list[Any]) -> list[str]:
        return [item for item in items if isinstance(item, str)]

    def word(self, items: list[Any]) -> str:
        return str(items[0])

    def phrase(self, items: list[Any]) -> str:
        return str(items[0])

    def WORD(self, token: Token) -> str:
        return str(token).replace('"', "")

    def PHRASE(self, token: Token) -> str:
        # Quotes are dropped, the +/- prefix stays
        return str(token).replace('"', "")


_transformer = _KeywordTransformer()


def tokenize(search_string: str) -> list[str]:
    """Split a search string into raw keywords.

    Prefixes (``+``, ``-``) and trailing meta colons are kept; double quotes
    are stripped.

    Args:
        search_string: The free-text search string.

    Returns:
        Keywords in order of appearance.

    Raises:
        TextCriterionParseError: If the string cannot be tokenized.
    """
    if not search_string:
        return []

    try:
        tree = _parser.parse(search_string)
        return _transformer.transform(tree)
    except UnexpectedInput as e:
        raise TextCriterionParseError(search_string, str(e)) from e
