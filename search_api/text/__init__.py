"""Free-text search strings: tokenizing and compiling to SQL conditions."""

from search_api.text.criterion import TextCriterion, compile_exclude
from search_api.text.parser import tokenize

__all__ = [
    "TextCriterion",
    "compile_exclude",
    "tokenize",
]
