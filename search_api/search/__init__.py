"""Search classes: attribute declaration, callbacks and composition."""

from search_api.search.attributes import SearchAttributeBuilder
from search_api.search.base import Search
from search_api.search.ignored import IGNORED, IgnoredValue, is_ignored

__all__ = [
    "IGNORED",
    "IgnoredValue",
    "Search",
    "SearchAttributeBuilder",
    "is_ignored",
]
