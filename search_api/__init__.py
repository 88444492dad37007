"""search-api: compose search conditions from named search attributes."""

__version__ = "0.3.0"

from search_api.bridge import Bridge, bridge_for
from search_api.exceptions import SearchApiError
from search_api.fragment import SqlFragment
from search_api.search import IGNORED, Search, SearchAttributeBuilder, is_ignored
from search_api.text import TextCriterion

__all__ = [
    "IGNORED",
    "Bridge",
    "Search",
    "SearchApiError",
    "SearchAttributeBuilder",
    "SqlFragment",
    "TextCriterion",
    "__version__",
    "bridge_for",
    "is_ignored",
]
