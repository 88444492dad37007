"""Bridges between search classes and the models they search."""

from search_api.bridge.base import Bridge, bridge_for
from search_api.bridge.merge import VALID_FIND_OPTIONS, merge_find_options, validate_find_options

__all__ = [
    "VALID_FIND_OPTIONS",
    "Bridge",
    "bridge_for",
    "merge_find_options",
    "validate_find_options",
]
