"""The bridge contract between search classes and models.

A model takes part in searches by exposing a bridge. The bridge
    - predefines automatic search attributes when a search class binds the model;
    - rewrites search attribute declarations, turning model-specific options
      (operator, column...) into a ``store_as``/``default`` declaration with a block;
    - validates and merges the find options of search attributes.

Models provide their bridge through a callable ``search_api_bridge()``;
SQLAlchemy mapped classes get a RelationalBridge without further ado.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from search_api.bridge import merge
from search_api.exceptions import ModelCapabilityError

if TYPE_CHECKING:
    from search_api.search.attributes import SearchAttributeBuilder

log = logging.getLogger(__name__)

BRIDGE_METHOD = "search_api_bridge"


class Bridge:
    """Default bridge: no automatic attributes, no rewriting, plain merge."""

    def automatic_search_attribute_builders(
        self, options: Mapping[str, Any]
    ) -> list[SearchAttributeBuilder]:
        """Builders for the search attributes every search on the model has."""
        return []

    def rewrite_search_attribute_builder(self, builder: SearchAttributeBuilder) -> None:
        """Rewrite ``builder`` in place so that only store_as and default options remain."""

    def validate_find_options(self, options: Any) -> None:
        merge.validate_find_options(options)

    def merge_find_options(self, options_list: Iterable[Mapping[str, Any] | None]) -> Any:
        return merge.merge_find_options(options_list)


def bridge_for(model: Any) -> Bridge:
    """Return the bridge of ``model``.

    Raises:
        ModelCapabilityError: The model neither exposes ``search_api_bridge()``
            nor is a SQLAlchemy mapped class.
    """
    factory = getattr(model, BRIDGE_METHOD, None)
    if callable(factory):
        return factory()

    # SQLAlchemy is only needed for mapped classes
    from search_api.bridge.relational import RelationalBridge, is_mapped_class

    if is_mapped_class(model):
        log.debug("Using relational bridge for %r", model)
        return RelationalBridge(model)

    raise ModelCapabilityError(model)
