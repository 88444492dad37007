"""Search attribute descriptors and the per-class attribute schema."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from search_api.search.ignored import is_ignored

if TYPE_CHECKING:
    from search_api.bridge.base import Bridge
    from search_api.search.base import Search

# Options add_search_attribute understands. Bridges translate anything else
# (operator, column...) into these before registration.
VALID_SEARCH_ATTRIBUTE_OPTIONS: frozenset[str] = frozenset({"store_as", "default"})

# find_options_for_<name> implementation: Search -> option-map (or None)
Block = Callable[["Search"], Any]


class SearchAttributeBuilder:
    """Describes a search attribute: a name, some options and an optional block.

    The name is read-only so that bridges rewriting a builder can't rename
    the attribute. Options are copied: bridges consume them in place.
    """

    def __init__(
        self,
        name: str,
        options: Mapping[str, Any] | None = None,
        block: Block | None = None,
    ) -> None:
        self._name = str(name)
        self.options: dict[str, Any] = dict(options or {})
        self.block = block

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"SearchAttributeBuilder({self._name!r}, {self.options!r}, block={self.block!r})"


class SearchAttribute:
    """Data descriptor holding one search attribute value on Search instances.

    Values other than IGNORED go through ``store_as`` when assigned.
    """

    def __init__(self, name: str, store_as: Callable[[Any], Any] | None = None) -> None:
        self.name = name
        self.store_as = store_as

    def __get__(self, search: Search | None, owner: type | None = None) -> Any:
        if search is None:
            return self
        try:
            return search._values[self.name]
        except KeyError:
            raise AttributeError(self.name) from None

    def __set__(self, search: Search, value: Any) -> None:
        if self.store_as is not None and not is_ignored(value):
            value = self.store_as(value)
        search._values[self.name] = value

    def __repr__(self) -> str:
        return f"<SearchAttribute {self.name}>"


@dataclass
class SearchSchema:
    """Everything a search class declares: model, bridge, attributes, callbacks.

    Subclasses receive a copy, so declarations on a subclass never leak into
    its parent.
    """

    model: Any = None
    bridge: Bridge | None = None
    attribute_names: list[str] = field(default_factory=list)
    defaults: dict[str, Any] = field(default_factory=dict)
    callbacks: list[Any] = field(default_factory=list)

    def copy(self) -> SearchSchema:
        return SearchSchema(
            model=self.model,
            bridge=self.bridge,
            attribute_names=list(self.attribute_names),
            defaults=dict(self.defaults),
            callbacks=list(self.callbacks),
        )

    def register(self, name: str, default: Any) -> None:
        # Duplicates are kept in declaration order; the last default wins.
        self.attribute_names.append(name)
        self.defaults[name] = default

    def unique_names(self) -> list[str]:
        """Attribute names in order of first declaration."""
        return list(dict.fromkeys(self.attribute_names))

    def __contains__(self, name: object) -> bool:
        return name in self.defaults
