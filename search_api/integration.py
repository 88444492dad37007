"""Search keys in the conditions of ordinary queries.

Mapped classes that mix in Searchable get an implicit search class. Their
``conditions`` mappings may then use any search key, not only columns::

    class Person(Searchable, Base):
        __tablename__ = "people"
        ...

    Person.search("keyword", operator="full_text", columns=["name", "city"])

    find(session, Person, {"keyword": "bob", "min_age": 18}, order="people.name")
"""

from __future__ import annotations

import logging
import types
import weakref
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from sqlalchemy.orm import Session

from search_api import persistence
from search_api.bridge.relational import RelationalBridge
from search_api.config import Config
from search_api.search.attributes import Block
from search_api.search.base import Search

log = logging.getLogger(__name__)

_search_classes: weakref.WeakKeyDictionary[type, type[Search]] = weakref.WeakKeyDictionary()


def search_class_for(model: type) -> type[Search]:
    """Return the implicit search class of ``model``, creating it on first use."""
    search_class = _search_classes.get(model)
    if search_class is None:

        def body(namespace: dict[str, Any]) -> None:
            namespace["__module__"] = model.__module__

        search_class = types.new_class(
            f"{model.__name__}Search", (Search,), {"model": model}, body
        )
        _search_classes[model] = search_class
        log.debug("Created implicit search class for %s", model.__name__)
    return search_class


class Searchable:
    """Mixin giving a mapped class an implicit search class.

    Set ``search_api_config`` on the class to tune its relational bridge.
    """

    search_api_config: ClassVar[Config | None] = None

    @classmethod
    def search_api_bridge(cls) -> RelationalBridge:
        return RelationalBridge(cls, cls.search_api_config)

    @classmethod
    def search_class(cls) -> type[Search]:
        return search_class_for(cls)

    @classmethod
    def search(cls, *names: str, block: Block | None = None, **options: Any) -> None:
        """Declare search keys; see ``Search.search_accessor``."""
        cls.search_class().search_accessor(*names, block=block, **options)

    @classmethod
    def search_key(cls, name: str, **options: Any) -> Callable[[Block], Block]:
        """Decorator declaring a search key computed by the decorated function."""
        return cls.search_class().search_attribute(name, **options)


def scoped_find_options(model: type, conditions: Any = None, **options: Any) -> dict[str, Any]:
    """Merge ``options`` with the find options of a conditions mapping.

    ``None`` or a mapping is read as search attribute values; anything else
    (a SQL string, a ``(template, *params)`` sequence, a fragment) is an
    ordinary condition.
    """
    search_class = search_class_for(model)
    bridge = search_class.schema.bridge

    if conditions is None or isinstance(conditions, Mapping):
        scope = search_class(dict(conditions or {})).find_options_list()
        bridge.validate_find_options(options)
        return bridge.merge_find_options([*scope, options])

    own = {"conditions": conditions, **options}
    bridge.validate_find_options(own)
    return bridge.merge_find_options([own])


def find(session: Session, model: type, conditions: Any = None, **options: Any) -> list[Any]:
    """Load instances of ``model``; ``conditions`` may hold search keys."""
    return persistence.find_all(session, model, scoped_find_options(model, conditions, **options))


def count(session: Session, model: type, conditions: Any = None, **options: Any) -> int:
    """Count instances of ``model``; ``conditions`` may hold search keys."""
    return persistence.count(session, model, scoped_find_options(model, conditions, **options))
