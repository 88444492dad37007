"""The Search base class.

A Search subclass encapsulates search parameters for a given model::

    class PersonSearch(Search, model=Person):
        pass

Binding a SQLAlchemy model declares automatic search attributes (one per
column, plus ``min_``/``max_`` bounds on comparable columns), so these are
equivalent::

    PersonSearch(age=33).find_options()
    PersonSearch({"age": 33}).find_options()

Custom attributes contribute their own find options::

    @PersonSearch.search_attribute("max_age")
    def max_age(search):
        return {"conditions": ("birth_date > ?", years_ago(search.max_age))}

Attributes that were not supplied are IGNORED and take no part in the search.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from search_api.bridge.base import bridge_for
from search_api.exceptions import (
    InvalidAttributeNameError,
    InvalidOptionError,
    ModelAlreadySetError,
    ModelNotSetError,
    UndefinedFindOptionsError,
    UnknownAttributeError,
)
from search_api.search.attributes import (
    VALID_SEARCH_ATTRIBUTE_OPTIONS,
    Block,
    SearchAttribute,
    SearchAttributeBuilder,
    SearchSchema,
)
from search_api.search.callbacks import Callbacks
from search_api.search.ignored import IGNORED, is_ignored

log = logging.getLogger(__name__)

FIND_OPTIONS_PREFIX = "find_options_for_"


def _find_options_method(name: str, block: Block) -> Callable[[Search], Any]:
    """Build find_options_for_<name>: empty options when ignored, else the block."""

    def find_options_for(self: Search) -> Any:
        if self.ignored(name):
            return {}
        return block(self)

    find_options_for.__name__ = f"{FIND_OPTIONS_PREFIX}{name}"
    return find_options_for


class Search(Callbacks):
    """Base class for searches. See the module documentation."""

    schema: ClassVar[SearchSchema] = SearchSchema()

    def __init_subclass__(cls, model: Any = None, **options: Any) -> None:
        super().__init_subclass__()
        # Explicit copy: subclasses extend, never mutate, their parent's schema.
        cls.schema = cls.schema.copy()
        if model is not None:
            cls.set_model(model, **options)
        elif options:
            raise TypeError(f"Model options given without a model: {sorted(options)}")

    # ------------------------------------------------------------------
    # Class-level declarations
    # ------------------------------------------------------------------

    @classmethod
    def set_model(cls, model: Any, **options: Any) -> None:
        """Bind the model searched by this class. A model can be bound only once.

        The model's bridge may predefine automatic search attributes; options
        are handed to it (the relational bridge understands ``type_cast``).
        """
        if cls.schema.model is not None:
            raise ModelAlreadySetError(cls, cls.schema.model)

        bridge = bridge_for(model)
        unbound = cls.schema.copy()
        cls.schema.model = model
        cls.schema.bridge = bridge
        log.debug("%s searches %r through %s", cls.__name__, model, type(bridge).__name__)

        try:
            for builder in bridge.automatic_search_attribute_builders(options):
                cls.search_accessor(builder)
        except Exception:
            cls._restore_schema(unbound)
            raise

    @classmethod
    def _restore_schema(cls, schema: SearchSchema) -> None:
        """Forget everything declared since ``schema`` was copied."""
        for name in set(cls.schema.attribute_names) - set(schema.attribute_names):
            for attr in (name, f"{FIND_OPTIONS_PREFIX}{name}"):
                if attr in cls.__dict__:
                    delattr(cls, attr)
        cls.schema = schema

    @classmethod
    def search_accessor(
        cls,
        *names: str | SearchAttributeBuilder,
        block: Block | None = None,
        **options: Any,
    ) -> None:
        """Declare search attributes.

        Either pass names, options and an optional block shared by all of
        them, or a single SearchAttributeBuilder::

            PersonSearch.search_accessor("a", "b")
            PersonSearch.search_accessor("min_age", operator="gte", column="age")
            PersonSearch.search_accessor("adult", block=lambda s: {"conditions": "age >= 18"})

        Each declaration defines a readable/writable attribute on instances
        and, when a block is given, the ``find_options_for_<name>`` method.
        """
        if len(names) == 1 and isinstance(names[0], SearchAttributeBuilder):
            if block is not None or options:
                raise TypeError("A SearchAttributeBuilder can't be combined with options")
            builders = [names[0]]
        else:
            for name in names:
                if not isinstance(name, str):
                    raise TypeError(f"Search attribute names must be strings, got {name!r}")
            builders = [SearchAttributeBuilder(name, options, block) for name in names]

        for builder in builders:
            cls._rewrite_search_attribute_builder(builder)
            cls.add_search_attribute(builder)

    @classmethod
    def search_attribute(cls, name: str, **options: Any) -> Callable[[Block], Block]:
        """Decorator form of search_accessor for a single attribute with a block."""

        def decorator(block: Block) -> Block:
            cls.search_accessor(name, block=block, **options)
            return block

        return decorator

    @classmethod
    def search_attributes(cls) -> list[str]:
        """All declared search attribute names, in declaration order."""
        return list(cls.schema.attribute_names)

    @classmethod
    def add_search_attribute(cls, builder: SearchAttributeBuilder) -> None:
        """Register a strict builder: only ``store_as`` and ``default`` options.

        Bridge designers call this after rewriting; everybody else should use
        search_accessor.
        """
        name = builder.name
        options = builder.options or {}

        invalid = set(options) - VALID_SEARCH_ATTRIBUTE_OPTIONS
        if invalid:
            raise InvalidOptionError(invalid)

        if not name.isidentifier() or name.startswith("_") or name in _RESERVED_NAMES:
            raise InvalidAttributeNameError(name)

        cls.schema.register(name, options.get("default", IGNORED))
        setattr(cls, name, SearchAttribute(name, options.get("store_as")))

        if builder.block is not None:
            setattr(cls, f"{FIND_OPTIONS_PREFIX}{name}", _find_options_method(name, builder.block))

        log.debug("%s: search attribute %s declared", cls.__name__, name)

    @classmethod
    def _rewrite_search_attribute_builder(cls, builder: SearchAttributeBuilder) -> None:
        if cls.schema.bridge is not None:
            cls.schema.bridge.rewrite_search_attribute_builder(builder)

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def __init__(self, attributes: Mapping[str, Any] | None = None, /, **values: Any) -> None:
        schema = type(self).schema
        if schema.model is None:
            raise ModelNotSetError(type(self))

        supplied = {str(name): value for name, value in dict(attributes or {}).items()}
        supplied.update(values)
        self._check_attributes(supplied)

        self._values: dict[str, Any] = {}
        for name in schema.unique_names():
            setattr(self, name, supplied[name] if name in supplied else schema.defaults[name])

    def _check_attributes(self, names: Mapping[str, Any] | list[str]) -> None:
        unknown = [name for name in names if name not in type(self).schema]
        if unknown:
            raise UnknownAttributeError(type(self), unknown)

    @property
    def attributes(self) -> dict[str, Any]:
        """Current value of every search attribute."""
        return {name: getattr(self, name) for name in type(self).schema.unique_names()}

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Assign several search attributes at once."""
        attributes = {str(name): value for name, value in attributes.items()}
        self._check_attributes(attributes)
        for name, value in attributes.items():
            setattr(self, name, value)

    def ignored(self, name: str) -> bool:
        """Whether the search attribute takes no part in the search."""
        self._check_attributes([name])
        return is_ignored(self._values[name])

    def ignore(self, name: str) -> None:
        """Make the search attribute take no part in the search."""
        self._check_attributes([name])
        self._values[name] = IGNORED

    def truthy(self, name: str) -> bool:
        """Truth value of the search attribute. IGNORED is truthy."""
        self._check_attributes([name])
        return bool(self._values[name])

    def find_options_for(self, name: str) -> Any:
        """Find options contributed by one search attribute."""
        self._check_attributes([name])
        method = getattr(self, f"{FIND_OPTIONS_PREFIX}{name}", None)
        if method is None:
            raise UndefinedFindOptionsError(name)
        return method()

    def find_options_list(self) -> list[Any]:
        """Run the callbacks, then return the validated, unmerged find options
        of every search attribute that is not ignored, in declaration order.

        Merge them together with other option-maps in a single
        ``merge_find_options`` call: merged maps don't merge again.
        """
        self._run_before_find_options()

        schema = type(self).schema
        options_list = []
        for name in schema.unique_names():
            if self.ignored(name):
                continue
            options = self.find_options_for(name)
            schema.bridge.validate_find_options(options)
            options_list.append(options)
        return options_list

    def find_options(self) -> Any:
        """Merge the find options of all search attributes that are not ignored.

        For relational models the result is an option-map suitable for
        ``search_api.persistence.find_all``.
        """
        options_list = self.find_options_list()
        merged = type(self).schema.bridge.merge_find_options(options_list)
        log.debug("%s: merged find options of %d attributes", type(self).__name__, len(options_list))
        return merged

    def __repr__(self) -> str:
        values = {name: value for name, value in self.attributes.items() if not is_ignored(value)}
        return f"{type(self).__name__}({values!r})"


# Names search attributes can't take without hiding the Search API.
_RESERVED_NAMES: frozenset[str] = frozenset(dir(Search))
