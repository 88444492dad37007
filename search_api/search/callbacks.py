"""Callbacks run before a search computes its find options."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from search_api.exceptions import InvalidCallbackError

if TYPE_CHECKING:
    from search_api.search.attributes import SearchSchema

log = logging.getLogger(__name__)

CALLBACK_METHOD = "before_find_options"


class Callbacks:
    """Mixin implementing the ``before_find_options`` callback chain.

    A callback is one of:
        - the name of a method of the search, called without arguments;
        - any other string, evaluated as a Python expression with ``self``
          bound to the search;
        - a callable, called with the search;
        - an object with a ``before_find_options(search)`` method.

    A callback returning ``False`` stops the chain. When the chain completes,
    the search's own ``before_find_options()`` method runs.
    """

    schema: ClassVar[SearchSchema]

    @classmethod
    def register_before_find_options(cls, *callbacks: Any) -> Any:
        """Append callbacks to the chain.

        Returns the first callback, so this also works as a decorator::

            @PersonSearch.register_before_find_options
            def normalize(search):
                ...
        """
        cls.schema.callbacks.extend(callbacks)
        return callbacks[0] if callbacks else None

    def before_find_options(self) -> Any:
        """Hook for subclasses, run after the registered callbacks."""
        return None

    def _run_before_find_options(self) -> Any:
        for callback in type(self).schema.callbacks:
            result = self._invoke_callback(callback)
            if result is False:
                log.debug("before_find_options chain halted by %r", callback)
                return False
        return self.before_find_options()

    def _invoke_callback(self, callback: Any) -> Any:
        if isinstance(callback, str):
            method = getattr(self, callback, None) if callback.isidentifier() else None
            if callable(method):
                return method()
            return eval(callback, {}, {"self": self})  # noqa: S307

        hook = getattr(callback, CALLBACK_METHOD, None)
        if callable(hook) and not isinstance(callback, type):
            return hook(self)

        if callable(callback):
            return callback(self)

        raise InvalidCallbackError(callback)
