"""Exception hierarchy for search-api."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class SearchApiError(Exception):
    """Base exception for all search-api errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all search-api errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(SearchApiError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Declaration Errors
class InvalidOptionError(SearchApiError):
    """A search attribute was declared with unsupported options."""

    def __init__(self, options: Iterable[str], message: str | None = None) -> None:
        self.options = sorted(options)
        super().__init__(message or f"Invalid options {self.options!r}")


class UnknownColumnError(InvalidOptionError):
    """An operator references a column the model does not map."""

    def __init__(self, model: object, column: str) -> None:
        self.model = model
        self.column = column
        super().__init__(["column"], f"{getattr(model, '__name__', model)} has no column '{column}'")


class InvalidAttributeNameError(SearchApiError):
    """A search attribute name would shadow the search API."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"'{name}' can't be used as a search attribute name")


# Model Errors
class ModelAlreadySetError(SearchApiError):
    """The model of a search class can only be set once."""

    def __init__(self, search_class: type, model: object) -> None:
        self.search_class = search_class
        self.model = model
        super().__init__(f"Model of {search_class.__name__} is already set to {model!r}")


class ModelNotSetError(SearchApiError):
    """A search class without a model can't be instantiated."""

    def __init__(self, search_class: type) -> None:
        self.search_class = search_class
        super().__init__(f"Can't create a {search_class.__name__} instance without model")


class ModelCapabilityError(SearchApiError):
    """The model doesn't provide a search bridge."""

    def __init__(self, model: object) -> None:
        self.model = model
        super().__init__(f"{model!r} doesn't provide a search_api_bridge")


# Attribute Errors
class UnknownAttributeError(SearchApiError):
    """Search instance built with attributes that were never declared."""

    def __init__(self, search_class: type, names: Iterable[str]) -> None:
        self.search_class = search_class
        self.names = list(names)
        super().__init__(
            f"Unknown search attributes for {search_class.__name__}: {', '.join(self.names)}"
        )


class UndefinedFindOptionsError(SearchApiError):
    """A search attribute has neither a block nor a find_options_for_ method."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No find options defined for search attribute '{name}'")


# Operator Errors
class OperatorError(SearchApiError):
    """A bridge operator was declared incorrectly."""

    pass


class UnknownOperatorError(OperatorError):
    """The operator option names no known operator."""

    def __init__(self, operator: object) -> None:
        self.operator = operator
        super().__init__(f"Unknown operator {operator}")


class MissingOptionError(OperatorError):
    """An operator is missing a required option."""

    def __init__(self, operator: object, detail: str) -> None:
        self.operator = operator
        self.detail = detail
        super().__init__(f"{operator} operator requires {detail}")


# Composition Errors
class InvalidFindOptionError(SearchApiError):
    """An option-map holds keys the bridge doesn't understand."""

    def __init__(self, keys: Iterable[str], message: str | None = None) -> None:
        self.keys = sorted(str(key) for key in keys)
        super().__init__(message or f"Unknown find option keys: {', '.join(self.keys)}")


class InvalidCallbackError(SearchApiError):
    """A before_find_options callback has an unsupported kind."""

    def __init__(self, callback: object) -> None:
        self.callback = callback
        super().__init__(
            "Callbacks must be a method name, a string to be evaluated, a callable, "
            f"or an object responding to before_find_options; got {callback!r}"
        )


class InvalidFragmentError(SearchApiError):
    """A SQL fragment can't be bound: placeholders don't match parameters."""

    def __init__(self, sql: str, placeholders: int, params: int) -> None:
        self.sql = sql
        self.placeholders = placeholders
        self.params = params
        super().__init__(
            f"Fragment '{sql}' has {placeholders} placeholders but {params} parameters"
        )


# Text Errors
class TextCriterionParseError(SearchApiError):
    """Raised when a free-text search string cannot be tokenized."""

    def __init__(self, query: str, message: str) -> None:
        self.query = query
        super().__init__(f"Failed to parse search query '{query}': {message}")
