"""Configuration management for search-api."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from search_api.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)

# Short non-numeric tokens (at most 3 characters) are noise words for full-text search.
DEFAULT_EXCLUDE_PATTERN = r"^[^0-9].{0,2}$"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "search-api" / "config.toml"


def _default_exclude() -> list[str]:
    return [DEFAULT_EXCLUDE_PATTERN]


@dataclass
class Config:
    """Application configuration.

    Attributes:
        full_text_exclude: Regular expressions matching keywords that the
            full_text operator ignores.
        parse_meta: Whether ``key:value`` pairs are split out of text queries.
        type_cast: Default for the relational bridge ``type_cast`` option.
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
    """

    full_text_exclude: list[str] = field(default_factory=_default_exclude)
    parse_meta: bool = True
    type_cast: bool = False
    colored_output: bool = True
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a pattern isn't a valid regular expression.
        """
        warnings: list[str] = []

        for pattern in self.full_text_exclude:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigValidationError("text.exclude", pattern, str(e)) from e

        if not self.full_text_exclude:
            warnings.append("text.exclude is empty: short noise words will be searched")

        return warnings

    def exclude_patterns(self) -> list[re.Pattern[str]]:
        """Return compiled full-text exclusion patterns."""
        return [re.compile(pattern) for pattern in self.full_text_exclude]


# Set by the CLI group after loading the config file
_current_config: Config | None = None


def set_current_config(config: Config | None) -> None:
    """Install the config used by bridges created without an explicit one.

    Search classes bind their model when declared, so install the config
    before importing them. ``None`` restores the defaults.
    """
    global _current_config
    _current_config = config


def current_config() -> Config:
    """Return the installed config, or the defaults."""
    return _current_config if _current_config is not None else Config()


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        # Use defaults
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: search-api init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    # Load from file
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [text] section
    text = data.get("text", {})
    if "exclude" in text:
        value = text["exclude"]
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigValidationError("text.exclude", value, "must be a list of strings")
        config.full_text_exclude = value

    if "parse_meta" in text:
        value = text["parse_meta"]
        if not isinstance(value, bool):
            raise ConfigValidationError("text.parse_meta", value, "must be a boolean")
        config.parse_meta = value

    # Parse [bridge] section
    bridge = data.get("bridge", {})
    if "type_cast" in bridge:
        value = bridge["type_cast"]
        if not isinstance(value, bool):
            raise ConfigValidationError("bridge.type_cast", value, "must be a boolean")
        config.type_cast = value

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "text": {
            "exclude": list(config.full_text_exclude),
            "parse_meta": config.parse_meta,
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    if config.type_cast:
        data["bridge"] = {"type_cast": True}

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
