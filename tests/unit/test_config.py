"""Unit tests for configuration."""

import re
from pathlib import Path

import pytest

from search_api.config import DEFAULT_EXCLUDE_PATTERN, Config, load_config, save_config
from search_api.exceptions import ConfigParseError, ConfigValidationError


def test_default_config() -> None:
    """Test that default config has sensible values."""
    config = Config()
    assert config.colored_output is True
    assert config.parse_meta is True
    assert config.type_cast is False
    assert config.full_text_exclude == [DEFAULT_EXCLUDE_PATTERN]


def test_default_exclude_patterns() -> None:
    """Test that the default exclusion drops short non-numeric words."""
    (pattern,) = Config().exclude_patterns()
    assert pattern.search("the")
    assert pattern.search("a")
    assert not pattern.search("1st")
    assert not pattern.search("music")


def test_load_missing_config(temp_dir: Path) -> None:
    """Test loading when config file doesn't exist."""
    config_path = temp_dir / "nonexistent.toml"
    config, warnings = load_config(config_path)

    assert config == Config()
    assert len(warnings) > 0  # Should warn about missing file


def test_load_valid_config(sample_config: Path) -> None:
    """Test loading a valid config file."""
    config, warnings = load_config(sample_config)

    assert config.full_text_exclude == [DEFAULT_EXCLUDE_PATTERN, "^the$"]
    assert config.parse_meta is False
    assert config.type_cast is True
    assert config.colored_output is False
    assert config.config_path == sample_config.resolve()
    assert warnings == []


def test_load_single_exclude_string(temp_dir: Path) -> None:
    """Test that a single exclude pattern may be a plain string."""
    config_path = temp_dir / "single.toml"
    config_path.write_text('[text]\nexclude = "^x$"\n')

    config, _ = load_config(config_path)
    assert config.full_text_exclude == ["^x$"]


def test_empty_exclude_warns(temp_dir: Path) -> None:
    """Test that disabling exclusion is allowed but reported."""
    config_path = temp_dir / "empty.toml"
    config_path.write_text("[text]\nexclude = []\n")

    config, warnings = load_config(config_path)
    assert config.exclude_patterns() == []
    assert any("text.exclude" in warning for warning in warnings)


def test_load_invalid_toml(temp_dir: Path) -> None:
    """Test loading invalid TOML raises error."""
    config_path = temp_dir / "invalid.toml"
    config_path.write_text("this is not valid [ toml")

    with pytest.raises(ConfigParseError):
        load_config(config_path)


def test_config_validation_invalid_type(temp_dir: Path) -> None:
    """Test that invalid types raise validation error."""
    config_path = temp_dir / "bad_types.toml"
    config_path.write_text("""[display]
colored_output = "not a boolean"
""")

    with pytest.raises(ConfigValidationError):
        load_config(config_path)


@pytest.mark.parametrize(
    "content",
    [
        "[text]\nexclude = [1, 2]\n",
        '[text]\nparse_meta = "yes"\n',
        "[bridge]\ntype_cast = 1\n",
    ],
)
def test_config_validation_section_types(temp_dir: Path, content: str) -> None:
    """Test type validation of every section."""
    config_path = temp_dir / "bad.toml"
    config_path.write_text(content)

    with pytest.raises(ConfigValidationError):
        load_config(config_path)


def test_config_validation_invalid_regex(temp_dir: Path) -> None:
    """Test that exclusion patterns must compile."""
    config_path = temp_dir / "bad_regex.toml"
    config_path.write_text('[text]\nexclude = ["(unclosed"]\n')

    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(config_path)
    assert exc_info.value.key == "text.exclude"


def test_save_and_reload(temp_dir: Path) -> None:
    """Test that saved configs load back identically."""
    config = Config(full_text_exclude=["^a$"], parse_meta=False, type_cast=True)
    config_path = temp_dir / "nested" / "config.toml"
    save_config(config, config_path)

    loaded, _ = load_config(config_path)
    assert loaded.full_text_exclude == ["^a$"]
    assert loaded.parse_meta is False
    assert loaded.type_cast is True
    assert all(isinstance(p, re.Pattern) for p in loaded.exclude_patterns())
