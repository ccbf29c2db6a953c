"""Configuration models and loader for org-outline.

Settings are read from ~/.config/org-outline/config.yaml (optional) and can be
overridden with ORG_OUTLINE_* environment variables:

- ORG_OUTLINE_TAG_COLUMN: Override tag_column
- ORG_OUTLINE_PROPERTY_KEY_WIDTH: Override property_key_width
- ORG_OUTLINE_PLANNING_ORDER: Override planning_order (comma separated)
- ORG_OUTLINE_ADAPT_INDENTATION: Override adapt_indentation ("true"/"false")
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from org_outline.exceptions import ConfigError
PLANNING_KEYWORDS = ("SCHEDULED", "DEADLINE", "CLOSED")


class TodoKeywordsConfig(BaseModel):
    """Built-in TODO keyword set used when a file declares none."""

    active: list[str] = Field(
        default_factory=lambda: ["TODO"],
        description="Keywords for open tasks"
    )

    done: list[str] = Field(
        default_factory=lambda: ["DONE"],
        description="Keywords for finished tasks"
    )

    @field_validator("active", "done")
    @classmethod
    def validate_keywords(cls, v: list[str]) -> list[str]:
        """Keywords must be single non-empty words."""
        for keyword in v:
            if not keyword or any(ch.isspace() for ch in keyword):
                raise ValueError(f"Invalid TODO keyword: {keyword!r}")
        return v

    model_config = {"frozen": True}


class OutlineConfig(BaseModel):
    """Root configuration for parsing and exporting org documents."""

    default_todo_keywords: TodoKeywordsConfig = Field(
        default_factory=TodoKeywordsConfig,
        description="Keyword set used when the file has no #+TODO: lines"
    )

    tag_column: int = Field(
        default=77,
        ge=0,
        description="Column tags are right-aligned to on headings built in code (org-tags-column)"
    )

    property_key_width: int = Field(
        default=10,
        ge=0,
        description="Field width of ':KEY:' on properties built in code (org-property-format)"
    )

    planning_order: list[str] = Field(
        default_factory=lambda: list(PLANNING_KEYWORDS),
        description="Order planning items are written in on export"
    )

    adapt_indentation: bool = Field(
        default=True,
        description="Indent planning lines and drawers built in code by level + 1 spaces"
    )

    @field_validator("planning_order")
    @classmethod
    def validate_planning_order(cls, v: list[str]) -> list[str]:
        """Planning order must name each planning keyword exactly once."""
        normalized = [keyword.upper() for keyword in v]
        if sorted(normalized) != sorted(PLANNING_KEYWORDS):
            raise ValueError(
                f"planning_order must be a permutation of {', '.join(PLANNING_KEYWORDS)}, "
                f"got: {', '.join(v)}"
            )
        return normalized

    model_config = {"frozen": True}


DEFAULT_CONFIG = OutlineConfig()


def default_config_path() -> Path:
    """Return ~/.config/org-outline/config.yaml."""
    return Path.home() / ".config" / "org-outline" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> OutlineConfig:
    """Load configuration from YAML file with environment variable overrides.

    A missing file is not an error; defaults (plus any environment overrides)
    are used instead.

    Args:
        config_path: Path to config file. If None, uses ~/.config/org-outline/config.yaml

    Returns:
        Validated OutlineConfig

    Raises:
        ConfigError: If the file is not valid YAML or fails validation
    """
    if config_path is None:
        config_path = default_config_path()

    data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(str(config_path), f"Invalid YAML ({e})") from e

        if not isinstance(data, dict):
            raise ConfigError(str(config_path), "Top level of config must be a mapping")

    data = _apply_env_overrides(data)

    try:
        config = OutlineConfig(**data)
    except ValidationError as e:
        raise ConfigError(str(config_path), f"Configuration validation failed:\n{e}") from e

    return config


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ORG_OUTLINE_* environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    data = dict(data)

    # Numbers stay strings; OutlineConfig converts or rejects them
    if env_tag_column := os.getenv("ORG_OUTLINE_TAG_COLUMN"):
        data["tag_column"] = env_tag_column

    if env_key_width := os.getenv("ORG_OUTLINE_PROPERTY_KEY_WIDTH"):
        data["property_key_width"] = env_key_width

    if env_order := os.getenv("ORG_OUTLINE_PLANNING_ORDER"):
        data["planning_order"] = [part.strip() for part in env_order.split(",") if part.strip()]

    if env_adapt := os.getenv("ORG_OUTLINE_ADAPT_INDENTATION"):
        data["adapt_indentation"] = env_adapt.strip().lower() in ("1", "true", "yes", "on")

    return data
