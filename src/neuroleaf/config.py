"""Configuration management for neuroleaf.

Settings come from three layers, highest priority first:

1. ``NEUROLEAF_*`` environment variables
2. a YAML file (``--config`` or ``NEUROLEAF_CONFIG``), whose nested
   sections are flattened with ``_``, so ``chunk: {overlap: 100}``
   sets ``chunk_overlap``
3. the AppConfig defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

CONFIG_PATH_ENV = "NEUROLEAF_CONFIG"

# env var -> (config field, converter)
_ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "NEUROLEAF_MODEL": ("model", str),
    "NEUROLEAF_MAX_TOKENS": ("max_tokens", int),
    "NEUROLEAF_BUDGET_LIMIT": ("cost_budget_limit", float),
}


class AppConfig(BaseModel, frozen=True):
    """Application configuration. Immutable."""

    # LLM API
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=4096, gt=0)

    # Retry
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0.0)
    retry_max_delay: float = Field(default=10.0, ge=0.0)

    # Chunking (characters)
    chunk_target_size: int = Field(default=8000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    chunk_min_size: int = Field(default=1500, ge=0)
    long_document_threshold: int = Field(default=8000, gt=0)
    chunk_delay: float = Field(default=0.5, ge=0.0)

    # Cards
    max_document_cards: int = Field(default=50, gt=0)

    # Cost
    cost_budget_limit: float = Field(default=1.00, ge=0.0)

    # Output (default for generate --format)
    output_format: Literal["tsv", "csv", "json", "all"] = "tsv"

    @model_validator(mode="after")
    def _check_chunk_sizes(self) -> AppConfig:
        if self.chunk_overlap >= self.chunk_target_size:
            raise ValueError("chunk_overlap must be smaller than chunk_target_size")
        if self.chunk_min_size > self.chunk_target_size:
            raise ValueError("chunk_min_size must not exceed chunk_target_size")
        return self


def _flatten_yaml(data: dict[str, Any], *, _prefix: str = "") -> dict[str, Any]:
    """Join nested section keys with '_' so they match AppConfig fields."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{_prefix}_{key}" if _prefix else str(key)
        if isinstance(value, dict):
            flat.update(_flatten_yaml(value, _prefix=name))
        else:
            flat[name] = value
    return flat


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    flat = _flatten_yaml(parsed)
    unknown = sorted(set(flat) - set(AppConfig.model_fields))
    for key in unknown:
        logger.warning("Ignoring unknown config key %r in %s", key, path)
        del flat[key]
    return flat


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_var, (field_name, converter) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            overrides[field_name] = converter(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {raw!r}") from e
        logger.debug("Config %s overridden by %s", field_name, env_var)
    return overrides


def load_config(config_path: str | None = None) -> AppConfig:
    """Load configuration from YAML file with env var overrides.

    Args:
        config_path: Path to YAML config file. When None, the
            NEUROLEAF_CONFIG environment variable is consulted; if that
            is unset too, only defaults and env overrides apply.

    Returns:
        Frozen AppConfig instance.

    Raises:
        FileNotFoundError: If a config path is given but doesn't exist.
        ValueError: If the YAML or an environment value is invalid.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_PATH_ENV)

    settings: dict[str, Any] = {}
    if config_path is not None:
        settings = _read_yaml(Path(config_path))
        logger.debug("Loaded %d config values from %s", len(settings), config_path)

    settings.update(_env_overrides())
    return AppConfig(**settings)
