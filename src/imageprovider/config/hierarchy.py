"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.imageprovider/config.yaml)
  3. Project config   (./imageprovider.yaml)
  4. Environment variables (MAX_CACHE_*, STORAGE_PATH, S3_*, IMAGEPROVIDER_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from imageprovider.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".imageprovider" / "config.yaml"
_PROJECT_CONFIG_NAME = "imageprovider.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "MAX_CACHE_FILES": "max_cache_files",
    "MAX_CACHE_SIZE_MB": "max_cache_size_mb",
    "STORAGE_PATH": "storage_path",
    "S3_ENDPOINT": "s3_endpoint",
    "S3_ACCESS_KEY": "s3_access_key",
    "S3_SECRET_KEY": "s3_secret_key",
    "S3_BUCKET": "s3_bucket",
    "S3_REGION": "s3_region",
    "S3_USE_SSL": "s3_use_ssl",
    "IMAGEPROVIDER_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "max_cache_files": int,
    "max_cache_size_mb": float,
}

# Numeric limits that only make sense when positive
_POSITIVE_KEYS = {"max_cache_files", "max_cache_size_mb"}

_BOOL_KEYS = {"s3_use_ssl"}

# Boolean env var values
_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a flat dict keyed like ``get_defaults()``. Unknown keys are
    dropped with a warning; ``None`` never overrides a lower layer.
    """
    config = get_defaults()
    layers = [
        ("global config", _load_yaml_config(_GLOBAL_CONFIG_PATH)),
        ("project config", _load_yaml_config(_find_project_config())),
        ("environment", _load_env_vars()),
        ("arguments", runtime_overrides),
    ]
    for source, values in layers:
        for key, value in (values or {}).items():
            if key not in config:
                logger.warning("Ignoring unknown config key '%s' from %s", key, source)
            elif value is not None:
                config[key] = value
    return config


def _load_yaml_config(path: Path | None) -> dict[str, Any] | None:
    """Load a YAML config file, flattening a nested ``s3:`` section.

    ``s3: {bucket: archive}`` becomes ``s3_bucket: archive`` so files can use
    either spelling.
    """
    if path is None or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None

    section = data.pop("s3", None)
    if isinstance(section, dict):
        for key, value in section.items():
            data.setdefault(f"s3_{key}", value)
    elif section is not None:
        logger.warning("Config file %s: 's3' must be a mapping, ignoring it", path)
    return data


def _find_project_config() -> Path | None:
    """Nearest imageprovider.yaml in cwd or one of its parents."""
    cwd = Path.cwd()
    for parent in (cwd, *cwd.parents):
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read the environment variables listed in _ENV_MAP.

    Values that cannot be coerced are skipped so the lower layers win.
    """
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None or value == "":
            continue
        coerced = _coerce_env_value(config_key, value)
        if coerced is None:
            continue
        result[config_key] = coerced
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type.

    Returns None for values that are invalid for ``key``.
    """
    if key in _BOOL_KEYS:
        return value.strip().lower() in _TRUTHY

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            coerced = target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return None
        if key in _POSITIVE_KEYS and coerced <= 0:
            logger.warning("Ignoring non-positive value for '%s': %s", key, value)
            return None
        return coerced

    return value
