"""
YAML configuration loader for the InsurAI engine.

Values may reference environment variables as ${VAR} or ${VAR:-default}.
Environment variables prefixed with INSURAI_ still override file values
through EngineConfig's settings sources.
"""

import os
import re
from pathlib import Path
from typing import Any

import structlog
import yaml

from insurai_engine.config.models import EngineConfig


logger = structlog.get_logger()

CONFIG_PATH_ENV = "INSURAI_CONFIG"

DEFAULT_CONFIG_PATHS = (
    Path("config/insurai.yaml"),
    Path("insurai.yaml"),
    Path("~/.insurai/insurai.yaml"),
)

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")


def _substitute_env_vars(value: Any) -> Any:
    """Expand ${VAR} and ${VAR:-default} references in nested config values."""
    if isinstance(value, dict):
        return {key: _substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value
    return _ENV_REFERENCE.sub(
        lambda m: os.environ.get(m.group("name"), m.group("default") or ""),
        value,
    )


def load_yaml(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and substitute environment variables.

    Args:
        path: Path to the YAML file

    Returns:
        Dictionary with configuration values ({} for an empty file)

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        ValueError: If the document is not a mapping
        yaml.YAMLError: If the YAML is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")

    return _substitute_env_vars(raw_config)


def _find_default_config() -> Path | None:
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    for candidate in DEFAULT_CONFIG_PATHS:
        path = candidate.expanduser()
        if path.exists():
            return path
    return None


def load_config(
    config_path: str | Path | None = None,
    override_values: dict[str, Any] | None = None,
) -> EngineConfig:
    """
    Load engine configuration.

    The engine has workable defaults, so finding no config file is not an
    error; an explicit path (argument or INSURAI_CONFIG) that does not exist
    is.

    Args:
        config_path: Path to configuration YAML file. If None, uses
                    $INSURAI_CONFIG, then the first of config/insurai.yaml,
                    insurai.yaml and ~/.insurai/insurai.yaml that exists.
        override_values: Nested values applied on top of the file

    Returns:
        Validated EngineConfig object

    Raises:
        FileNotFoundError: If an explicit configuration file is not found
        pydantic.ValidationError: If configuration is invalid
    """
    path = Path(config_path) if config_path is not None else _find_default_config()

    config_dict: dict[str, Any] = load_yaml(path) if path is not None else {}
    if override_values:
        config_dict = _deep_merge(config_dict, override_values)

    logger.debug("config_loaded", path=str(path) if path else None)
    return EngineConfig(**config_dict)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge `override` into a copy of `base`, recursing into nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged
