"""
Configuration validation for the InsurAI engine.

Provides additional validation beyond Pydantic model validation.
"""

from urllib.parse import urlparse

import structlog

from insurai_engine.config.models import EngineConfig

logger = structlog.get_logger()


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def validate_config(config: EngineConfig) -> list[str]:
    """
    Validate engine configuration.

    Performs cross-field checks that Pydantic models do not.

    Args:
        config: EngineConfig to validate

    Returns:
        List of warning messages (non-fatal issues)

    Raises:
        ConfigurationError: If configuration has fatal issues
    """
    warnings: list[str] = []
    errors: list[str] = []

    parsed = urlparse(config.transport.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        errors.append(f"Transport base_url is not an http(s) URL: {config.transport.base_url}")
    elif parsed.scheme == "http" and parsed.hostname not in ("localhost", "127.0.0.1"):
        warnings.append(
            "Bearer credentials will be sent over plain http to "
            f"{parsed.hostname}. Use https outside local development."
        )

    endpoints = config.transport.endpoints.model_dump()
    for name, path in endpoints.items():
        if not path.startswith("/"):
            errors.append(f"Endpoint '{name}' must start with '/': {path}")

    if "{agent_id}" not in config.transport.endpoints.agent_queries:
        errors.append("Endpoint 'agent_queries' must contain an {agent_id} placeholder")
    if "{query_id}" not in config.transport.endpoints.respond_query:
        errors.append("Endpoint 'respond_query' must contain a {query_id} placeholder")

    if config.lifecycle.confirm_timeout_seconds is None:
        warnings.append(
            "No confirmation timeout configured. A hung confirmation will "
            "hold its query's writer lock until the transport gives up."
        )

    sort_cfg = config.sort_filter
    overlap = set(sort_cfg.numeric_fields) & set(sort_cfg.date_fields)
    if overlap:
        errors.append(
            f"Fields cannot be both numeric and date-like: {', '.join(sorted(overlap))}"
        )
    if not sort_cfg.search_fields:
        warnings.append("No search fields configured; free-text search matches nothing.")

    for warning in warnings:
        logger.warning("config_validation_warning", message=warning)

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return warnings
