"""
Configuration module for the InsurAI engine.

This module provides:
- Pydantic configuration models
- YAML configuration loading
- Configuration validation
"""

from insurai_engine.config.models import (
    EngineConfig,
    EndpointConfig,
    TransportConfig,
    LifecycleConfig,
    SortFilterConfig,
    StatisticsConfig,
    LoggingConfig,
)
from insurai_engine.config.loader import load_config
from insurai_engine.config.validation import ConfigurationError, validate_config

__all__ = [
    "EngineConfig",
    "EndpointConfig",
    "TransportConfig",
    "LifecycleConfig",
    "SortFilterConfig",
    "StatisticsConfig",
    "LoggingConfig",
    "ConfigurationError",
    "load_config",
    "validate_config",
]
