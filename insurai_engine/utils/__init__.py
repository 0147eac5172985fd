"""
Utility modules for the InsurAI engine.

Provides:
- Lenient amount and timestamp parsing
- Structured logging configuration
"""

from insurai_engine.utils.parsing import (
    WEEKDAY_LABELS,
    is_blank,
    month_label,
    parse_amount,
    parse_timestamp,
    weekday_label,
)
from insurai_engine.utils.logging import configure_logging, get_logger

__all__ = [
    # Parsing
    "WEEKDAY_LABELS",
    "is_blank",
    "month_label",
    "parse_amount",
    "parse_timestamp",
    "weekday_label",
    # Logging
    "configure_logging",
    "get_logger",
]
