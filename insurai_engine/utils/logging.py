"""
Structured logging configuration for the InsurAI engine.

Log events go to stderr so command output on stdout stays machine-readable.
Modules log snake_case event names with keyword context:

    logger = structlog.get_logger()
    logger.info("snapshot_loaded", claims=12)
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog

from insurai_engine.config.models import LoggingConfig


_HANDLER_NAME = "insurai"


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever sys.stderr is at emit time."""

    def __init__(self) -> None:
        super().__init__()

    @property
    def stream(self) -> TextIO:
        return sys.stderr

    @stream.setter
    def stream(self, value: TextIO) -> None:
        pass


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    include_timestamp: bool = True,
    config: Optional[LoggingConfig] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structured logging for the engine.

    Explicit arguments take precedence over `config`. Calling this again
    replaces the previous engine handler rather than adding a second one.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output logs as JSON
        include_timestamp: If True, include an ISO timestamp in logs
        config: LoggingConfig supplying defaults
        stream: Destination stream (stderr if omitted)
    """
    config = config or LoggingConfig()
    level_name = (level or config.level).upper()
    as_json = config.json_output if json_output is None else json_output

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream) if stream is not None else _StderrHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name))

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if as_json:
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream is None and sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (optional)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


class LifecycleLogger:
    """
    Specialized logger for query lifecycle events.

    Provides convenience methods for the stage/confirm/rollback pattern.

    Usage:
        logger = LifecycleLogger(component="queries")
        logger.staged(query_id, "submit")
        logger.rolled_back(query_id, "submit", error="503")
    """

    def __init__(self, component: str = "lifecycle"):
        """
        Initialize the lifecycle logger.

        Args:
            component: Name of the component emitting events
        """
        self.component = component
        self._logger = structlog.get_logger().bind(component=component)

    def bind(self, **kwargs: Any) -> "LifecycleLogger":
        """Bind additional context to the logger."""
        self._logger = self._logger.bind(**kwargs)
        return self

    def staged(self, record_id: Any, action: str, **kwargs: Any) -> None:
        """Log an optimistic local change."""
        self._logger.debug(
            "change_staged",
            record_id=record_id,
            action=action,
            **kwargs,
        )

    def confirmed(self, record_id: Any, action: str, **kwargs: Any) -> None:
        """Log a remote confirmation."""
        self._logger.info(
            "change_confirmed",
            record_id=record_id,
            action=action,
            **kwargs,
        )

    def rolled_back(self, record_id: Any, action: str, **kwargs: Any) -> None:
        """Log a rollback to the saved pre-image."""
        self._logger.warning(
            "change_rolled_back",
            record_id=record_id,
            action=action,
            **kwargs,
        )

    def discarded(self, record_id: Any, action: str, **kwargs: Any) -> None:
        """Log a confirmation result ignored because the state moved on."""
        self._logger.info(
            "confirmation_discarded",
            record_id=record_id,
            action=action,
            **kwargs,
        )

    # Error events
    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error."""
        self._logger.error(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning."""
        self._logger.warning(message, **kwargs)
