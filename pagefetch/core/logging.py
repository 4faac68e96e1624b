"""Structured logging configuration using structlog."""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

# Standard-library loggers that are only useful when debugging
NOISY_LOGGERS = ("asyncio", "urllib3")


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog with console output on stderr.

    stdout is reserved for JSON responses, so every log line goes to stderr.

    Args:
        verbose: If True, set log level to DEBUG, otherwise INFO.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if verbose else logging.WARNING)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: str) -> FilteringBoundLogger:
    """Get a structlog logger with optional bound context.

    Args:
        name: Optional logger name (defaults to "pagefetch")
        **initial_context: Key-value pairs to bind to the logger

    Example:
        log = get_logger(url="https://example.com")
        log.info("fetch_started")  # Output includes url=https://example.com
    """
    logger = structlog.get_logger(name or "pagefetch")
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
