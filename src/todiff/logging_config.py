"""structlog setup for the command-line tools."""

import logging
import sys

import structlog


def configure_logging(verbose: bool = False) -> None:
    """Send structured log events to stderr.

    Args:
        verbose: Emit debug events; otherwise only warnings and errors
    """
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
