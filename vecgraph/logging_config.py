"""
Logging configuration for vecgraph entry points.

Library modules only call `structlog.get_logger()` / `logging.getLogger()`;
applications (and the CLI) call configure_logging() once at startup.
"""

import logging
import os
import sys

import structlog


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """
    Configure structlog and stdlib logging.

    Args:
        level: Log level name. DEBUG_NEO4J=true forces DEBUG.
        json: Render JSON lines instead of the console format
    """
    if os.environ.get("DEBUG_NEO4J", "").lower() == "true":
        level = "DEBUG"
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
