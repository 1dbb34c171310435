"""Structured logging configuration for devtool."""

import logging

import structlog
from pythonjsonlogger.json import JsonFormatter


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """
    Configure structured logging for the command line.

    Records go to standard error so that standard output belongs to the
    tool being dispatched. May be called again once settings are loaded.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output JSON formatted logs
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # StreamHandler defaults to sys.stderr
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        # Event dict fields become LogRecord extras and python-json-logger serializes them.
        console_handler.setFormatter(JsonFormatter("%(levelname)s %(name)s %(message)s"))
        processors = [*shared_processors, structlog.stdlib.render_to_log_kwargs]
    else:
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=False)]

    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)
