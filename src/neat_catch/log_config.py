"""
Logging configuration — structured output for neat_catch diagnostics.

The library logs through the standard logging module (`neat_catch.*`
loggers) and stays silent until the application opts in:

    from neat_catch import configure_structlog, get_settings

    configure_structlog(get_settings().log_level)

After that, retry scheduling (DEBUG) and error-transformer failures (WARNING)
are rendered by structlog, alongside any structlog loggers of the application.
"""

from __future__ import annotations

import logging
import sys

import structlog

LIBRARY_LOGGER = "neat_catch"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def configure_structlog(log_level: str = "INFO") -> logging.Handler:
    """
    Configure structlog and route the library's stdlib loggers through it.

    Unknown level names fall back to INFO. Returns the handler attached to the
    `neat_catch` logger; calling again replaces it instead of stacking handlers.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.dev.ConsoleRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(),
            ],
        )
    )
    handler.set_name("neat_catch.structlog")

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for existing in list(library_logger.handlers):
        if existing.get_name() == "neat_catch.structlog":
            library_logger.removeHandler(existing)
    library_logger.addHandler(handler)
    library_logger.setLevel(level)
    return handler
