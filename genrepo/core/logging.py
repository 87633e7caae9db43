"""Logging configuration for the application.

Module loggers stay plain ``logging.getLogger(__name__)``; structlog's
``ProcessorFormatter`` renders their records (and any structlog logger's
events) as JSON or as console text, chosen by ``LOG_FORMAT``.
"""

import logging
import sys

import structlog

from genrepo.core.config import settings

# Applied to stdlib records and structlog events alike
SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def build_formatter(fmt: str) -> structlog.stdlib.ProcessorFormatter:
    """Build the handler formatter for ``"json"`` or ``"text"`` output."""
    if fmt == "json":
        renderers: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and the root logger from settings.

    Args:
        level: Log level name, defaults to settings.LOG_LEVEL
        fmt: "json" or "text", defaults to settings.LOG_FORMAT
    """
    level = (level or settings.LOG_LEVEL).upper()
    fmt = fmt or settings.LOG_FORMAT

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(fmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # SQL echo is controlled by DEBUG through the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
