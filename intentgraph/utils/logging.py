"""Structured logging setup.

Importing this module points structlog at stdlib logging, so the package
stays quiet inside a host application until setup_logging() is called.

Usage in every module:
    from intentgraph.utils.logging import get_logger
    log = get_logger(__name__)
    log.info("graph_created", graph_id=graph_id)
"""

import logging
import sys

import structlog

from intentgraph import config


def configure_default_logging() -> None:
    """Route structlog through stdlib logging without installing handlers.

    Until setup_logging() is called, events follow the host application's
    stdlib configuration; with none, only warnings and above reach stderr.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)


def setup_logging(
    *,
    level: str = config.LOG_LEVEL,
    json_logs: bool = config.LOG_JSON,
) -> None:
    """Configure structlog on top of stdlib logging. Call once at startup.

    Args:
        level: log level name (DEBUG, INFO, WARNING, ERROR).
        json_logs: render JSON lines instead of the plain console format.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    logging.basicConfig(format="%(message)s", level=log_level, handlers=[handler], force=True)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for root_handler in logging.root.handlers:
        root_handler.setFormatter(formatter)


if not structlog.is_configured():
    configure_default_logging()
