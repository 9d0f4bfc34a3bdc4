"""Structured logging for the fetch client.

Every fetch module logs through ``get_logger``, which returns a lazy
structlog proxy pre-bound with a ``component`` field. Loggers therefore
pick up whatever ``configure_logging`` installs, even when they were
created at import time.
"""

import logging
import sys
from typing import Any, TextIO

import structlog


# Standard library loggers used by the HTTP engine
HTTP_ENGINE_LOGGERS = ("httpx", "httpcore")

DEFAULT_COMPONENT = "fetch"


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
    http_debug: bool = False,
) -> None:
    """Configure structured logging for the fetch client.

    Args:
        level: Logging level for fetch events (default: INFO).
        output: Output stream (default: stderr).
        json_format: Render JSON lines; otherwise use the console renderer.
        http_debug: Let httpx/httpcore log at ``level``. When False they
            are held at WARNING so per-request chatter stays out of the
            fetch event stream.
    """
    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        # Module-level proxies must follow later reconfiguration
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    engine_level = level if http_debug else max(level, logging.WARNING)
    for name in HTTP_ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(engine_level)


def get_logger(
    name: str | None = None,
    component: str = DEFAULT_COMPONENT,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """Get a lazy logger bound to a component.

    Args:
        name: Optional logger name.
        component: Value of the ``component`` field on every line.
        **context: Extra initial context.

    Returns:
        Bound logger proxy.
    """
    args = (name,) if name else ()
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(
        *args, component=component, **context
    )
    return logger
