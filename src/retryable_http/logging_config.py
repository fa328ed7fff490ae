"""Structured logging setup for retryable HTTP calls.

The library only ever calls ``structlog.get_logger(__name__)``. Applications
(and the ``retryable-http`` command) call ``configure_logging`` once at
startup to route those events through stdlib logging:

- production: one JSON object per line
- anything else: console rendering, coloured when the stream is a TTY

Output goes to stderr by default so stdout stays free for response bodies.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# HTTP stack loggers that would otherwise log every connection at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the library name."""
    event_dict.setdefault("app", "retryable-http")
    return event_dict


def _renderer(environment: str, stream: TextIO) -> Processor:
    if environment.lower() == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    stream: Optional[TextIO] = None,
) -> None:
    """Route structlog events for retry attempts through stdlib logging.

    Args:
        log_level: Level name; unknown names fall back to INFO
        environment: "production" selects JSON output
        stream: Destination stream (defaults to sys.stderr)
    """
    stream = stream if stream is not None else sys.stderr
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if environment.lower() == "production":
        # JSON has no pretty traceback rendering
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(environment, stream),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
