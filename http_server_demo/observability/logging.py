from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog


_CONFIGURED = False

# uvicorn.access duplicates the http_request event emitted by our middleware.
_UVICORN_LEVELS = {
    "uvicorn": None,
    "uvicorn.error": None,
    "uvicorn.access": logging.WARNING,
}


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.EventRenamer("message"),
    ]


def configure_logging(level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """Route structlog and stdlib records through one JSON handler.

    Every line is a JSON object keyed by ``message`` and ``timestamp``.
    Only the first call has any effect.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pre_chain = _shared_processors()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name, floor in _UVICORN_LEVELS.items():
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(max(level, floor) if floor is not None else level)

    _CONFIGURED = True


def set_log_level(level: int) -> None:
    """Apply a level chosen after startup (e.g. from settings) to configured loggers."""

    logging.getLogger().setLevel(level)
    for name, floor in _UVICORN_LEVELS.items():
        logging.getLogger(name).setLevel(max(level, floor) if floor is not None else level)
