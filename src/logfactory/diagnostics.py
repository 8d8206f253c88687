"""
Internal diagnostics logging.

logfactory reports its own activity (channels built, replaced, component types
re-registered) through structlog loggers that wrap the stdlib logger of the same
name. The host application decides where those records go; by default the
``logfactory`` logger carries a NullHandler and stays silent.
"""

from __future__ import annotations

import logging

import structlog

ROOT_LOGGER_NAME = "logfactory"

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.processors.format_exc_info,
    structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True),
]


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured diagnostics logger backed by ``logging.getLogger(name)``."""
    return structlog.wrap_logger(
        logging.getLogger(name or ROOT_LOGGER_NAME),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
