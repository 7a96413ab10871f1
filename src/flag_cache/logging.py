"""Structured logging setup for flag_cache.

Library modules only call ``structlog.get_logger(__name__)``; the
application decides how events are rendered.  :func:`configure_logging`
is what the lookup runner uses.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog


def add_component(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag every event with the emitting component."""
    event_dict.setdefault("component", "flag_cache")
    return event_dict


def configure_logging(log_level: str = "info", *, stream: TextIO | None = None) -> None:
    """Route structlog events through stdlib logging as JSON lines.

    Args:
        log_level: Minimum level name ("debug", "info", "warning", ...).
        stream:    Where log lines go.  Defaults to stderr so stdout stays
                   free for program output.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_component,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )
