"""Structured logging configuration using structlog.

Events are routed through the stdlib root logger so uvicorn and library logs
share one stream. Webhook credentials never reach the output: the
``secret`` query parameter and the signature header are masked wherever they
appear in an event's ``query`` or ``headers`` mapping.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any

import structlog

REDACTED = "[redacted]"

# Lower-cased keys; header names are stored lower-cased on HookRequest
CREDENTIAL_KEYS = frozenset({"secret", "x-hub-signature"})


def redact_credentials(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential values inside ``headers`` and ``query`` event fields."""
    for field in ("headers", "query"):
        values = event_dict.get(field)
        if isinstance(values, Mapping):
            event_dict[field] = {
                key: REDACTED if str(key).lower() in CREDENTIAL_KEYS else value
                for key, value in values.items()
            }
    return event_dict


def _shared_processors(*, json_logs: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_credentials,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        # ConsoleRenderer pretty-prints exceptions itself
        processors.append(structlog.processors.format_exc_info)
    return processors


def configure_logging(*, json_logs: bool = True, log_level: str = "INFO") -> None:
    """Configure structlog and install a single stdout handler on the root logger.

    Args:
        json_logs: JSON lines when *True*, coloured console output otherwise.
        log_level: Root log level name (e.g. ``"INFO"``, ``"DEBUG"``).
    """
    shared = _shared_processors(json_logs=json_logs)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())
