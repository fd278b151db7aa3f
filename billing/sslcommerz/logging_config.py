"""structlog setup for the gateway: request-scoped context plus secret masking."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from .settings import APP_VERSION, settings
from .utils import get_request_id

REDACTED = "***"
SECRET_FIELDS = frozenset({"store_passwd", "store_password"})
# Transport chatter that would otherwise log every SSLCommerz round trip
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def redact_secrets(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``payload`` with credential fields masked, safe to log."""
    return {
        key: (REDACTED if key in SECRET_FIELDS and value else value)
        for key, value in payload.items()
    }


def add_gateway_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the request id, service identity and payments mode."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    event_dict.setdefault("service", settings.SERVICE_NAME)
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    event_dict.setdefault("version", APP_VERSION)
    event_dict.setdefault("payments_mode", settings.PAYMENTS_MODE)
    return event_dict


def mask_secret_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Mask credentials passed straight to a log call.

    Covers secret keys on the event itself and one level down, where request
    and response payloads are attached.
    """
    for key, value in list(event_dict.items()):
        if key in SECRET_FIELDS and value:
            event_dict[key] = REDACTED
        elif isinstance(value, Mapping):
            event_dict[key] = redact_secrets(value)
    return event_dict


def drop_color_message_key(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # uvicorn duplicates the message with ANSI codes
    event_dict.pop("color_message", None)
    return event_dict


def _processors(json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_gateway_context,
        mask_secret_fields,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso" if json_logs else "%Y-%m-%d %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        processors += [
            structlog.processors.UnicodeDecoder(),
            drop_color_message_key,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_structlog(json_logs: bool = False) -> None:
    """
    Configure structlog for the service and the CLI.

    Args:
        json_logs: Emit JSON lines. Forced on outside DEBUG so production logs
            stay machine-readable.
    """
    structlog.configure(
        processors=_processors(json_logs or not settings.DEBUG),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["configure_structlog", "get_logger", "mask_secret_fields", "redact_secrets"]
