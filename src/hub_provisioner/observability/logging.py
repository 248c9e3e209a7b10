"""
hub_provisioner.observability.logging

Structured logging for provisioning runs.

Responsibilities:
- Configure `structlog` JSON output on stderr (stdout is reserved for the command result).
- Bind run-scoped metadata (run id, subscription, command) via contextvars.
- Keep credential material out of log events.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

_REDACTED_KEYS = frozenset({"secret", "password", "secret_text", "client_secret"})


def configure_logging(*, service_name: str, level: str, stream: TextIO | None = None) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    # azure-core logs every HTTP request and response header at INFO.
    logging.getLogger("azure").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            _redact_secrets,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _redact_secrets(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in _REDACTED_KEYS & event_dict.keys():
        event_dict[key] = "***"
    return event_dict


def bind_run_context(**values: Any) -> None:
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_run_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# The CLI binds run context once per command and clears it on exit. Library callers that
# never call `configure_logging` get structlog's default console renderer.
