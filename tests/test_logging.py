"""
tests.test_logging

Log event processing and run-scoped context binding.
"""

from __future__ import annotations

import structlog

from hub_provisioner.observability.logging import (
    _redact_secrets,
    bind_run_context,
    clear_run_context,
)


def test_secret_fields_are_redacted() -> None:
    event = _redact_secrets(None, "info", {"event": "principal_created", "secret": "s3cr3t!"})
    assert event == {"event": "principal_created", "secret": "***"}


def test_run_context_skips_none_values() -> None:
    bind_run_context(run_id="run-1", subscription=None)
    try:
        assert structlog.contextvars.get_contextvars() == {"run_id": "run-1"}
    finally:
        clear_run_context()
    assert structlog.contextvars.get_contextvars() == {}
