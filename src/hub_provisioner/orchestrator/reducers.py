"""
hub_provisioner.orchestrator.reducers

LangGraph merge functions for list-valued provisioning state.
"""

from __future__ import annotations

from typing import Any

Entries = list[dict[str, Any]]


def append_entries(existing: Entries | None, update: Entries | None) -> Entries:
    # Nodes that do not touch a list key leave it out of their update (None here).
    return [*(existing or ()), *(update or ())]


# --- Module Notes -----------------------------------------------------------
# Used for `audit_log` (one event per node) and `role_results` (one entry per role/scope).
