"""
hub_provisioner.orchestrator.state

Typed state schema used by the LangGraph provisioning graph.

Responsibilities:
- Define the contract between nodes (inputs/outputs).
- Carry the creation flags from the ensure steps to the checkpointed record.
"""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from hub_provisioner.models import ServicePrincipal, SubscriptionContext
from hub_provisioner.orchestrator.reducers import append_entries


class ProvisioningState(TypedDict, total=False):
    run_id: str

    # Inputs
    subscription_name: str
    region: str
    resource_group: str
    namespace: str
    hub: str
    principal_name: str

    # Resolved context
    subscription: SubscriptionContext
    normalized_region: str

    # Creation flags (only state that teardown needs)
    resource_group_created: bool
    namespace_created: bool
    hub_created: bool

    # Identity
    principal: ServicePrincipal
    role_results: Annotated[list[dict[str, Any]], append_entries]

    # Audit
    audit_log: Annotated[list[dict[str, Any]], append_entries]


# --- Module Notes -----------------------------------------------------------
# total=False: nodes only return the keys they produce; LangGraph merges them in order.
