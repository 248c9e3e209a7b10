"""
hub_provisioner.orchestrator

Orchestration package (LangGraph state machine).

Responsibilities:
- Typed state schema, nodes, routing, and graph compilation for a provisioning run.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Public surface area should remain small and stable; call sites should use the service layer.
