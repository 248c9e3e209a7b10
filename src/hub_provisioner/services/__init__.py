"""
hub_provisioner.services

Service layer.

Responsibilities:
- Named provisioning and teardown operations.
- Orchestration lifecycle (graph execution, checkpointing, teardown).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services accept a provider instance so the CLI, tests and other scripts can swap it.
