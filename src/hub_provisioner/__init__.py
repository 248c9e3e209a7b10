"""
hub_provisioner

Top-level package for the messaging hub provisioning orchestrator.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal to avoid import-time side effects (Azure SDK imports are heavy).
