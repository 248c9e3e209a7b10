"""
hub_provisioner.providers

Cloud and identity provider boundary.

Responsibilities:
- Abstract provider contract (`base`).
- Azure Resource Manager adapter (`azure`) and Microsoft Graph client (`graph`).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Import `providers.azure` lazily from the CLI; the Azure SDKs are only needed at runtime.
