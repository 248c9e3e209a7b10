"""
hub_provisioner.providers.base

Provider boundary used by the provisioning operations.

Responsibilities:
- Define the abstract cloud/identity contract the orchestrator depends on.
- Keep subscription scoping explicit: every call after lookup receives the context.
"""

from __future__ import annotations

from typing import Protocol

from hub_provisioner.models import (
    Credential,
    HubRef,
    NamespaceRef,
    ResourceGroupRef,
    RoleAssignment,
    ServicePrincipal,
    SubscriptionContext,
)
from hub_provisioner.resource_types import ResourceType


class CloudProvider(Protocol):
    """
    Find methods raise `ResourceNotFound` when nothing matches.
    Create methods return `None` when the provider reports no object.
    Delete and role-assignment methods raise on failure.
    """

    async def find_subscription(self, name: str) -> SubscriptionContext | None: ...

    async def find_resource_group(
        self, ctx: SubscriptionContext, name: str
    ) -> ResourceGroupRef: ...

    async def create_resource_group(
        self, ctx: SubscriptionContext, name: str, region: str
    ) -> ResourceGroupRef | None: ...

    async def find_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str
    ) -> NamespaceRef: ...

    async def create_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str, region: str
    ) -> NamespaceRef | None: ...

    async def find_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> HubRef: ...

    async def create_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> HubRef | None: ...

    async def list_supported_regions(
        self, ctx: SubscriptionContext, resource_type: ResourceType
    ) -> set[str]: ...

    async def create_principal(
        self, ctx: SubscriptionContext, display_name: str, credential: Credential
    ) -> ServicePrincipal | None: ...

    async def create_role_assignment(
        self, ctx: SubscriptionContext, assignment: RoleAssignment
    ) -> None: ...

    async def delete_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> None: ...

    async def delete_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str
    ) -> None: ...

    async def delete_resource_group(self, ctx: SubscriptionContext, name: str) -> None: ...

    async def aclose(self) -> None: ...


def normalize_region(region: str) -> str:
    # "East US 2" and "eastus2" name the same location.
    return "".join(region.split()).lower()


# --- Module Notes -----------------------------------------------------------
# `providers.azure.AzureProvider` is the production implementation; tests use an
# in-memory fake that records calls (see tests/conftest.py).
