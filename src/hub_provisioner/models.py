"""
hub_provisioner.models

Domain values passed between provisioning steps.

Responsibilities:
- Immutable references to provider resources (subscription, group, namespace, hub).
- Identity values (credential, service principal) and role-assignment scopes.
- Creation flags and the serializable provisioning record consumed by teardown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from hub_provisioner.resource_types import ResourceType


@dataclass(frozen=True, slots=True)
class SubscriptionContext:
    """
    Resolved subscription; every provider call after resolution receives it explicitly.
    """

    subscription_id: str
    display_name: str
    tenant_id: str | None = None


@dataclass(frozen=True, slots=True)
class ResourceGroupRef:
    name: str
    region: str


@dataclass(frozen=True, slots=True)
class NamespaceRef:
    name: str
    resource_group: str
    region: str


@dataclass(frozen=True, slots=True)
class HubRef:
    name: str
    namespace: str
    resource_group: str


@dataclass(frozen=True, slots=True)
class Credential:
    secret: str = field(repr=False)
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class ServicePrincipal:
    # app_id is the application (client) id; object_id is what RBAC binds to.
    app_id: str
    object_id: str
    display_name: str
    credential: Credential


@dataclass(frozen=True, slots=True)
class RoleScope:
    resource_group: str
    resource_name: str | None = None
    resource_type: ResourceType | None = None

    def arm_id(self, subscription_id: str) -> str:
        scope = f"/subscriptions/{subscription_id}/resourceGroups/{self.resource_group}"
        if self.resource_name and self.resource_type:
            scope = f"{scope}/providers/{self.resource_type.value}/{self.resource_name}"
        return scope


@dataclass(frozen=True, slots=True)
class RoleAssignment:
    principal_id: str
    role_name: str
    scope: RoleScope


class CreationFlags(BaseModel):
    resource_group_created: bool = False
    namespace_created: bool = False
    hub_created: bool = False

    def any_set(self) -> bool:
        return self.resource_group_created or self.namespace_created or self.hub_created

    def merged(self, other: CreationFlags) -> CreationFlags:
        # A resource stays "created by us" once any run recorded it.
        return CreationFlags(
            resource_group_created=self.resource_group_created or other.resource_group_created,
            namespace_created=self.namespace_created or other.namespace_created,
            hub_created=self.hub_created or other.hub_created,
        )


class ProvisioningRecord(BaseModel):
    """
    Checkpointed outcome of a provisioning run (JSON state file).

    Holds what teardown needs: names, scope and creation flags. Never holds secrets.
    """

    run_id: str
    subscription_id: str | None = None
    subscription_name: str
    region: str
    resource_group: str
    namespace: str
    hub: str
    principal_name: str
    principal_app_id: str | None = None
    flags: CreationFlags = Field(default_factory=CreationFlags)
    completed: bool = False


# --- Module Notes -----------------------------------------------------------
# Dataclasses cover in-process values; the pydantic record is the only thing that crosses
# a process boundary (provision -> teardown via --state-file).
