"""
tests.conftest

Shared fixtures: an in-memory provider, a recording sleep, and test settings.

Responsibilities:
- Stand in for the cloud/identity provider with call recording and failure injection.
- Keep provisioning tests instant by recording sleeps instead of waiting.
"""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from hub_provisioner.errors import ResourceNotFound
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
from hub_provisioner.settings import Settings

SUBSCRIPTION = SubscriptionContext(
    subscription_id="00000000-0000-0000-0000-000000000001",
    display_name="Test Subscription",
    tenant_id="tenant-1",
)


class FakeProvider:
    def __init__(self) -> None:
        self.subscriptions: dict[str, SubscriptionContext] = {SUBSCRIPTION.display_name: SUBSCRIPTION}
        self.regions: dict[ResourceType, set[str]] = {
            ResourceType.EVENTHUB_NAMESPACES: {"eastus", "westus"},
        }
        self.resource_groups: dict[str, ResourceGroupRef] = {}
        self.namespaces: dict[tuple[str, str], NamespaceRef] = {}
        self.hubs: dict[tuple[str, str, str], HubRef] = {}
        self.principals: list[ServicePrincipal] = []
        self.role_assignments: list[RoleAssignment] = []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

        # Failure injection
        self.create_returns_none: set[str] = set()
        self.create_raises: set[str] = set()
        self.principal_returns_none = False
        self.role_failures_remaining = 0
        self.delete_failures: set[str] = set()
        self.closed = False

        self._ids = itertools.count(1)

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def find_subscription(self, name: str) -> SubscriptionContext | None:
        self._record("find_subscription", name)
        return self.subscriptions.get(name)

    async def find_resource_group(self, ctx: SubscriptionContext, name: str) -> ResourceGroupRef:
        self._record("find_resource_group", name)
        if name not in self.resource_groups:
            raise ResourceNotFound("resource group", name)
        return self.resource_groups[name]

    async def create_resource_group(
        self, ctx: SubscriptionContext, name: str, region: str
    ) -> ResourceGroupRef | None:
        self._record("create_resource_group", name, region)
        if "resource_group" in self.create_raises:
            raise RuntimeError("quota exceeded")
        if "resource_group" in self.create_returns_none:
            return None
        self.resource_groups[name] = ResourceGroupRef(name=name, region=region)
        return self.resource_groups[name]

    async def find_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str
    ) -> NamespaceRef:
        self._record("find_namespace", resource_group, name)
        key = (resource_group, name)
        if key not in self.namespaces:
            raise ResourceNotFound("namespace", name)
        return self.namespaces[key]

    async def create_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str, region: str
    ) -> NamespaceRef | None:
        self._record("create_namespace", resource_group, name, region)
        if "namespace" in self.create_raises:
            raise RuntimeError("namespace name unavailable")
        if "namespace" in self.create_returns_none:
            return None
        ref = NamespaceRef(name=name, resource_group=resource_group, region=region)
        self.namespaces[(resource_group, name)] = ref
        return ref

    async def find_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> HubRef:
        self._record("find_hub", resource_group, namespace, name)
        key = (resource_group, namespace, name)
        if key not in self.hubs:
            raise ResourceNotFound("hub", name)
        return self.hubs[key]

    async def create_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> HubRef | None:
        self._record("create_hub", resource_group, namespace, name)
        if "hub" in self.create_raises:
            raise RuntimeError("hub limit reached")
        if "hub" in self.create_returns_none:
            return None
        ref = HubRef(name=name, namespace=namespace, resource_group=resource_group)
        self.hubs[(resource_group, namespace, name)] = ref
        return ref

    async def list_supported_regions(
        self, ctx: SubscriptionContext, resource_type: ResourceType
    ) -> set[str]:
        self._record("list_supported_regions", resource_type)
        return set(self.regions.get(resource_type, set()))

    async def create_principal(
        self, ctx: SubscriptionContext, display_name: str, credential: Credential
    ) -> ServicePrincipal | None:
        self._record("create_principal", display_name)
        if self.principal_returns_none:
            return None
        n = next(self._ids)
        principal = ServicePrincipal(
            app_id=f"app-{n}",
            object_id=f"obj-{n}",
            display_name=display_name,
            credential=credential,
        )
        self.principals.append(principal)
        return principal

    async def create_role_assignment(
        self, ctx: SubscriptionContext, assignment: RoleAssignment
    ) -> None:
        self._record("create_role_assignment", assignment.role_name)
        if self.role_failures_remaining > 0:
            self.role_failures_remaining -= 1
            raise RuntimeError(f"principal {assignment.principal_id} does not exist in directory")
        self.role_assignments.append(assignment)

    async def delete_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> None:
        self._record("delete_hub", name)
        if "hub" in self.delete_failures:
            raise RuntimeError("hub is locked")
        self.hubs.pop((resource_group, namespace, name), None)

    async def delete_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str
    ) -> None:
        self._record("delete_namespace", name)
        if "namespace" in self.delete_failures:
            raise RuntimeError("namespace delete conflict")
        self.namespaces.pop((resource_group, name), None)

    async def delete_resource_group(self, ctx: SubscriptionContext, name: str) -> None:
        self._record("delete_resource_group", name)
        if "resource_group" in self.delete_failures:
            raise RuntimeError("resource group delete conflict")
        self.resource_groups.pop(name, None)

    async def aclose(self) -> None:
        self.closed = True


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def ctx() -> SubscriptionContext:
    return SUBSCRIPTION


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        subscription_name=SUBSCRIPTION.display_name,
        region="eastus",
        resource_group="rg-hubs-test",
        namespace="ns-hubs-test",
        hub="hub-events",
        principal_name="sp-hubs-test",
        group_roles=["Contributor"],
        namespace_roles=["Azure Event Hubs Data Owner"],
        state_file=tmp_path / "state.json",
    )


# --- Module Notes -----------------------------------------------------------
# FakeProvider mirrors the provider contract: find_* raise ResourceNotFound, create_* may
# return None, deletes and role assignments raise on failure.
