"""
hub_provisioner.providers.azure

Azure Resource Manager implementation of the provider boundary.

Responsibilities:
- Resolve subscriptions and bind management clients per subscription id.
- Find/create/delete resource groups, Event Hubs namespaces and event hubs.
- Report supported regions from the resource provider registration.
- Create service principals (via Microsoft Graph) and role assignments.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx
from azure.core.exceptions import ResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential
from azure.mgmt.authorization.aio import AuthorizationManagementClient
from azure.mgmt.authorization.models import RoleAssignmentCreateParameters
from azure.mgmt.eventhub.aio import EventHubManagementClient
from azure.mgmt.eventhub.models import EHNamespace, Eventhub, Sku
from azure.mgmt.resource.resources.aio import ResourceManagementClient
from azure.mgmt.resource.resources.models import ResourceGroup
from azure.mgmt.subscription.aio import SubscriptionClient

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
from hub_provisioner.observability.logging import get_logger
from hub_provisioner.providers.base import normalize_region
from hub_provisioner.providers.graph import GraphClient
from hub_provisioner.resource_types import ResourceType
from hub_provisioner.settings import Settings

log = get_logger(__name__)


class AzureProvider:
    def __init__(
        self,
        *,
        credential: Any,
        graph: GraphClient,
        namespace_sku: str = "Standard",
        closeables: tuple[Any, ...] = (),
    ) -> None:
        self._credential = credential
        self._graph = graph
        self._namespace_sku = namespace_sku
        self._closeables = closeables

        # Management clients are scoped to one subscription id each.
        self._resources: dict[str, ResourceManagementClient] = {}
        self._eventhub: dict[str, EventHubManagementClient] = {}
        self._authorization: dict[str, AuthorizationManagementClient] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> AzureProvider:
        credential = DefaultAzureCredential()
        http = httpx.AsyncClient(
            base_url=settings.graph_base_url,
            timeout=settings.graph_timeout_seconds,
        )

        async def _graph_token() -> str:
            token = await credential.get_token(settings.graph_scope)
            return token.token

        graph = GraphClient(http=http, token_source=_graph_token)
        return cls(
            credential=credential,
            graph=graph,
            namespace_sku=settings.namespace_sku,
            closeables=(http,),
        )

    def _resource_client(self, ctx: SubscriptionContext) -> ResourceManagementClient:
        sid = ctx.subscription_id
        if sid not in self._resources:
            self._resources[sid] = ResourceManagementClient(self._credential, sid)
        return self._resources[sid]

    def _eventhub_client(self, ctx: SubscriptionContext) -> EventHubManagementClient:
        sid = ctx.subscription_id
        if sid not in self._eventhub:
            self._eventhub[sid] = EventHubManagementClient(self._credential, sid)
        return self._eventhub[sid]

    def _authorization_client(self, ctx: SubscriptionContext) -> AuthorizationManagementClient:
        sid = ctx.subscription_id
        if sid not in self._authorization:
            self._authorization[sid] = AuthorizationManagementClient(self._credential, sid)
        return self._authorization[sid]

    async def find_subscription(self, name: str) -> SubscriptionContext | None:
        async with SubscriptionClient(self._credential) as client:
            async for sub in client.subscriptions.list():
                if sub.display_name == name:
                    return SubscriptionContext(
                        subscription_id=str(sub.subscription_id),
                        display_name=str(sub.display_name),
                        tenant_id=getattr(sub, "tenant_id", None),
                    )
        return None

    async def find_resource_group(self, ctx: SubscriptionContext, name: str) -> ResourceGroupRef:
        try:
            rg = await self._resource_client(ctx).resource_groups.get(name)
        except ResourceNotFoundError as e:
            raise ResourceNotFound("resource group", name) from e
        return ResourceGroupRef(name=rg.name, region=rg.location)

    async def create_resource_group(
        self, ctx: SubscriptionContext, name: str, region: str
    ) -> ResourceGroupRef | None:
        rg = await self._resource_client(ctx).resource_groups.create_or_update(
            name, ResourceGroup(location=region)
        )
        if rg is None:
            return None
        return ResourceGroupRef(name=rg.name, region=rg.location)

    async def find_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str
    ) -> NamespaceRef:
        try:
            ns = await self._eventhub_client(ctx).namespaces.get(resource_group, name)
        except ResourceNotFoundError as e:
            raise ResourceNotFound("namespace", name) from e
        return NamespaceRef(name=ns.name, resource_group=resource_group, region=ns.location)

    async def create_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str, region: str
    ) -> NamespaceRef | None:
        sku = Sku(name=self._namespace_sku, tier=self._namespace_sku)
        poller = await self._eventhub_client(ctx).namespaces.begin_create_or_update(
            resource_group, name, EHNamespace(location=region, sku=sku)
        )
        ns = await poller.result()
        if ns is None:
            return None
        return NamespaceRef(name=ns.name, resource_group=resource_group, region=ns.location)

    async def find_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> HubRef:
        try:
            hub = await self._eventhub_client(ctx).event_hubs.get(resource_group, namespace, name)
        except ResourceNotFoundError as e:
            raise ResourceNotFound("hub", name) from e
        return HubRef(name=hub.name, namespace=namespace, resource_group=resource_group)

    async def create_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> HubRef | None:
        hub = await self._eventhub_client(ctx).event_hubs.create_or_update(
            resource_group, namespace, name, Eventhub()
        )
        if hub is None:
            return None
        return HubRef(name=hub.name, namespace=namespace, resource_group=resource_group)

    async def list_supported_regions(
        self, ctx: SubscriptionContext, resource_type: ResourceType
    ) -> set[str]:
        provider = await self._resource_client(ctx).providers.get(resource_type.namespace)
        for rt in provider.resource_types or []:
            if (rt.resource_type or "").lower() == resource_type.type_name.lower():
                return {normalize_region(loc) for loc in rt.locations or []}
        return set()

    async def create_principal(
        self, ctx: SubscriptionContext, display_name: str, credential: Credential
    ) -> ServicePrincipal | None:
        return await self._graph.create_principal(display_name=display_name, credential=credential)

    async def create_role_assignment(
        self, ctx: SubscriptionContext, assignment: RoleAssignment
    ) -> None:
        client = self._authorization_client(ctx)
        scope = assignment.scope.arm_id(ctx.subscription_id)

        role_definition_id: str | None = None
        async for rd in client.role_definitions.list(
            scope, filter=f"roleName eq '{assignment.role_name}'"
        ):
            role_definition_id = rd.id
            break
        if role_definition_id is None:
            raise ResourceNotFound("role definition", assignment.role_name)

        await client.role_assignments.create(
            scope,
            str(uuid.uuid4()),
            RoleAssignmentCreateParameters(
                role_definition_id=role_definition_id,
                principal_id=assignment.principal_id,
                principal_type="ServicePrincipal",
            ),
        )

    async def delete_hub(
        self, ctx: SubscriptionContext, resource_group: str, namespace: str, name: str
    ) -> None:
        await self._eventhub_client(ctx).event_hubs.delete(resource_group, namespace, name)

    async def delete_namespace(
        self, ctx: SubscriptionContext, resource_group: str, name: str
    ) -> None:
        poller = await self._eventhub_client(ctx).namespaces.begin_delete(resource_group, name)
        await poller.result()

    async def delete_resource_group(self, ctx: SubscriptionContext, name: str) -> None:
        poller = await self._resource_client(ctx).resource_groups.begin_delete(name)
        await poller.result()

    async def aclose(self) -> None:
        clients: list[Any] = [
            *self._resources.values(),
            *self._eventhub.values(),
            *self._authorization.values(),
        ]
        for client in clients:
            await client.close()
        for closeable in self._closeables:
            await closeable.aclose()
        await self._credential.close()


# --- Module Notes -----------------------------------------------------------
# Long-running operations (namespace create/delete, resource group delete) are awaited to
# completion so the orchestrator's ordering guarantees hold against the real service.
