"""
hub_provisioner.services.provisioning

Named provisioning operations.

Responsibilities:
- Resolve the subscription context (fail fast when missing).
- Validate the principal name and target region before anything is created.
- Ensure resource group -> namespace -> hub exist, reporting whether each was created.
- Create the service principal and assign roles with a single bounded retry.
"""

from __future__ import annotations

import asyncio
import re

from hub_provisioner.errors import (
    InvalidPrincipalName,
    PrincipalCreationFailed,
    ResourceCreationFailed,
    ResourceNotFound,
    SubscriptionNotFound,
    UnsupportedRegion,
)
from hub_provisioner.models import (
    Credential,
    RoleAssignment,
    RoleScope,
    ServicePrincipal,
    SubscriptionContext,
)
from hub_provisioner.observability.logging import get_logger
from hub_provisioner.providers.base import CloudProvider, normalize_region
from hub_provisioner.resource_types import ResourceType
from hub_provisioner.retry import RetryResult, Sleep, bounded_retry

log = get_logger(__name__)

_WHITESPACE = re.compile(r"\s")


async def resolve_subscription(provider: CloudProvider, *, name: str) -> SubscriptionContext:
    ctx = await provider.find_subscription(name)
    if ctx is None:
        log.error("subscription_not_found", subscription=name)
        raise SubscriptionNotFound(name)
    log.info("subscription_resolved", subscription=name, subscription_id=ctx.subscription_id)
    return ctx


def validate_principal_name(name: str) -> None:
    if not name or _WHITESPACE.search(name):
        raise InvalidPrincipalName(name)


async def validate_region(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    region: str,
    resource_type: ResourceType,
) -> str:
    """
    Returns the normalized region (e.g. "East US" -> "eastus") when supported.
    """

    supported = await provider.list_supported_regions(ctx, resource_type)
    normalized = normalize_region(region)
    if normalized not in supported:
        raise UnsupportedRegion(region, resource_type.value, list(supported))
    return normalized


async def ensure_resource_group(
    provider: CloudProvider, ctx: SubscriptionContext, *, name: str, region: str
) -> bool:
    try:
        await provider.find_resource_group(ctx, name)
    except ResourceNotFound:
        pass
    else:
        log.info("resource_group_exists", resource_group=name)
        return False

    log.info("resource_group_creating", resource_group=name, region=region)
    try:
        created = await provider.create_resource_group(ctx, name, region)
    except Exception as e:
        raise ResourceCreationFailed("resource group", name, str(e)) from e
    if created is None:
        raise ResourceCreationFailed("resource group", name)
    return True


async def ensure_namespace(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    resource_group: str,
    name: str,
    region: str,
) -> bool:
    try:
        await provider.find_namespace(ctx, resource_group, name)
    except ResourceNotFound:
        pass
    else:
        log.info("namespace_exists", namespace=name, resource_group=resource_group)
        return False

    log.info("namespace_creating", namespace=name, resource_group=resource_group, region=region)
    try:
        created = await provider.create_namespace(ctx, resource_group, name, region)
    except Exception as e:
        raise ResourceCreationFailed("namespace", name, str(e)) from e
    if created is None:
        raise ResourceCreationFailed("namespace", name)
    return True


async def ensure_hub(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    resource_group: str,
    namespace: str,
    name: str,
) -> bool:
    try:
        await provider.find_hub(ctx, resource_group, namespace, name)
    except ResourceNotFound:
        pass
    else:
        log.info("hub_exists", hub=name, namespace=namespace)
        return False

    log.info("hub_creating", hub=name, namespace=namespace, resource_group=resource_group)
    try:
        created = await provider.create_hub(ctx, resource_group, namespace, name)
    except Exception as e:
        raise ResourceCreationFailed("hub", name, str(e)) from e
    if created is None:
        raise ResourceCreationFailed("hub", name)
    return True


async def create_service_principal(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    display_name: str,
    credential: Credential,
    propagation_delay: float,
    sleep: Sleep = asyncio.sleep,
) -> ServicePrincipal:
    try:
        principal = await provider.create_principal(ctx, display_name, credential)
    except Exception as e:
        raise PrincipalCreationFailed(display_name, str(e)) from e
    if principal is None:
        raise PrincipalCreationFailed(display_name)

    # Fixed wait for directory propagation; role assignment depends on it.
    log.info(
        "principal_created",
        app_id=principal.app_id,
        display_name=display_name,
        propagation_delay_seconds=propagation_delay,
    )
    await sleep(propagation_delay)
    return principal


async def assign_role(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    principal: ServicePrincipal,
    role_name: str,
    scope: RoleScope,
    retry_delay: float,
    max_attempts: int = 2,
    sleep: Sleep = asyncio.sleep,
) -> RetryResult[None]:
    assignment = RoleAssignment(
        principal_id=principal.object_id, role_name=role_name, scope=scope
    )

    async def _attempt() -> None:
        await provider.create_role_assignment(ctx, assignment)

    result = await bounded_retry(
        _attempt,
        delay=retry_delay,
        max_attempts=max_attempts,
        sleep=sleep,
        label=f"role_assignment:{role_name}",
    )
    log.info(
        "role_assignment_result",
        role=role_name,
        scope=scope.arm_id(ctx.subscription_id),
        outcome=result.outcome.value,
        attempts=result.attempts,
    )
    return result


async def assign_namespace_role(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    principal: ServicePrincipal,
    role_name: str,
    resource_group: str,
    namespace: str,
    retry_delay: float,
    max_attempts: int = 2,
    sleep: Sleep = asyncio.sleep,
) -> RetryResult[None]:
    scope = RoleScope(
        resource_group=resource_group,
        resource_name=namespace,
        resource_type=ResourceType.EVENTHUB_NAMESPACES,
    )
    return await assign_role(
        provider,
        ctx,
        principal=principal,
        role_name=role_name,
        scope=scope,
        retry_delay=retry_delay,
        max_attempts=max_attempts,
        sleep=sleep,
    )


# --- Module Notes -----------------------------------------------------------
# Operations raise `ProvisioningError` subclasses; only the CLI converts them to exit codes.
# Role assignment returns a RetryResult so the orchestrator owns the retry policy decision.
