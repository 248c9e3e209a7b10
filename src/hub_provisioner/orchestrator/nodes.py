from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from hub_provisioner.errors import PropagationTimeout
from hub_provisioner.models import Credential, RoleScope, ServicePrincipal, SubscriptionContext
from hub_provisioner.orchestrator.state import ProvisioningState
from hub_provisioner.providers.base import CloudProvider
from hub_provisioner.resource_types import ResourceType
from hub_provisioner.retry import RetryOutcome, RetryResult, Sleep
from hub_provisioner.services import provisioning as ops
from hub_provisioner.settings import Settings


@dataclass(frozen=True, slots=True)
class NodeDeps:
    provider: CloudProvider
    settings: Settings
    sleep: Sleep
    credential_factory: Callable[[], Credential]


def _audit(event: str, **details: Any) -> list[dict[str, Any]]:
    return [{"event": event, "details": details}]


def _ctx(state: ProvisioningState) -> SubscriptionContext:
    return state["subscription"]


async def resolve_subscription_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    ctx = await ops.resolve_subscription(deps.provider, name=state["subscription_name"])
    return {
        "subscription": ctx,
        "audit_log": _audit("SUBSCRIPTION_RESOLVED", subscription_id=ctx.subscription_id),
    }


async def validate_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    """
    Both checks run before anything is created; the first failure aborts the run.
    """

    ops.validate_principal_name(state["principal_name"])
    region = await ops.validate_region(
        deps.provider,
        _ctx(state),
        region=state["region"],
        resource_type=deps.settings.region_resource_type,
    )
    return {
        "normalized_region": region,
        "audit_log": _audit("VALIDATED", region=region, principal_name=state["principal_name"]),
    }


async def ensure_resource_group_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    created = await ops.ensure_resource_group(
        deps.provider,
        _ctx(state),
        name=state["resource_group"],
        region=state["normalized_region"],
    )
    return {
        "resource_group_created": created,
        "audit_log": _audit(
            "RESOURCE_GROUP_ENSURED", name=state["resource_group"], created=created
        ),
    }


async def ensure_namespace_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    created = await ops.ensure_namespace(
        deps.provider,
        _ctx(state),
        resource_group=state["resource_group"],
        name=state["namespace"],
        region=state["normalized_region"],
    )
    return {
        "namespace_created": created,
        "audit_log": _audit("NAMESPACE_ENSURED", name=state["namespace"], created=created),
    }


async def ensure_hub_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    created = await ops.ensure_hub(
        deps.provider,
        _ctx(state),
        resource_group=state["resource_group"],
        namespace=state["namespace"],
        name=state["hub"],
    )
    return {
        "hub_created": created,
        "audit_log": _audit("HUB_ENSURED", name=state["hub"], created=created),
    }


async def create_principal_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    principal = await ops.create_service_principal(
        deps.provider,
        _ctx(state),
        display_name=state["principal_name"],
        credential=deps.credential_factory(),
        propagation_delay=deps.settings.principal_propagation_delay,
        sleep=deps.sleep,
    )
    return {
        "principal": principal,
        "audit_log": _audit("PRINCIPAL_CREATED", app_id=principal.app_id),
    }


async def assign_roles_node(
    state: ProvisioningState, *, deps: NodeDeps
) -> dict[str, Any]:
    settings = deps.settings
    ctx = _ctx(state)
    principal: ServicePrincipal = state["principal"]
    results: list[dict[str, Any]] = []

    for role in settings.group_roles:
        scope = RoleScope(resource_group=state["resource_group"])
        result = await ops.assign_role(
            deps.provider,
            ctx,
            principal=principal,
            role_name=role,
            scope=scope,
            retry_delay=settings.role_retry_delay,
            sleep=deps.sleep,
        )
        scope_id = scope.arm_id(ctx.subscription_id)
        _enforce_retry_policy(result, role=role, scope=scope_id, settings=settings)
        results.append(_result_entry(role, scope_id, result))

    for role in settings.namespace_roles:
        result = await ops.assign_namespace_role(
            deps.provider,
            ctx,
            principal=principal,
            role_name=role,
            resource_group=state["resource_group"],
            namespace=state["namespace"],
            retry_delay=settings.role_retry_delay,
            sleep=deps.sleep,
        )
        scope_id = _namespace_scope(state).arm_id(ctx.subscription_id)
        _enforce_retry_policy(result, role=role, scope=scope_id, settings=settings)
        results.append(_result_entry(role, scope_id, result))

    return {
        "role_results": results,
        "audit_log": _audit("ROLES_ASSIGNED", count=len(results)),
    }


def _namespace_scope(state: ProvisioningState) -> RoleScope:
    return RoleScope(
        resource_group=state["resource_group"],
        resource_name=state["namespace"],
        resource_type=ResourceType.EVENTHUB_NAMESPACES,
    )


def _enforce_retry_policy(
    result: RetryResult[None], *, role: str, scope: str, settings: Settings
) -> None:
    # A retry means the first attempt failed; by default the run ends even if the retry worked.
    if result.outcome is RetryOutcome.SUCCEEDED:
        return
    if result.outcome is RetryOutcome.SUCCEEDED_ON_RETRY and not settings.exit_after_role_retry:
        return
    raise PropagationTimeout(
        role, scope, retry_succeeded=result.outcome is RetryOutcome.SUCCEEDED_ON_RETRY
    ) from result.error


def _result_entry(role: str, scope: str, result: RetryResult[None]) -> dict[str, Any]:
    return {
        "role": role,
        "scope": scope,
        "outcome": result.outcome.value,
        "attempts": result.attempts,
    }


def route_after_principal(state: ProvisioningState, *, deps: NodeDeps) -> str:
    if deps.settings.group_roles or deps.settings.namespace_roles:
        return "assign_roles"
    return "finish"


async def finish_node(state: ProvisioningState) -> dict[str, Any]:
    return {"audit_log": _audit("FINISH", status="PROVISIONED")}
