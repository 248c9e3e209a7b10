from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from hub_provisioner.orchestrator.nodes import (
    NodeDeps,
    assign_roles_node,
    create_principal_node,
    ensure_hub_node,
    ensure_namespace_node,
    ensure_resource_group_node,
    finish_node,
    resolve_subscription_node,
    route_after_principal,
    validate_node,
)
from hub_provisioner.orchestrator.state import ProvisioningState

NodeFn = Callable[..., Awaitable[dict[str, Any]]]


def build_graph(*, deps: NodeDeps):
    """
    Returns a compiled LangGraph runnable.

    resolve_subscription -> validate -> ensure_resource_group -> ensure_namespace
    -> ensure_hub -> create_principal -> [assign_roles] -> finish
    """

    try:
        from langgraph.graph import END, StateGraph  # type: ignore[import-not-found]
    except Exception as e:  # pragma: no cover
        raise RuntimeError(
            "LangGraph is not available. Install the package dependencies (see pyproject.toml)."
        ) from e

    graph = StateGraph(ProvisioningState)

    graph.add_node("resolve_subscription", _bind(resolve_subscription_node, deps))
    graph.add_node("validate", _bind(validate_node, deps))
    graph.add_node("ensure_resource_group", _bind(ensure_resource_group_node, deps))
    graph.add_node("ensure_namespace", _bind(ensure_namespace_node, deps))
    graph.add_node("ensure_hub", _bind(ensure_hub_node, deps))
    graph.add_node("create_principal", _bind(create_principal_node, deps))
    graph.add_node("assign_roles", _bind(assign_roles_node, deps))
    graph.add_node("finish", finish_node)

    graph.set_entry_point("resolve_subscription")

    graph.add_edge("resolve_subscription", "validate")
    graph.add_edge("validate", "ensure_resource_group")
    graph.add_edge("ensure_resource_group", "ensure_namespace")
    graph.add_edge("ensure_namespace", "ensure_hub")
    graph.add_edge("ensure_hub", "create_principal")

    graph.add_conditional_edges(
        "create_principal",
        _bind_route(route_after_principal, deps),
        {"assign_roles": "assign_roles", "finish": "finish"},
    )
    graph.add_edge("assign_roles", "finish")
    graph.add_edge("finish", END)

    return graph.compile()


def _bind(
    fn: NodeFn, deps: NodeDeps
) -> Callable[[ProvisioningState], Awaitable[dict[str, Any]]]:
    async def _wrapped(state: ProvisioningState) -> dict[str, Any]:
        return await fn(state, deps=deps)

    return _wrapped


def _bind_route(
    fn: Callable[..., str], deps: NodeDeps
) -> Callable[[ProvisioningState], str]:
    def _wrapped(state: ProvisioningState) -> str:
        return fn(state, deps=deps)

    return _wrapped
