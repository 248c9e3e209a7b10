"""
tests.test_resource_types

Resource type serialization helpers.
"""

from __future__ import annotations

from hub_provisioner.resource_types import (
    ResourceType,
    parse_resource_type,
    to_serialized_value,
)


def test_container_registry_value() -> None:
    rt = ResourceType.CONTAINER_REGISTRY_REGISTRIES
    assert to_serialized_value(rt) == "Microsoft.ContainerRegistry/registries"
    assert parse_resource_type("Microsoft.ContainerRegistry/registries") is rt


def test_none_and_unknown() -> None:
    assert to_serialized_value(None) is None
    assert parse_resource_type(None) is None
    assert parse_resource_type("Microsoft.Unknown/things") is None
    # Wire values are case-sensitive.
    assert parse_resource_type("microsoft.containerregistry/registries") is None


def test_namespace_and_type_name() -> None:
    rt = ResourceType.EVENTHUB_NAMESPACES
    assert rt.namespace == "Microsoft.EventHub"
    assert rt.type_name == "namespaces"
