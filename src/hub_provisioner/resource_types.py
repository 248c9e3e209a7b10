"""
hub_provisioner.resource_types

Cloud resource type identifiers.

Responsibilities:
- Map provider resource type strings to symbolic enum values.
- Serialize/parse helpers that tolerate `None` and unknown strings.
"""

from __future__ import annotations

import enum


class ResourceType(enum.StrEnum):
    # Values are provider wire identifiers; treat as stable API contract.
    CONTAINER_REGISTRY_REGISTRIES = "Microsoft.ContainerRegistry/registries"
    EVENTHUB_NAMESPACES = "Microsoft.EventHub/namespaces"
    RESOURCE_GROUPS = "Microsoft.Resources/resourceGroups"

    @property
    def namespace(self) -> str:
        # "Microsoft.EventHub/namespaces" -> "Microsoft.EventHub"
        return self.value.split("/", 1)[0]

    @property
    def type_name(self) -> str:
        # "Microsoft.EventHub/namespaces" -> "namespaces"
        return self.value.split("/", 1)[1]


def to_serialized_value(value: ResourceType | None) -> str | None:
    if value is None:
        return None
    return ResourceType(value).value


def parse_resource_type(value: str | None) -> ResourceType | None:
    """
    Returns the matching enum member, or None for `None` and unknown strings.

    Matching is exact (case-sensitive), as on the wire.
    """

    if value is None:
        return None
    try:
        return ResourceType(value)
    except ValueError:
        return None


# --- Module Notes -----------------------------------------------------------
# `ResourceType.namespace`/`type_name` feed both the provider registration lookup
# (supported regions) and ARM scope construction for role assignments.
