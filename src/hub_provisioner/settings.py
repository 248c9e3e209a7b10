"""
hub_provisioner.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the orchestrator and CLI.
- Keep propagation delays and the role-assignment retry policy in one place.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hub_provisioner.resource_types import ResourceType


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `HUBPROV_`).

    CLI flags are passed as init kwargs and therefore win over the environment.
    """

    model_config = SettingsConfigDict(env_prefix="HUBPROV_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "hub-provisioner"
    log_level: str = "INFO"

    # Target names. Empty strings are rejected by the CLI before any provider call.
    subscription_name: str = ""
    region: str = ""
    resource_group: str = ""
    namespace: str = ""
    hub: str = ""
    principal_name: str = ""

    # Resource type whose provider-reported locations gate region validation.
    region_resource_type: ResourceType = ResourceType.EVENTHUB_NAMESPACES
    namespace_sku: str = "Standard"

    # Identity / RBAC
    group_roles: list[str] = Field(default_factory=lambda: ["Contributor"])
    namespace_roles: list[str] = Field(
        default_factory=lambda: ["Azure Event Hubs Data Owner"]
    )
    principal_propagation_delay: float = 60.0
    role_retry_delay: float = 60.0
    # Terminate after a role-assignment retry even if the retry succeeded.
    exit_after_role_retry: bool = True

    # Microsoft Graph (service principal creation)
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    graph_scope: str = "https://graph.microsoft.com/.default"
    graph_timeout_seconds: float = 30.0

    # Checkpoint of creation flags, consumed by `teardown`.
    state_file: Path | None = None


# --- Module Notes -----------------------------------------------------------
# Delays default to 60s; tests keep the defaults and inject a recording sleep instead of
# patching this module.
