"""
hub_provisioner.services.orchestration_service

Provisioning lifecycle service (checkpoint owner).

Responsibilities:
- Build the initial graph state from settings and execute the provisioning graph.
- Checkpoint the provisioning record after every node so a failed run can still be torn down.
- Run teardown from a record produced by this or an earlier process.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hub_provisioner.credentials import generate_credential
from hub_provisioner.errors import StateFileConflict
from hub_provisioner.models import (
    CreationFlags,
    Credential,
    ProvisioningRecord,
    ServicePrincipal,
    SubscriptionContext,
)
from hub_provisioner.observability.logging import get_logger
from hub_provisioner.orchestrator.graph import build_graph
from hub_provisioner.orchestrator.nodes import NodeDeps
from hub_provisioner.orchestrator.state import ProvisioningState
from hub_provisioner.providers.base import CloudProvider
from hub_provisioner.retry import Sleep
from hub_provisioner.services.provisioning import resolve_subscription
from hub_provisioner.services.teardown import TeardownReport, teardown
from hub_provisioner.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProvisioningResult:
    record: ProvisioningRecord
    principal: ServicePrincipal | None
    subscription: SubscriptionContext | None
    role_results: list[dict[str, Any]] = field(default_factory=list)
    audit_log: list[dict[str, Any]] = field(default_factory=list)


class OrchestrationService:
    def __init__(
        self,
        *,
        provider: CloudProvider,
        settings: Settings,
        sleep: Sleep = asyncio.sleep,
        credential_factory: Callable[[], Credential] = generate_credential,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._sleep = sleep
        self._credential_factory = credential_factory

    async def provision(
        self, *, run_id: str | None = None, force: bool = False
    ) -> ProvisioningResult:
        """
        Resources recorded as created by an earlier run against the same target stay
        flagged, even though this run finds them already present.
        """

        settings = self._settings
        run_id = run_id or str(uuid.uuid4())
        carried = self._carried_flags(force=force)

        record = ProvisioningRecord(
            run_id=run_id,
            subscription_name=settings.subscription_name,
            region=settings.region,
            resource_group=settings.resource_group,
            namespace=settings.namespace,
            hub=settings.hub,
            principal_name=settings.principal_name,
            flags=carried,
        )
        self._checkpoint(record)

        deps = NodeDeps(
            provider=self._provider,
            settings=settings,
            sleep=self._sleep,
            credential_factory=self._credential_factory,
        )
        graph = build_graph(deps=deps)

        initial_state: ProvisioningState = {
            "run_id": run_id,
            "subscription_name": settings.subscription_name,
            "region": settings.region,
            "resource_group": settings.resource_group,
            "namespace": settings.namespace,
            "hub": settings.hub,
            "principal_name": settings.principal_name,
            "resource_group_created": False,
            "namespace_created": False,
            "hub_created": False,
            "role_results": [],
            "audit_log": [],
        }

        log.info("provision_started", run_id=run_id)
        last_state: ProvisioningState = dict(initial_state)  # type: ignore[assignment]
        try:
            # Stream full state snapshots so creation flags are checkpointed as soon as they flip.
            async for snapshot in graph.astream(initial_state, stream_mode="values"):
                if not isinstance(snapshot, dict):
                    continue
                last_state = snapshot  # type: ignore[assignment]
                record = _record_from_state(record, last_state, carried=carried)
                self._checkpoint(record)
        except Exception:
            log.error("provision_failed", run_id=run_id, flags=record.flags.model_dump())
            raise

        record = record.model_copy(update={"completed": True})
        self._checkpoint(record)
        log.info("provision_completed", run_id=run_id, flags=record.flags.model_dump())

        return ProvisioningResult(
            record=record,
            principal=last_state.get("principal"),
            subscription=last_state.get("subscription"),
            role_results=list(last_state.get("role_results", [])),
            audit_log=list(last_state.get("audit_log", [])),
        )

    async def teardown(self, *, record: ProvisioningRecord) -> TeardownReport:
        if record.subscription_id:
            ctx = SubscriptionContext(
                subscription_id=record.subscription_id,
                display_name=record.subscription_name,
            )
        else:
            ctx = await resolve_subscription(self._provider, name=record.subscription_name)

        report = await teardown(self._provider, ctx, record=record)
        # REMOVED steps are cleared so a repeated teardown only retries what FAILED.
        self._checkpoint(record.model_copy(update={"flags": report.remaining(record.flags)}))
        return report

    def _carried_flags(self, *, force: bool) -> CreationFlags:
        path = self._settings.state_file
        if path is None or not path.is_file():
            return CreationFlags()
        previous = load_record(path)
        if not previous.flags.any_set():
            return CreationFlags()
        if _same_target(previous, self._settings):
            log.info(
                "state_flags_carried_over",
                previous_run_id=previous.run_id,
                flags=previous.flags.model_dump(),
            )
            return previous.flags
        if force:
            log.warning(
                "state_file_overwritten",
                previous_run_id=previous.run_id,
                flags=previous.flags.model_dump(),
            )
            return CreationFlags()
        raise StateFileConflict(str(path), previous.run_id)

    def _checkpoint(self, record: ProvisioningRecord) -> None:
        path = self._settings.state_file
        if path is None:
            return
        write_record(path, record)


def _same_target(record: ProvisioningRecord, settings: Settings) -> bool:
    return (
        record.subscription_name,
        record.resource_group,
        record.namespace,
        record.hub,
    ) == (
        settings.subscription_name,
        settings.resource_group,
        settings.namespace,
        settings.hub,
    )


def _record_from_state(
    record: ProvisioningRecord, state: ProvisioningState, *, carried: CreationFlags
) -> ProvisioningRecord:
    ctx = state.get("subscription")
    principal = state.get("principal")
    return record.model_copy(
        update={
            "subscription_id": ctx.subscription_id if ctx else record.subscription_id,
            "principal_app_id": principal.app_id if principal else record.principal_app_id,
            "flags": carried.merged(
                CreationFlags(
                    resource_group_created=bool(state.get("resource_group_created", False)),
                    namespace_created=bool(state.get("namespace_created", False)),
                    hub_created=bool(state.get("hub_created", False)),
                )
            ),
        }
    )


def write_record(path: Path, record: ProvisioningRecord) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(record.model_dump_json(indent=2), encoding="utf-8")


def load_record(path: Path) -> ProvisioningRecord:
    return ProvisioningRecord.model_validate_json(path.read_text(encoding="utf-8"))


# --- Module Notes -----------------------------------------------------------
# The checkpoint is the only durable artifact of a run. Fatal errors propagate to the caller
# without rollback; `teardown` with the same state file removes what was created so far.
