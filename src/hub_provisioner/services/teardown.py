"""
hub_provisioner.services.teardown

Best-effort teardown of resources created by a provisioning run.

Responsibilities:
- Remove hub -> namespace -> resource group, each only if this run created it.
- Collect a per-resource outcome instead of aborting on the first failure.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from hub_provisioner.models import CreationFlags, ProvisioningRecord, SubscriptionContext
from hub_provisioner.observability.logging import get_logger
from hub_provisioner.providers.base import CloudProvider

log = get_logger(__name__)

_FLAG_BY_KIND = {
    "hub": "hub_created",
    "namespace": "namespace_created",
    "resource group": "resource_group_created",
}


class TeardownStatus(enum.StrEnum):
    REMOVED = "REMOVED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class TeardownOutcome:
    kind: str
    name: str
    status: TeardownStatus
    error: str | None = None


@dataclass(slots=True)
class TeardownReport:
    outcomes: list[TeardownOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[TeardownOutcome]:
        return [o for o in self.outcomes if o.status is TeardownStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return ", ".join(f"{o.kind} '{o.name}': {o.status.value}" for o in self.outcomes)

    def remaining(self, flags: CreationFlags) -> CreationFlags:
        """
        Flags still pointing at live resources: everything REMOVED is cleared, while
        FAILED steps keep their flag so a later teardown retries them.
        """

        removed = {
            _FLAG_BY_KIND[o.kind]: False
            for o in self.outcomes
            if o.status is TeardownStatus.REMOVED
        }
        return flags.model_copy(update=removed)


async def teardown(
    provider: CloudProvider,
    ctx: SubscriptionContext,
    *,
    record: ProvisioningRecord,
) -> TeardownReport:
    flags = record.flags
    steps: list[tuple[str, str, bool, Callable[[], Awaitable[None]]]] = [
        (
            "hub",
            record.hub,
            flags.hub_created,
            lambda: provider.delete_hub(ctx, record.resource_group, record.namespace, record.hub),
        ),
        (
            "namespace",
            record.namespace,
            flags.namespace_created,
            lambda: provider.delete_namespace(ctx, record.resource_group, record.namespace),
        ),
        (
            "resource group",
            record.resource_group,
            flags.resource_group_created,
            lambda: provider.delete_resource_group(ctx, record.resource_group),
        ),
    ]

    report = TeardownReport()
    for kind, name, created, remove in steps:
        if not created:
            # Never delete something this run did not create.
            report.outcomes.append(TeardownOutcome(kind, name, TeardownStatus.SKIPPED))
            continue
        try:
            await remove()
        except Exception as e:
            log.warning(
                "teardown_failed_manual_cleanup_required", kind=kind, name=name, error=str(e)
            )
            report.outcomes.append(TeardownOutcome(kind, name, TeardownStatus.FAILED, str(e)))
            continue
        log.info("teardown_removed", kind=kind, name=name)
        report.outcomes.append(TeardownOutcome(kind, name, TeardownStatus.REMOVED))

    log.info("teardown_summary", ok=report.ok, summary=report.summary())
    return report


# --- Module Notes -----------------------------------------------------------
# Provisioning is fail-fast; teardown is the opposite. A failed removal is reported and the
# next step still runs, so an operator only has to clean up what is listed as FAILED.
