"""
tests.test_teardown

Best-effort teardown ordering and flag discipline.
"""

from __future__ import annotations

import pytest

from hub_provisioner.models import CreationFlags, ProvisioningRecord
from hub_provisioner.services.teardown import TeardownStatus, teardown


def _record(**flags: bool) -> ProvisioningRecord:
    return ProvisioningRecord(
        run_id="run-1",
        subscription_id="sub",
        subscription_name="Test Subscription",
        region="eastus",
        resource_group="rg",
        namespace="ns",
        hub="hub",
        principal_name="sp",
        flags=CreationFlags(**flags),
    )


@pytest.mark.asyncio
async def test_no_flags_no_removals(provider, ctx) -> None:
    report = await teardown(provider, ctx, record=_record())

    assert provider.calls == []
    assert report.ok
    assert [o.status for o in report.outcomes] == [TeardownStatus.SKIPPED] * 3


@pytest.mark.asyncio
async def test_reverse_dependency_order(provider, ctx) -> None:
    record = _record(resource_group_created=True, namespace_created=True, hub_created=True)

    report = await teardown(provider, ctx, record=record)

    assert provider.call_names() == ["delete_hub", "delete_namespace", "delete_resource_group"]
    assert all(o.status is TeardownStatus.REMOVED for o in report.outcomes)


@pytest.mark.asyncio
async def test_only_created_resources_are_removed(provider, ctx) -> None:
    # Pre-existing group and namespace; only the hub was created by the run.
    report = await teardown(provider, ctx, record=_record(hub_created=True))

    assert provider.call_names() == ["delete_hub"]
    assert [o.status for o in report.outcomes] == [
        TeardownStatus.REMOVED,
        TeardownStatus.SKIPPED,
        TeardownStatus.SKIPPED,
    ]


@pytest.mark.asyncio
async def test_namespace_failure_still_removes_resource_group(provider, ctx) -> None:
    provider.delete_failures.add("namespace")
    record = _record(resource_group_created=True, namespace_created=True, hub_created=True)

    report = await teardown(provider, ctx, record=record)

    assert provider.call_names() == ["delete_hub", "delete_namespace", "delete_resource_group"]
    assert not report.ok
    assert [(o.kind, o.status) for o in report.failed] == [("namespace", TeardownStatus.FAILED)]
    assert report.outcomes[-1].status is TeardownStatus.REMOVED
    assert "namespace 'ns': FAILED" in report.summary()


@pytest.mark.asyncio
async def test_every_step_failing_still_attempts_all(provider, ctx) -> None:
    provider.delete_failures.update({"hub", "namespace", "resource_group"})
    record = _record(resource_group_created=True, namespace_created=True, hub_created=True)

    report = await teardown(provider, ctx, record=record)

    assert len(provider.calls) == 3
    assert len(report.failed) == 3
