"""
hub_provisioner.cli

Command-line entrypoint (`hub-provisioner` / `python -m hub_provisioner`).

Responsibilities:
- Parse flags and merge them over env-driven settings.
- Run provision/teardown through the orchestration service.
- Map error types to process exit codes (the only place that decides to exit).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hub_provisioner import __version__
from hub_provisioner.errors import ExitCode, ProvisioningError
from hub_provisioner.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
)
from hub_provisioner.providers.base import CloudProvider
from hub_provisioner.retry import Sleep
from hub_provisioner.services.orchestration_service import (
    OrchestrationService,
    ProvisioningResult,
    load_record,
)
from hub_provisioner.services.teardown import TeardownReport
from hub_provisioner.settings import Settings

ProviderFactory = Callable[[Settings], CloudProvider]

log = get_logger(__name__)

_REQUIRED_FOR_PROVISION = (
    "subscription_name",
    "region",
    "resource_group",
    "namespace",
    "hub",
    "principal_name",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hub-provisioner",
        description="Provision and tear down an Event Hubs namespace, hub and service principal.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Log level (default: HUBPROV_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("provision", help="Ensure resources, create a principal, assign roles")
    p.add_argument("--subscription", dest="subscription_name", help="Subscription display name")
    p.add_argument("--region", help="Target region, e.g. eastus")
    p.add_argument("--resource-group", dest="resource_group")
    p.add_argument("--namespace")
    p.add_argument("--hub")
    p.add_argument("--principal-name", dest="principal_name")
    p.add_argument(
        "--group-role",
        dest="group_roles",
        action="append",
        help="Role assigned at resource group scope (repeatable)",
    )
    p.add_argument(
        "--namespace-role",
        dest="namespace_roles",
        action="append",
        help="Role assigned at namespace scope (repeatable)",
    )
    p.add_argument("--state-file", dest="state_file", type=Path)
    p.add_argument(
        "--continue-after-role-retry",
        dest="continue_after_role_retry",
        action="store_true",
        help="Do not terminate when a role assignment only succeeded on retry",
    )
    p.add_argument(
        "--emit-credentials",
        action="store_true",
        help="Include the principal secret in the JSON written to stdout",
    )
    p.add_argument(
        "--force",
        action="store_true",
        help="Overwrite a state file that still records resources of a different target",
    )

    t = sub.add_parser("teardown", help="Remove resources recorded as created in a state file")
    t.add_argument("--state-file", dest="state_file", type=Path)
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    for key in (
        *_REQUIRED_FOR_PROVISION,
        "group_roles",
        "namespace_roles",
        "state_file",
        "log_level",
    ):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value
    if getattr(args, "continue_after_role_retry", False):
        overrides["exit_after_role_retry"] = False
    return Settings(**overrides)


def _default_provider_factory(settings: Settings) -> CloudProvider:
    # Deferred: the Azure SDKs are only imported when talking to Azure.
    from hub_provisioner.providers.azure import AzureProvider

    return AzureProvider.from_settings(settings)


def main(
    argv: Sequence[str] | None = None,
    *,
    provider_factory: ProviderFactory | None = None,
    sleep: Sleep = asyncio.sleep,
) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except ValidationError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return int(ExitCode.CONFIGURATION_INVALID)

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    factory = provider_factory or _default_provider_factory
    if args.command == "provision":
        missing = [k for k in _REQUIRED_FOR_PROVISION if not getattr(settings, k)]
        if missing:
            log.error("missing_configuration", missing=missing)
            return int(ExitCode.CONFIGURATION_INVALID)
        run = _provision(
            settings,
            emit_credentials=args.emit_credentials,
            force=args.force,
            sleep=sleep,
            provider_factory=factory,
        )
    else:
        state_file = settings.state_file
        if state_file is None or not state_file.is_file():
            log.error("state_file_missing", state_file=str(state_file))
            return int(ExitCode.CONFIGURATION_INVALID)
        run = _teardown(settings, state_file=state_file, sleep=sleep, provider_factory=factory)

    try:
        return asyncio.run(run)
    finally:
        clear_run_context()


async def _provision(
    settings: Settings,
    *,
    emit_credentials: bool,
    force: bool,
    sleep: Sleep,
    provider_factory: ProviderFactory,
) -> int:
    provider = provider_factory(settings)
    try:
        service = OrchestrationService(provider=provider, settings=settings, sleep=sleep)
        bind_run_context(subscription=settings.subscription_name, command="provision")
        try:
            result = await service.provision(force=force)
        except ProvisioningError as e:
            log.error("provision_aborted", error=str(e), exit_code=int(e.exit_code))
            return int(e.exit_code)
        except Exception:
            log.exception("provision_crashed", exit_code=int(ExitCode.GENERAL_ERROR))
            return int(ExitCode.GENERAL_ERROR)
        print(json.dumps(_provision_output(result, emit_credentials=emit_credentials), indent=2))
        return int(ExitCode.SUCCESS)
    finally:
        await provider.aclose()


async def _teardown(
    settings: Settings,
    *,
    state_file: Path,
    sleep: Sleep,
    provider_factory: ProviderFactory,
) -> int:
    try:
        record = load_record(state_file)
    except ValidationError:
        log.exception("state_file_unreadable", state_file=str(state_file))
        return int(ExitCode.GENERAL_ERROR)

    provider = provider_factory(settings)
    try:
        service = OrchestrationService(provider=provider, settings=settings, sleep=sleep)
        bind_run_context(run_id=record.run_id, command="teardown")
        try:
            report = await service.teardown(record=record)
        except ProvisioningError as e:
            log.error("teardown_aborted", error=str(e), exit_code=int(e.exit_code))
            return int(e.exit_code)
        except Exception:
            log.exception("teardown_crashed", exit_code=int(ExitCode.GENERAL_ERROR))
            return int(ExitCode.GENERAL_ERROR)
        print(json.dumps(_teardown_output(report), indent=2))
        if not report.ok:
            return int(ExitCode.TEARDOWN_INCOMPLETE)
        return int(ExitCode.SUCCESS)
    finally:
        await provider.aclose()


def _provision_output(result: ProvisioningResult, *, emit_credentials: bool) -> dict[str, Any]:
    out: dict[str, Any] = {
        "run_id": result.record.run_id,
        "subscription_id": result.record.subscription_id,
        "tenant_id": result.subscription.tenant_id if result.subscription else None,
        "region": result.record.region,
        "resource_group": result.record.resource_group,
        "namespace": result.record.namespace,
        "hub": result.record.hub,
        "flags": result.record.flags.model_dump(),
        "role_assignments": result.role_results,
    }
    principal = result.principal
    if principal is not None:
        out["principal"] = {
            "app_id": principal.app_id,
            "object_id": principal.object_id,
            "display_name": principal.display_name,
            "credential_end": principal.credential.end.isoformat(),
        }
        if emit_credentials:
            out["principal"]["secret"] = principal.credential.secret
    return out


def _teardown_output(report: TeardownReport) -> dict[str, Any]:
    return {
        "ok": report.ok,
        "outcomes": [
            {"kind": o.kind, "name": o.name, "status": o.status.value, "error": o.error}
            for o in report.outcomes
        ],
    }


# --- Module Notes -----------------------------------------------------------
# stdout carries a single JSON document per command; logs go to stderr (see observability).
