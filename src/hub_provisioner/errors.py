"""
hub_provisioner.errors

Error taxonomy and process exit codes.

Responsibilities:
- Distinguish the non-fatal "not found" signal from fatal provisioning errors.
- Attach a stable exit code to every fatal error so the top-level caller decides
  whether to exit or propagate.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIGURATION_INVALID = 2
    DEPENDENCY_UNAVAILABLE = 3
    PROPAGATION_TIMEOUT = 4
    TEARDOWN_INCOMPLETE = 5


class ResourceNotFound(Exception):
    """
    Raised by providers when a lookup by name finds nothing.
    Callers treat this as "absent", never as a failure.
    """

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} '{name}' not found")
        self.kind = kind
        self.name = name


class ProvisioningError(Exception):
    exit_code: ExitCode = ExitCode.GENERAL_ERROR


class ConfigurationInvalid(ProvisioningError):
    exit_code = ExitCode.CONFIGURATION_INVALID


class InvalidPrincipalName(ConfigurationInvalid):
    def __init__(self, name: str) -> None:
        super().__init__(
            f"Service principal name '{name}' must be non-empty and contain no whitespace"
        )
        self.name = name


class UnsupportedRegion(ConfigurationInvalid):
    def __init__(self, region: str, resource_type: str, valid_regions: list[str]) -> None:
        self.region = region
        self.resource_type = resource_type
        self.valid_regions = sorted(valid_regions)
        super().__init__(
            f"Region '{region}' does not support {resource_type}. "
            f"Valid regions: {', '.join(self.valid_regions)}"
        )


class StateFileConflict(ConfigurationInvalid):
    def __init__(self, path: str, run_id: str) -> None:
        super().__init__(
            f"State file '{path}' still records resources created by run '{run_id}' "
            "for a different target; run teardown first or pass --force"
        )
        self.path = path
        self.run_id = run_id


class DependencyUnavailable(ProvisioningError):
    exit_code = ExitCode.DEPENDENCY_UNAVAILABLE


class SubscriptionNotFound(DependencyUnavailable):
    def __init__(self, name: str) -> None:
        super().__init__(f"Subscription '{name}' not found")
        self.name = name


class ResourceCreationFailed(DependencyUnavailable):
    def __init__(self, kind: str, name: str, reason: str | None = None) -> None:
        msg = f"Failed to create {kind} '{name}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.kind = kind
        self.name = name


class PrincipalCreationFailed(DependencyUnavailable):
    def __init__(self, display_name: str, reason: str | None = None) -> None:
        msg = f"Failed to create service principal '{display_name}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.display_name = display_name


class PropagationTimeout(ProvisioningError):
    """
    Role assignment did not succeed on the first attempt.

    `retry_succeeded` records whether the single retry went through; the run is
    terminated either way unless the retry policy says otherwise.
    """

    exit_code = ExitCode.PROPAGATION_TIMEOUT

    def __init__(self, role_name: str, scope: str, *, retry_succeeded: bool) -> None:
        outcome = "succeeded" if retry_succeeded else "failed"
        super().__init__(
            f"Role assignment '{role_name}' on '{scope}' failed on first attempt; "
            f"retry {outcome}"
        )
        self.role_name = role_name
        self.scope = scope
        self.retry_succeeded = retry_succeeded


# --- Module Notes -----------------------------------------------------------
# Teardown failures are deliberately not exceptions: they are collected into a
# `TeardownReport` (see `services.teardown`) and mapped to TEARDOWN_INCOMPLETE by the CLI.
