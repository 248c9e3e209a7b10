"""
tests.test_cli

Command-line surface: exit codes, stdout JSON, and state-file handoff between commands.
"""

from __future__ import annotations

import json

import pytest

from hub_provisioner.cli import main
from hub_provisioner.errors import ExitCode
from hub_provisioner.services.orchestration_service import load_record


def _provision_argv(state_file, *extra: str) -> list[str]:
    return [
        "provision",
        "--subscription",
        "Test Subscription",
        "--region",
        "eastus",
        "--resource-group",
        "rg-cli",
        "--namespace",
        "ns-cli",
        "--hub",
        "hub-cli",
        "--principal-name",
        "sp-cli",
        "--group-role",
        "Contributor",
        "--namespace-role",
        "Azure Event Hubs Data Owner",
        "--state-file",
        str(state_file),
        *extra,
    ]


@pytest.fixture
def run(provider, sleeps):
    def _run(argv: list[str]) -> int:
        return main(argv, provider_factory=lambda _settings: provider, sleep=sleeps)

    return _run


def test_provision_success_prints_result_without_secret(run, provider, tmp_path, capsys) -> None:
    state_file = tmp_path / "state.json"

    code = run(_provision_argv(state_file))

    assert code == ExitCode.SUCCESS
    out = json.loads(capsys.readouterr().out)
    assert out["subscription_id"] == "00000000-0000-0000-0000-000000000001"
    assert out["tenant_id"] == "tenant-1"
    assert out["principal"]["app_id"] == "app-1"
    assert "secret" not in out["principal"]
    assert out["principal"]["credential_end"].startswith("2099-12-31T23:59:59")
    assert len(out["role_assignments"]) == 2
    assert provider.closed
    assert load_record(state_file).completed


def test_emit_credentials_includes_secret(run, provider, tmp_path, capsys) -> None:
    code = run(_provision_argv(tmp_path / "state.json", "--emit-credentials"))

    assert code == ExitCode.SUCCESS
    out = json.loads(capsys.readouterr().out)
    assert out["principal"]["secret"] == provider.principals[0].credential.secret


def test_missing_inputs_is_configuration_error(run, provider) -> None:
    code = run(["provision", "--subscription", "Test Subscription"])

    assert code == ExitCode.CONFIGURATION_INVALID
    assert provider.calls == []


def test_unsupported_region_exit_code(run, provider, tmp_path) -> None:
    argv = _provision_argv(tmp_path / "state.json")
    argv[argv.index("eastus")] = "antarctica"

    assert run(argv) == ExitCode.CONFIGURATION_INVALID
    assert provider.closed


def test_unknown_subscription_exit_code(run, tmp_path) -> None:
    argv = _provision_argv(tmp_path / "state.json")
    argv[argv.index("Test Subscription")] = "Other Subscription"

    assert run(argv) == ExitCode.DEPENDENCY_UNAVAILABLE


def test_role_retry_exit_code(run, provider, tmp_path) -> None:
    provider.role_failures_remaining = 1

    assert run(_provision_argv(tmp_path / "state.json")) == ExitCode.PROPAGATION_TIMEOUT


def test_role_retry_continue_flag(run, provider, tmp_path) -> None:
    provider.role_failures_remaining = 1

    code = run(_provision_argv(tmp_path / "state.json", "--continue-after-role-retry"))

    assert code == ExitCode.SUCCESS


def test_teardown_reads_state_file(run, provider, tmp_path, capsys) -> None:
    state_file = tmp_path / "state.json"
    provider.create_returns_none.add("hub")
    assert run(_provision_argv(state_file)) == ExitCode.DEPENDENCY_UNAVAILABLE
    capsys.readouterr()
    provider.calls.clear()

    code = run(["teardown", "--state-file", str(state_file)])

    assert code == ExitCode.SUCCESS
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is True
    assert [o["status"] for o in out["outcomes"]] == ["SKIPPED", "REMOVED", "REMOVED"]
    assert provider.call_names() == ["delete_namespace", "delete_resource_group"]


def test_teardown_failure_exit_code(run, provider, tmp_path, capsys) -> None:
    state_file = tmp_path / "state.json"
    assert run(_provision_argv(state_file)) == ExitCode.SUCCESS
    capsys.readouterr()
    provider.delete_failures.add("namespace")

    code = run(["teardown", "--state-file", str(state_file)])

    assert code == ExitCode.TEARDOWN_INCOMPLETE
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
    # Only the failed step stays flagged for a re-run.
    flags = load_record(state_file).flags
    assert flags.namespace_created
    assert not flags.hub_created
    assert not flags.resource_group_created


def test_teardown_without_state_file(run, tmp_path) -> None:
    code = run(["teardown", "--state-file", str(tmp_path / "missing.json")])

    assert code == ExitCode.CONFIGURATION_INVALID


def test_state_file_of_other_target_needs_force(run, provider, tmp_path) -> None:
    state_file = tmp_path / "state.json"
    assert run(_provision_argv(state_file)) == ExitCode.SUCCESS
    argv = _provision_argv(state_file)
    argv[argv.index("hub-cli")] = "hub-other"

    assert run(argv) == ExitCode.CONFIGURATION_INVALID
    assert load_record(state_file).hub == "hub-cli"

    assert run([*argv, "--force"]) == ExitCode.SUCCESS
    assert load_record(state_file).hub == "hub-other"


def test_unexpected_provider_error_is_general_error(run, provider, tmp_path, capsys) -> None:
    async def broken_lookup(ctx, name):
        raise RuntimeError("503 Service Unavailable")

    provider.find_resource_group = broken_lookup

    code = run(_provision_argv(tmp_path / "state.json"))

    assert code == ExitCode.GENERAL_ERROR
    assert capsys.readouterr().out == ""
    assert provider.closed


def test_corrupt_state_file_is_general_error(run, provider, tmp_path) -> None:
    state_file = tmp_path / "state.json"
    state_file.write_text("{not json", encoding="utf-8")

    code = run(["teardown", "--state-file", str(state_file)])

    assert code == ExitCode.GENERAL_ERROR
    assert provider.calls == []
