import pytest
from unittest.mock import MagicMock

from snapops.core.config import Settings
from snapops.core.exceptions import NoValidContexts, AuthenticationFailed
from snapops.schemas.snapshot import (
    AccountContext, SnapshotStatus, NamingPolicy, LocatorPolicy, NOT_APPLICABLE
)
from snapops.services.snapshot_service import SnapshotRunService

from conftest import SUB_A, SUB_B, SUB_C, create_mock_vm, create_mock_azure_client


@pytest.fixture
def config():
    return Settings(_env_file=None)


def _service(client, config, **kwargs):
    return SnapshotRunService(client, config=config, **kwargs)


def test_single_vm_single_os_disk_success(single_vm_client, config):
    result = _service(single_vm_client, config).run(["web-vm-01"], "INC123456")

    assert len(result.entries) == 1
    entry = result.entries[0]
    assert entry.status is SnapshotStatus.SUCCESS
    assert entry.snapshot_name == "web-vm-01_web-vm-01-osdisk_INC123456"
    assert entry.disk_name == "web-vm-01-osdisk"
    assert entry.account_context_id == SUB_A
    assert entry.error_message is None
    single_vm_client.authenticate.assert_called_once()
    single_vm_client.create_snapshot.assert_called_once()
    kwargs = single_vm_client.create_snapshot.call_args.kwargs
    assert kwargs["resource_group_name"] == "rg-web"
    assert kwargs["location"] == "eastus"
    assert kwargs["tags"]["TicketReference"] == "INC123456"


def test_vm_absent_everywhere_yields_one_not_found(config):
    client = create_mock_azure_client({SUB_A: {}, SUB_B: {}})
    result = _service(client, config).run(["ghost-vm"], "INC1")

    assert len(result.entries) == 1
    entry = result.entries[0]
    assert entry.status is SnapshotStatus.NOT_FOUND
    assert entry.account_context_id == NOT_APPLICABLE
    assert entry.vm_identifier == "ghost-vm"
    assert entry.disk_name == NOT_APPLICABLE
    assert entry.snapshot_name == NOT_APPLICABLE
    client.create_snapshot.assert_not_called()


def test_entry_count_is_disks_for_found_vms_plus_one_per_missing(config):
    inventory = {
        SUB_A: {"app": create_mock_vm("app", SUB_A, data_disks=["app-d0", "app-d1"])},
        SUB_B: {"db": create_mock_vm("db", SUB_B, resource_group="rg-db")},
    }
    client = create_mock_azure_client(inventory)
    vm_names = ["app", "ghost", "db", "app"]
    result = _service(client, config).run(vm_names, "CHG7")

    # duplicates are processed independently
    assert len(result.entries) == 3 + 1 + 1 + 3
    assert result.summary.total == len(result.entries)
    assert result.summary.success == 7
    assert result.summary.not_found == 1
    assert [e.vm_identifier for e in result.entries] == ["app"] * 3 + ["ghost", "db"] + ["app"] * 3


def test_first_match_ignores_later_subscriptions(config):
    inventory = {
        SUB_A: {},
        SUB_B: {"shared": create_mock_vm("shared", SUB_B)},
        SUB_C: {"shared": create_mock_vm("shared", SUB_C)},
    }
    client = create_mock_azure_client(inventory)
    result = _service(client, config, locator_policy=LocatorPolicy.FIRST_MATCH).run(["shared"], "INC1")

    assert len(result.entries) == 1
    assert result.entries[0].account_context_id == SUB_B
    assert not any(e.account_context_id == SUB_C for e in result.entries)


def test_exhaustive_processes_every_subscription_hit(config):
    inventory = {
        SUB_A: {"split": create_mock_vm("split", SUB_A, data_disks=["split-d0"])},
        SUB_B: {},
        SUB_C: {"split": create_mock_vm("split", SUB_C)},
    }
    client = create_mock_azure_client(inventory)
    result = _service(client, config, locator_policy=LocatorPolicy.EXHAUSTIVE).run(["split"], "INC1")

    assert [e.account_context_id for e in result.entries] == [SUB_A, SUB_A, SUB_C]
    assert all(e.status is SnapshotStatus.SUCCESS for e in result.entries)


def test_failed_disk_does_not_stop_the_run(config):
    inventory = {SUB_A: {
        "app": create_mock_vm("app", SUB_A, data_disks=["app-d0"]),
        "web": create_mock_vm("web", SUB_A),
    }}
    client = create_mock_azure_client(
        inventory, failing_snapshots={"app_app-osdisk_INC1": "The client does not have authorization"}
    )
    result = _service(client, config).run(["app", "web"], "INC1")

    statuses = [(e.disk_name, e.status) for e in result.entries]
    assert statuses == [
        ("app-osdisk", SnapshotStatus.FAILED),
        ("app-d0", SnapshotStatus.SUCCESS),
        ("web-osdisk", SnapshotStatus.SUCCESS),
    ]
    assert result.entries[0].error_message == "The client does not have authorization"
    assert result.entries[0].snapshot_name == "app_app-osdisk_INC1"
    assert result.summary.failed == 1


def test_unavailable_subscription_is_skipped(config):
    inventory = {SUB_A: {}, SUB_B: {"app": create_mock_vm("app", SUB_B)}}
    client = create_mock_azure_client(inventory, unavailable={SUB_A})
    result = _service(client, config).run(["app"], "INC1")

    assert len(result.entries) == 1
    assert result.entries[0].status is SnapshotStatus.SUCCESS


def test_all_subscriptions_unavailable_is_not_found(config):
    client = create_mock_azure_client({SUB_A: {}, SUB_B: {}}, unavailable={SUB_A, SUB_B})
    result = _service(client, config).run(["app"], "INC1")
    assert [e.status for e in result.entries] == [SnapshotStatus.NOT_FOUND]


def test_blank_resource_group_is_recorded_as_skipped(config):
    inventory = {SUB_A: {"orphan": create_mock_vm("orphan", SUB_A, resource_group=None)}}
    client = create_mock_azure_client(inventory)
    result = _service(client, config).run(["orphan"], "INC1")

    assert len(result.entries) == 1
    assert result.entries[0].status is SnapshotStatus.SKIPPED
    assert result.entries[0].account_context_id == SUB_A
    assert result.summary.skipped == 1
    client.create_snapshot.assert_not_called()


def test_vm_without_disks_is_recorded_as_skipped(config):
    inventory = {SUB_A: {"bare": create_mock_vm("bare", SUB_A, os_disk=None)}}
    client = create_mock_azure_client(inventory)
    result = _service(client, config).run(["bare"], "INC1")
    assert [e.status for e in result.entries] == [SnapshotStatus.SKIPPED]


def test_base_only_policy_and_target_group_override(config):
    client = create_mock_azure_client({SUB_A: {"web": create_mock_vm("web", SUB_A)}})
    service = _service(client, config, naming_policy=NamingPolicy.BASE_ONLY,
                       target_resource_group="rg-snapshots", max_length=20)
    result = service.run(["web"], "INC123456")

    assert result.entries[0].snapshot_name == "web-osdisk_INC123456"
    assert client.create_snapshot.call_args.kwargs["resource_group_name"] == "rg-snapshots"


def test_long_ticket_over_limit_is_still_attempted(config, caplog):
    client = create_mock_azure_client({SUB_A: {"web": create_mock_vm("web", SUB_A)}})
    ticket = "T" * 90
    result = _service(client, config).run(["web"], ticket)

    assert len(result.entries[0].snapshot_name) > 82
    assert "over the configured maximum" in caplog.text
    client.create_snapshot.assert_called_once()


def test_blank_vm_names_are_ignored(config, single_vm_client):
    result = _service(single_vm_client, config).run(["  web-vm-01  ", "", "   "], "INC1")
    assert [e.vm_identifier for e in result.entries] == ["web-vm-01"]


def test_precomputed_contexts_skip_authentication(single_vm_client, config):
    _service(single_vm_client, config).run(["web-vm-01"], "INC1", contexts=[AccountContext(id=SUB_A)])
    single_vm_client.authenticate.assert_not_called()
    single_vm_client.list_subscriptions.assert_not_called()


def test_no_valid_subscriptions_aborts_before_any_vm(config):
    client = create_mock_azure_client({}, subscription_ids=["bogus"])
    with pytest.raises(NoValidContexts):
        _service(client, config).run(["web"], "INC1")
    client.get_vm.assert_not_called()


def test_authentication_failure_aborts(config):
    client = MagicMock()
    client.authenticate.side_effect = AuthenticationFailed("no credential")
    with pytest.raises(AuthenticationFailed):
        _service(client, config).run(["web"], "INC1")
    client.list_subscriptions.assert_not_called()


def test_settings_drive_default_policies():
    config = Settings(_env_file=None, SNAPSHOT_NAMING_POLICY="base_only",
                      VM_LOCATOR_POLICY="exhaustive", SNAPSHOT_NAME_MAX_LENGTH=50)
    service = SnapshotRunService(MagicMock(), config=config)
    assert service.naming_policy is NamingPolicy.BASE_ONLY
    assert service.locator_policy is LocatorPolicy.EXHAUSTIVE
    assert service.max_length == 50


@pytest.mark.parametrize("max_length", [0, -5])
def test_max_length_below_one_is_rejected(config, max_length):
    with pytest.raises(ValueError):
        SnapshotRunService(MagicMock(), config=config, naming_policy=NamingPolicy.BASE_ONLY,
                           max_length=max_length)
