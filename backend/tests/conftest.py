"""
Shared fixtures: a mocked Azure client driven by an in-memory inventory.

The inventory maps subscription id -> {vm name -> mock VM}. The mock keeps
an active subscription exactly like AzureClient does, so lookups and
snapshot calls only see the subscription last switched into.
"""
import pytest
from unittest.mock import Mock, MagicMock

from azure.core.exceptions import HttpResponseError

from snapops.core.exceptions import ContextActivationError

SUB_A = "11111111-1111-1111-1111-111111111111"
SUB_B = "22222222-2222-2222-2222-222222222222"
SUB_C = "33333333-3333-3333-3333-333333333333"


def create_mock_disk(name, subscription_id=SUB_A, resource_group="rg-web"):
    disk = Mock()
    disk.name = name
    disk.managed_disk = Mock()
    disk.managed_disk.id = (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/Microsoft.Compute/disks/{name}"
    )
    return disk


def create_mock_vm(name, subscription_id=SUB_A, resource_group="rg-web", location="eastus",
                   os_disk="default", data_disks=()):
    """Mock Azure VM. os_disk='default' gives '<name>-osdisk', None gives no OS disk."""
    vm = Mock()
    vm.name = name
    if resource_group:
        vm.id = (
            f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
            f"/providers/Microsoft.Compute/virtualMachines/{name}"
        )
    else:
        vm.id = f"/subscriptions/{subscription_id}/providers/Microsoft.Compute/virtualMachines/{name}"
    vm.location = location

    vm.storage_profile = Mock()
    if os_disk == "default":
        os_disk = f"{name}-osdisk"
    vm.storage_profile.os_disk = create_mock_disk(os_disk, subscription_id, resource_group) if os_disk else None
    vm.storage_profile.data_disks = [
        create_mock_disk(disk_name, subscription_id, resource_group) for disk_name in data_disks
    ]
    return vm


def create_mock_azure_client(inventory, subscription_ids=None, unavailable=(), failing_snapshots=None):
    """Build a MagicMock standing in for AzureClient.

    failing_snapshots maps snapshot name -> provider error message.
    """
    failing_snapshots = failing_snapshots or {}
    if subscription_ids is None:
        subscription_ids = list(inventory.keys())

    client = MagicMock()
    client.active_subscription_id = None
    client.list_subscriptions.return_value = [
        {"id": sub_id, "display_name": f"Subscription {index}", "state": "Enabled"}
        for index, sub_id in enumerate(subscription_ids)
    ]

    def set_active_subscription(subscription_id):
        if subscription_id in unavailable:
            client.active_subscription_id = None
            raise ContextActivationError(subscription_id, "AuthorizationFailed")
        client.active_subscription_id = subscription_id

    def get_vm(vm_name):
        vms = inventory.get(client.active_subscription_id, {})
        for name, vm in vms.items():
            if name.lower() == vm_name.lower():
                return vm
        return None

    def get_disk(resource_group_name, disk_name):
        disk = Mock()
        disk.id = (
            f"/subscriptions/{client.active_subscription_id}/resourceGroups/{resource_group_name}"
            f"/providers/Microsoft.Compute/disks/{disk_name}"
        )
        disk.location = "eastus"
        return disk

    def create_snapshot(source_resource_id, location, resource_group_name, snapshot_name,
                        incremental=False, tags=None):
        if snapshot_name in failing_snapshots:
            raise HttpResponseError(message=failing_snapshots[snapshot_name])
        result = Mock()
        result.id = (
            f"/subscriptions/{client.active_subscription_id}/resourceGroups/{resource_group_name}"
            f"/providers/Microsoft.Compute/snapshots/{snapshot_name}"
        )
        return result

    client.set_active_subscription.side_effect = set_active_subscription
    client.get_vm.side_effect = get_vm
    client.get_disk.side_effect = get_disk
    client.create_snapshot.side_effect = create_snapshot
    return client


@pytest.fixture
def web_vm():
    return create_mock_vm("web-vm-01", SUB_A)


@pytest.fixture
def single_vm_client(web_vm):
    return create_mock_azure_client({SUB_A: {"web-vm-01": web_vm}})
