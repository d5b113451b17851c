import logging
from typing import List

from snapops.schemas.snapshot import AccountContext, DiskDescriptor, DiskRole, ResolvedVM
from snapops.services.vm_locator import resource_group_from_id

logger = logging.getLogger(__name__)


def _managed_disk_id(disk) -> str:
    managed_disk = getattr(disk, 'managed_disk', None)
    return getattr(managed_disk, 'id', None) if managed_disk else None


def collect_disks(vm) -> List[DiskDescriptor]:
    """OS disk first, then data disks in the order Azure reports them. Unnamed disks are dropped."""
    disks = []
    storage_profile = getattr(vm, 'storage_profile', None)
    if not storage_profile:
        return disks

    os_disk = storage_profile.os_disk
    if os_disk is not None and os_disk.name:
        disks.append(DiskDescriptor(
            name=os_disk.name,
            source_disk_reference=_managed_disk_id(os_disk),
            role=DiskRole.OS
        ))

    for data_disk in storage_profile.data_disks or []:
        if not data_disk.name:
            logger.warning(f"Ignoring unnamed data disk on VM '{vm.name}'")
            continue
        disks.append(DiskDescriptor(
            name=data_disk.name,
            source_disk_reference=_managed_disk_id(data_disk),
            role=DiskRole.DATA
        ))
    return disks


def resolve_vm(vm_name: str, context: AccountContext, vm) -> ResolvedVM:
    """Bind an Azure VM to the subscription it was found in.

    Disks are left empty when the resource group cannot be determined; the
    caller records that VM as skipped.
    """
    resource_group = resource_group_from_id(vm.id)
    resolved = ResolvedVM(
        identifier=vm_name,
        context=context,
        resource_group=resource_group or None,
        location=vm.location
    )
    if not resource_group:
        logger.warning(f"VM '{vm_name}' in subscription {context.id} has no resource group; skipping disk collection")
        return resolved

    resolved.disks = collect_disks(vm)
    return resolved
