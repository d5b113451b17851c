import logging
from dataclasses import dataclass
from typing import Dict, Optional

from azure.core.exceptions import AzureError

from snapops.schemas.snapshot import SnapshotRequest
from snapops.services.vm_locator import resource_group_from_id

logger = logging.getLogger(__name__)


@dataclass
class SnapshotCreated:
    snapshot_id: Optional[str]


@dataclass
class SnapshotFailed:
    reason: str


def _provider_message(error: Exception) -> str:
    message = getattr(error, 'message', None)
    return message if message else str(error)


class SnapshotExecutor:
    """Creates one snapshot per request. No retries."""

    def __init__(self, azure_client, incremental: bool = False):
        self.azure_client = azure_client
        self.incremental = incremental

    def execute(self, request: SnapshotRequest, disk_name: str, source_resource_group: str,
                tags: Optional[Dict[str, str]] = None):
        """Resolve the source disk then copy it into a snapshot.

        The disk is looked up in the resource group named by its own resource
        id, which can differ from the VM's; source_resource_group is used only
        when the id carries none.

        Any Azure error (authorization, quota, name conflict, bad source) is
        returned as SnapshotFailed with the provider's message unchanged.
        """
        try:
            disk_resource_group = resource_group_from_id(request.source_disk_reference) or source_resource_group
            disk = self.azure_client.get_disk(disk_resource_group, disk_name)
            source_id = disk.id or request.source_disk_reference
            location = request.location or disk.location
            result = self.azure_client.create_snapshot(
                source_resource_id=source_id,
                location=location,
                resource_group_name=request.target_resource_group,
                snapshot_name=request.composed_name,
                incremental=self.incremental,
                tags=tags
            )
        except AzureError as e:
            reason = _provider_message(e)
            logger.error(f"Failed to create snapshot '{request.composed_name}' from disk '{disk_name}': {reason}")
            return SnapshotFailed(reason=reason)

        return SnapshotCreated(snapshot_id=getattr(result, 'id', None))
