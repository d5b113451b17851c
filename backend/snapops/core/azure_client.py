from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.subscription import SubscriptionClient
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.compute.models import Snapshot, CreationData
from azure.core.exceptions import AzureError
import logging
from typing import List, Dict, Any, Optional

from snapops.core.config import settings, Settings
from snapops.core.exceptions import AuthenticationFailed, ContextActivationError

logger = logging.getLogger(__name__)

MANAGEMENT_SCOPE = "https://management.azure.com/.default"


class AzureClient:
    """Azure client for subscription discovery, VM/disk lookup and snapshot creation.

    Holds one active subscription at a time, the way an interactive Az session
    does. Every call is a blocking round-trip.
    """

    def __init__(self, config: Optional[Settings] = None, credential=None):
        self.config = config or settings
        self.credential = credential
        self.subscription_client = None
        self.compute_client = None
        self.active_subscription_id: Optional[str] = None

    def _get_credential(self):
        """Get Azure credential based on environment"""
        if self.config.AZURE_USE_SERVICE_PRINCIPAL:
            return ClientSecretCredential(
                tenant_id=self.config.AZURE_TENANT_ID,
                client_id=self.config.AZURE_CLIENT_ID,
                client_secret=self.config.AZURE_CLIENT_SECRET
            )
        return DefaultAzureCredential()

    def authenticate(self) -> None:
        """Acquire a management token so later failures are not auth failures"""
        try:
            if self.credential is None:
                self.credential = self._get_credential()
            self.credential.get_token(MANAGEMENT_SCOPE)
            self.subscription_client = SubscriptionClient(self.credential)
            logger.info("Azure credential acquired successfully")
        except AzureError as e:
            logger.error(f"Failed to authenticate with Azure: {e}")
            raise AuthenticationFailed(str(e)) from e

    def list_subscriptions(self) -> List[Dict[str, Any]]:
        """List all subscriptions visible to the credential, in provider order"""
        subscriptions = []
        for subscription in self.subscription_client.subscriptions.list():
            subscriptions.append({
                "id": subscription.subscription_id,
                "display_name": subscription.display_name,
                "state": subscription.state.value if hasattr(subscription.state, 'value') else str(subscription.state) if subscription.state else "Unknown",
            })
        return subscriptions

    def set_active_subscription(self, subscription_id: str) -> None:
        """Switch the session into a subscription"""
        try:
            self.subscription_client.subscriptions.get(subscription_id)
            self.compute_client = ComputeManagementClient(self.credential, subscription_id)
            self.active_subscription_id = subscription_id
        except AzureError as e:
            self.compute_client = None
            self.active_subscription_id = None
            raise ContextActivationError(subscription_id, str(e)) from e

    def get_vm(self, vm_name: str):
        """Find a VM by name in the active subscription, or None"""
        for vm in self.compute_client.virtual_machines.list_all():
            if vm.name and vm.name.lower() == vm_name.lower():
                return vm
        return None

    def get_disk(self, resource_group_name: str, disk_name: str):
        """Get a managed disk. Provider errors propagate to the caller."""
        return self.compute_client.disks.get(
            resource_group_name=resource_group_name,
            disk_name=disk_name
        )

    def create_snapshot(self, source_resource_id: str, location: str, resource_group_name: str,
                        snapshot_name: str, incremental: bool = False,
                        tags: Optional[Dict[str, str]] = None):
        """Create a snapshot by copying a managed disk and wait for completion"""
        snapshot = Snapshot(
            location=location,
            creation_data=CreationData(
                create_option="Copy",
                source_resource_id=source_resource_id
            ),
            incremental=incremental,
            tags=tags or {}
        )
        operation = self.compute_client.snapshots.begin_create_or_update(
            resource_group_name=resource_group_name,
            snapshot_name=snapshot_name,
            snapshot=snapshot
        )
        result = operation.result()
        logger.info(f"Successfully created snapshot '{snapshot_name}' in resource group '{resource_group_name}'")
        return result

