import logging
from dataclasses import dataclass
from typing import Any, Iterator, List

from azure.core.exceptions import AzureError

from snapops.core.exceptions import ContextActivationError
from snapops.schemas.snapshot import AccountContext, LocatorPolicy

logger = logging.getLogger(__name__)


@dataclass
class VMFound:
    context: AccountContext
    vm: Any


@dataclass
class VMNotFoundHere:
    context: AccountContext


@dataclass
class ContextUnavailable:
    context: AccountContext
    reason: str


def resource_group_from_id(resource_id) -> str:
    """Resource group segment of an ARM id, or '' when it has none"""
    if not resource_id:
        return ""
    parts = resource_id.split('/')
    if len(parts) > 4 and parts[3].lower() == "resourcegroups":
        return parts[4].strip()
    return ""


class VMLocator:
    """Resolves a VM name to the subscription(s) holding it.

    ``first_match`` stops at the first subscription where the VM is found.
    ``exhaustive`` searches every subscription and reports each hit.
    """

    def __init__(self, azure_client, contexts: List[AccountContext],
                 policy: LocatorPolicy = LocatorPolicy.FIRST_MATCH):
        self.azure_client = azure_client
        self.contexts = contexts
        self.policy = LocatorPolicy(policy)

    def search(self, vm_name: str) -> Iterator[Any]:
        """Yield one outcome per searched subscription, in enumeration order"""
        for context in self.contexts:
            outcome = self._lookup(context, vm_name)
            yield outcome
            if isinstance(outcome, VMFound) and self.policy is LocatorPolicy.FIRST_MATCH:
                return

    def locate(self, vm_name: str) -> List[VMFound]:
        return [outcome for outcome in self.search(vm_name) if isinstance(outcome, VMFound)]

    def _lookup(self, context: AccountContext, vm_name: str):
        try:
            self.azure_client.set_active_subscription(context.id)
        except ContextActivationError as e:
            logger.warning(f"Skipping subscription {context.id} for VM '{vm_name}': {e}")
            return ContextUnavailable(context=context, reason=str(e))

        try:
            vm = self.azure_client.get_vm(vm_name)
        except AzureError as e:
            logger.warning(f"Failed to query VM '{vm_name}' in subscription {context.id}: {e}")
            return ContextUnavailable(context=context, reason=str(e))

        if vm is None:
            return VMNotFoundHere(context=context)

        logger.info(f"Found VM '{vm_name}' in subscription {context.id}")
        return VMFound(context=context, vm=vm)
