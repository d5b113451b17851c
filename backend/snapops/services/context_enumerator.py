import re
import logging
from typing import List

from azure.core.exceptions import AzureError

from snapops.core.exceptions import NoValidContexts, ContextEnumerationFailed
from snapops.schemas.snapshot import AccountContext

logger = logging.getLogger(__name__)

# 8-4-4-4-12 hexadecimal groups
SUBSCRIPTION_ID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)


def is_valid_subscription_id(subscription_id) -> bool:
    return isinstance(subscription_id, str) and bool(SUBSCRIPTION_ID_PATTERN.match(subscription_id))


def enumerate_contexts(azure_client) -> List[AccountContext]:
    """List the subscriptions this session can switch into.

    Keeps provider order and drops entries whose id is not a well-formed
    subscription GUID. Raises NoValidContexts when nothing is left and
    ContextEnumerationFailed when Azure cannot list subscriptions at all.
    """
    try:
        subscriptions = azure_client.list_subscriptions()
    except AzureError as e:
        logger.error(f"Failed to list subscriptions: {e}")
        raise ContextEnumerationFailed(f"Failed to list subscriptions: {e}") from e

    contexts = []
    for subscription in subscriptions:
        subscription_id = subscription.get("id")
        if not is_valid_subscription_id(subscription_id):
            logger.warning(f"Ignoring subscription with malformed id: {subscription_id!r}")
            continue
        contexts.append(AccountContext(id=subscription_id, display_name=subscription.get("display_name")))

    if not contexts:
        logger.error("No valid subscriptions found for the current session")
        raise NoValidContexts("No valid subscriptions found for the current session")

    logger.info(f"Found {len(contexts)} valid subscriptions")
    return contexts
