import asyncio
import logging
from fastapi import APIRouter, Depends, HTTPException

from snapops.api.deps import get_azure_client
from snapops.core.exceptions import AuthenticationFailed, ContextEnumerationFailed, NoValidContexts
from snapops.schemas.snapshot import Subscription, SubscriptionList
from snapops.services.context_enumerator import enumerate_contexts

router = APIRouter()
logger = logging.getLogger(__name__)


def _list_valid_subscriptions(azure_client):
    azure_client.authenticate()
    return enumerate_contexts(azure_client)


@router.get("", response_model=SubscriptionList)
async def list_subscriptions(azure_client=Depends(get_azure_client)):
    """
    Get the subscriptions a snapshot run would search, in search order.
    """
    try:
        contexts = await asyncio.to_thread(_list_valid_subscriptions, azure_client)
    except AuthenticationFailed as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ContextEnumerationFailed as e:
        raise HTTPException(status_code=503, detail=str(e))
    except NoValidContexts:
        return SubscriptionList(subscriptions=[])

    return SubscriptionList(subscriptions=[
        Subscription(id=context.id, display_name=context.display_name) for context in contexts
    ])
