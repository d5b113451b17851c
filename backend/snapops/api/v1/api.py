from fastapi import APIRouter
from snapops.api.v1.endpoints import (
    subscriptions,
    snapshots
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
api_router.include_router(snapshots.router, prefix="/snapshots", tags=["Snapshots"])
