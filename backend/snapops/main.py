from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging

from snapops import __version__
from snapops.core.config import settings
from snapops.api.v1.api import api_router

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="SnapOps - Azure VM Disk Snapshot Service",
    description="Locate VMs across subscriptions and snapshot their managed disks",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware (configurable via env)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "snapops", "version": __version__}


def run():
    uvicorn.run(app, host="0.0.0.0", port=9010)


if __name__ == "__main__":
    run()
