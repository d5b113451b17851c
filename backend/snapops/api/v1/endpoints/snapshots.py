import os
import asyncio
import logging
from fastapi import APIRouter, Depends, HTTPException

from snapops.api.deps import get_azure_client
from snapops.core.exceptions import (
    AuthenticationFailed, ContextEnumerationFailed, NoValidContexts, VMListMissing
)
from snapops.schemas.snapshot import SnapshotRunRequest, SnapshotRunResponse
from snapops.services.snapshot_service import SnapshotRunService
from snapops.services.report_service import ReportService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/run", response_model=SnapshotRunResponse)
async def run_snapshots(
    request: SnapshotRunRequest,
    azure_client=Depends(get_azure_client)
):
    """Snapshot every disk of the given VMs and return one report row per disk"""
    vm_names = [name.strip() for name in request.vm_names if name.strip()]
    ticket = request.ticket_reference.strip()
    try:
        if not vm_names:
            raise VMListMissing("No VM names given")
        if not ticket:
            raise HTTPException(status_code=422, detail="ticket_reference must not be blank")

        service = SnapshotRunService(
            azure_client,
            naming_policy=request.naming_policy,
            locator_policy=request.locator_policy,
            max_length=request.max_length,
            incremental=request.incremental
        )
        # Blocking SDK calls; keep them off the event loop
        result = await asyncio.to_thread(service.run, vm_names, ticket)
    except VMListMissing as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthenticationFailed as e:
        raise HTTPException(status_code=401, detail=str(e))
    except NoValidContexts as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ContextEnumerationFailed as e:
        raise HTTPException(status_code=503, detail=str(e))

    report_path = None
    report_url = None
    if request.save_report or request.upload_report:
        report_service = ReportService()
        report_path = await asyncio.to_thread(report_service.write_report, result.entries, ticket)
        if request.upload_report:
            report_url = await asyncio.to_thread(
                report_service.upload_report, result.entries, os.path.basename(report_path)
            )

    return SnapshotRunResponse(
        entries=result.entries,
        summary=result.summary,
        report_path=report_path,
        report_url=report_url
    )
