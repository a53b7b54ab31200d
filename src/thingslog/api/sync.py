"""Sync API endpoints: manual trigger, status and cycle history."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from thingslog.api.dependencies import get_sync_logger, require_sync_service
from thingslog.logging.sync_logger import SyncLogger
from thingslog.models import SyncStatusResponse
from thingslog.scheduler import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


@router.post("")
async def trigger_sync(
    service: Annotated[SyncService, Depends(require_sync_service)],
) -> JSONResponse:
    """Run a sync cycle now, or wait for the one already running."""
    result = await service.trigger_sync_now()
    return JSONResponse(
        status_code=200 if result.ok else 502,
        content=result.model_dump(mode="json"),
    )


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(
    service: Annotated[SyncService, Depends(require_sync_service)],
) -> SyncStatusResponse:
    """Report whether a cycle is running, when the next one is due and the last outcome."""
    return SyncStatusResponse(
        enabled=service.config.is_sync_enabled,
        running=service.running,
        latest_sync_time=service.config.latest_sync_time,
        next_sync_at=service.next_sync_at,
        last_result=service.last_result,
    )


@router.get("/log")
async def sync_log(
    _service: Annotated[SyncService, Depends(require_sync_service)],
    sync_logger: Annotated[SyncLogger, Depends(get_sync_logger)],
    limit: int = Query(default=20, ge=1, le=500),
) -> dict[str, Any]:
    """Recent cycle outcomes and aggregate stats."""
    return {
        "cycles": sync_logger.get_recent_cycles(limit=limit),
        "stats": sync_logger.get_stats(),
    }
