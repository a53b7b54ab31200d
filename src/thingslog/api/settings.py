"""Settings API endpoints for the sync configuration."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from thingslog.api.dependencies import require_sync_service
from thingslog.scheduler import SyncService
from thingslog.settings import SyncConfig, SyncConfigUpdate

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("", response_model=SyncConfig)
async def get_sync_settings(
    service: Annotated[SyncService, Depends(require_sync_service)],
) -> SyncConfig:
    """Return the current sync configuration."""
    return service.config


@router.put("", response_model=SyncConfig)
async def update_sync_settings(
    body: SyncConfigUpdate,
    service: Annotated[SyncService, Depends(require_sync_service)],
) -> SyncConfig:
    """Apply a partial settings diff, re-arming the timer when the cadence changed."""
    diff = body.to_diff()
    if not diff:
        return service.config
    if await service.update_config(diff) and service.started:
        service.start()
    return service.config
