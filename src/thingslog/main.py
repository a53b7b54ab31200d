"""FastAPI application entry point."""

import logging
import shutil
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from starlette.middleware.gzip import GZipMiddleware

from thingslog import __version__
from thingslog.api.dependencies import get_platform_supported, get_settings, get_sync_service
from thingslog.api.settings import router as settings_router
from thingslog.api.sync import router as sync_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Start the sync timer for the lifetime of the app."""
    s = get_settings()
    logger.info(
        "thingslog starting: vault_path=%s, data_path=%s, things_db=%s",
        s.vault_path,
        s.data_path,
        s.things_db_path,
    )
    if not get_platform_supported():
        logger.warning("Platform not supported, Logbook sync is inactive")
        yield
        return

    service = get_sync_service()
    if service is None:
        logger.error("VAULT PATH NOT CONFIGURED OR MISSING, sync is inactive")
        yield
        return

    service.start()
    try:
        yield
    finally:
        service.stop()


app = FastAPI(
    title="thingslog",
    description="Sync the Things 3 Logbook into Obsidian daily notes",
    version=__version__,
    debug=get_settings().debug,
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.include_router(settings_router)
app.include_router(sync_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Return project information."""
    return {
        "name": "thingslog",
        "version": __version__,
        "description": "Sync the Things 3 Logbook into Obsidian daily notes",
    }


@app.get("/health")
@app.get("/api/v1/health")
async def health() -> dict[str, Any]:
    """Health check endpoint with vault, database, disk, and sync status."""
    s = get_settings()

    checks: dict[str, Any] = {"status": "ok"}

    if not s.vault_path or not s.vault_path.exists():
        checks["status"] = "error"
        checks["vault"] = "not configured or missing"
    else:
        checks["vault"] = "ok"

    checks["things_db"] = "ok" if s.things_db_path.exists() else "missing"
    if checks["things_db"] == "missing" and checks["status"] == "ok":
        checks["status"] = "warning"

    disk_path = s.data_path if s.data_path.exists() else Path(".")
    _, _, free = shutil.disk_usage(str(disk_path))
    free_gb = round(free / (1024**3), 2)
    checks["free_disk_gb"] = free_gb
    if free_gb < 1.0:
        if checks["status"] == "ok":
            checks["status"] = "warning"
        checks["disk"] = "low"

    # Sync freshness
    sync_marker = s.data_path / ".sync_completed"
    if sync_marker.exists():
        age_hours = (time.time() - sync_marker.stat().st_mtime) / 3600
        checks["last_sync_hours_ago"] = round(age_hours, 1)
        if age_hours > 25:
            checks["sync"] = "stale"
    else:
        checks["last_sync_hours_ago"] = None

    return checks
