"""FastAPI dependency injection for shared resources."""

import logging
from functools import lru_cache
from pathlib import Path

from fastapi import HTTPException

from thingslog.config import Settings
from thingslog.environment import is_platform_supported
from thingslog.logging.sync_logger import SyncLogger
from thingslog.scheduler import SyncService
from thingslog.things.logbook import ThingsLogbook
from thingslog.vault.daily_notes import DailyNoteStore

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_data_path() -> Path:
    """Get the data directory path."""
    settings = get_settings()
    data_path = Path(settings.data_path) if settings.data_path else Path("data")
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


@lru_cache
def get_platform_supported() -> bool:
    """Platform gate, evaluated once per process."""
    return is_platform_supported(get_settings().force_platform_support)


@lru_cache
def get_sync_logger() -> SyncLogger:
    """Get cached sync logger instance."""
    return SyncLogger(get_data_path() / "sync_log.jsonl")


@lru_cache
def get_sync_service() -> SyncService | None:
    """Get the process-wide sync service, or None if the vault is not configured."""
    settings = get_settings()
    if not settings.vault_path or not settings.vault_path.exists():
        logger.error("Vault path not configured or missing: %s", settings.vault_path)
        return None
    notes = DailyNoteStore(
        settings.vault_path,
        folder=settings.daily_folder,
        filename_format=settings.daily_note_format,
        template_path=settings.daily_template,
    )
    return SyncService(
        ThingsLogbook(settings.things_db_path),
        notes,
        get_data_path(),
        sync_logger=get_sync_logger(),
    )


def require_sync_service() -> SyncService:
    """Dependency for routes that need a live sync service."""
    if not get_platform_supported():
        raise HTTPException(status_code=503, detail="Things Logbook sync requires macOS")
    service = get_sync_service()
    if service is None:
        raise HTTPException(status_code=503, detail="Vault path not configured")
    return service
