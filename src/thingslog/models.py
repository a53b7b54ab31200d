"""Pydantic models for sync results and the thingslog API."""

from enum import StrEnum

from pydantic import BaseModel, Field


class SyncStatus(StrEnum):
    """Outcome categories for a sync cycle."""

    SUCCESS = "success"
    FETCH_FAILED = "fetch_failed"
    PARTIAL_FAILURE = "partial_failure"
    PERSIST_FAILED = "persist_failed"
    CYCLE_FAILED = "cycle_failed"


class SyncResult(BaseModel):
    """The outcome of one fetch → render → merge cycle."""

    status: SyncStatus
    tasks_synced: int = 0
    days_synced: int = 0
    failed_days: list[str] = Field(default_factory=list)
    error: str | None = None
    watermark: int  # latest_sync_time after the cycle
    started_at: float
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == SyncStatus.SUCCESS


class SyncStatusResponse(BaseModel):
    """Response body for GET /api/v1/sync/status."""

    enabled: bool
    running: bool
    latest_sync_time: int
    next_sync_at: float | None
    last_result: SyncResult | None
