"""Recurring Logbook sync: fetch, render and merge completed tasks into daily notes."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from thingslog.logging.sync_logger import SyncLogger
from thingslog.models import SyncResult, SyncStatus
from thingslog.scripts.logbook_renderer import LogbookRenderer
from thingslog.scripts.task_aggregator import day_from_key, group_tasks_by_day
from thingslog.settings import SyncConfig, apply_diff, load_settings, save_settings
from thingslog.things.logbook import Task
from thingslog.vault.daily_notes import DailyNoteStore

logger = logging.getLogger(__name__)


class TaskSource(Protocol):
    def fetch_tasks(self, since: float) -> list[Task]: ...


def compute_next_delay(latest_sync_time: float, sync_interval: float, now: float) -> float:
    """Milliseconds until the next sync is due; 0 when overdue.

    All arguments are in seconds.
    """
    return max(latest_sync_time * 1000 + sync_interval * 1000 - now * 1000, 0)


def write_sync_marker(data_path: Path, result: SyncResult) -> None:
    """Write .sync_completed or .sync_failed, read by the health check."""
    data_path.mkdir(parents=True, exist_ok=True)
    if result.ok:
        (data_path / ".sync_completed").write_text(datetime.now().isoformat())
    else:
        marker = data_path / ".sync_failed"
        marker.write_text(f"{datetime.now().isoformat()}: {result.status}: {result.error or ''}")


def _log_structured(event: str, **kwargs: Any) -> None:
    """Log a structured JSON event for sync milestones."""
    logger.info(json.dumps({"event": event, **kwargs}))


class SyncService:
    """Owns the sync configuration and the single outstanding sync timer.

    States are Idle (timer armed) and Running (a cycle in progress). A trigger
    while Running joins the in-flight cycle instead of starting another.
    """

    def __init__(
        self,
        source: TaskSource,
        notes: DailyNoteStore,
        data_path: Path,
        config: SyncConfig | None = None,
        *,
        sync_logger: SyncLogger | None = None,
        notify: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source = source
        self.notes = notes
        self.data_path = data_path
        self.config = config if config is not None else load_settings(data_path)
        self.sync_logger = sync_logger
        self._notify = notify or logger.info
        self._clock = clock

        self._timer: asyncio.TimerHandle | None = None
        self._cycle: asyncio.Task[SyncResult] | None = None
        self._started = False
        self.next_sync_at: float | None = None
        self.last_result: SyncResult | None = None

    @property
    def running(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    @property
    def started(self) -> bool:
        return self._started

    # -- mutators --

    def start(self) -> None:
        """Arm (or re-arm) the timer from the current watermark and interval."""
        self._started = True
        self._schedule_next_sync()

    def stop(self) -> None:
        """Cancel the outstanding timer. An in-flight cycle runs to completion."""
        self._started = False
        self._cancel_timer()

    def trigger_sync_now(self) -> asyncio.Task[SyncResult]:
        """Start a cycle, or return the one already running."""
        if self.running:
            logger.info("Sync already running, joining in-flight cycle")
            return self._cycle  # type: ignore[return-value]
        self._cancel_timer()
        self._cycle = asyncio.get_running_loop().create_task(self._run_cycle())
        return self._cycle

    async def update_config(self, diff: dict[str, Any]) -> bool:
        """Persist a partial settings diff.

        Returns True when the change requires the timer to be re-armed; the
        caller decides when to call start().
        """
        updated, needs_reschedule = apply_diff(self.config, diff)
        await asyncio.to_thread(save_settings, self.data_path, updated)
        self.config = updated
        logger.info("Settings updated: %s", ", ".join(sorted(diff)))
        return needs_reschedule

    # -- timer --

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.next_sync_at = None

    def _schedule_next_sync(self, delay_ms: float | None = None) -> None:
        self._cancel_timer()
        if not self._started or not self.config.is_sync_enabled:
            return
        now = self._clock()
        if delay_ms is None:
            delay_ms = compute_next_delay(
                self.config.latest_sync_time, self.config.sync_interval, now
            )
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay_ms / 1000, self._on_timer)
        self.next_sync_at = now + delay_ms / 1000
        logger.debug("Next sync in %.0f ms", delay_ms)

    def _on_timer(self) -> None:
        self._timer = None
        self.next_sync_at = None
        self.trigger_sync_now()

    # -- cycle --

    async def _sync_day(self, key: str, tasks: list[Task], renderer: LogbookRenderer) -> None:
        body = renderer.render(tasks)
        await asyncio.to_thread(
            self.notes.merge_section, day_from_key(key), renderer.config.section_heading, body
        )

    async def sync_logbook(self) -> SyncResult:
        """Run one cycle against a snapshot of the current settings."""
        started_at = self._clock()
        config = self.config
        since = config.latest_sync_time

        def result(status: SyncStatus, **kwargs: Any) -> SyncResult:
            return SyncResult(
                status=status,
                watermark=self.config.latest_sync_time,
                started_at=started_at,
                duration_ms=(self._clock() - started_at) * 1000,
                **kwargs,
            )

        try:
            tasks = await asyncio.to_thread(self.source.fetch_tasks, since)
        except Exception as e:
            logger.error("Logbook fetch failed: %s", e, exc_info=True)
            return result(SyncStatus.FETCH_FAILED, error=str(e))

        days = group_tasks_by_day(tasks)
        renderer = LogbookRenderer(config)
        outcomes = await asyncio.gather(
            *(self._sync_day(key, day_tasks, renderer) for key, day_tasks in days.items()),
            return_exceptions=True,
        )

        failed_days: list[str] = []
        for key, outcome in zip(days, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("Failed to sync %s: %s", key, outcome, exc_info=outcome)
                failed_days.append(key)

        task_count = sum(len(day_tasks) for day_tasks in days.values())
        if failed_days:
            return result(
                SyncStatus.PARTIAL_FAILURE,
                tasks_synced=task_count - sum(len(days[key]) for key in failed_days),
                days_synced=len(days) - len(failed_days),
                failed_days=failed_days,
                error=f"{len(failed_days)} of {len(days)} days failed",
            )

        # Settings may have changed mid-cycle; only the watermark comes from this cycle
        watermark = max(int(self._clock()), since)
        try:
            updated, _ = apply_diff(self.config, {"latest_sync_time": watermark})
            await asyncio.to_thread(save_settings, self.data_path, updated)
        except Exception as e:
            logger.error("Failed to persist sync watermark: %s", e, exc_info=True)
            return result(SyncStatus.PERSIST_FAILED, tasks_synced=task_count, error=str(e))
        self.config = updated

        return result(SyncStatus.SUCCESS, tasks_synced=task_count, days_synced=len(days))

    async def _run_cycle(self) -> SyncResult:
        started_at = self._clock()
        _log_structured("sync_started", since=self.config.latest_sync_time)
        try:
            res = await self.sync_logbook()
        except Exception as e:
            logger.error("Sync cycle crashed: %s", e, exc_info=True)
            res = SyncResult(
                status=SyncStatus.CYCLE_FAILED,
                error=str(e),
                watermark=self.config.latest_sync_time,
                started_at=started_at,
                duration_ms=(self._clock() - started_at) * 1000,
            )
        self.last_result = res

        try:
            if res.ok:
                self._notify(
                    f"Things Logbook sync complete: {res.tasks_synced} tasks "
                    f"across {res.days_synced} days"
                )
                _log_structured(
                    "sync_complete",
                    tasks=res.tasks_synced,
                    days=res.days_synced,
                    duration_ms=int(res.duration_ms),
                )
            else:
                logger.error("Sync FAILED (%s): %s", res.status, res.error)
                _log_structured("sync_failed", status=str(res.status), error=res.error)

            try:
                write_sync_marker(self.data_path, res)
                if self.sync_logger is not None:
                    self.sync_logger.log_cycle(res)
            except OSError:
                logger.warning("Failed to record sync outcome", exc_info=True)
        finally:
            if res.ok:
                self._schedule_next_sync()
            else:
                # Watermark did not move: retry the same window after a full interval
                self._schedule_next_sync(self.config.sync_interval * 1000)
        return res
