"""JSONL sync logger for tracking cycle outcomes."""

import contextlib
import json
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from thingslog.models import SyncResult


class SyncLogger:
    """Logs sync cycles and their outcomes to a JSONL file."""

    def __init__(self, log_path: Path) -> None:
        """Initialize the sync logger.

        Args:
            log_path: Path to the JSONL log file.
        """
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_cycle(self, result: SyncResult) -> None:
        """Append one cycle result to the log."""
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "status": result.status.value,
            "tasks_synced": result.tasks_synced,
            "days_synced": result.days_synced,
            "failed_days": result.failed_days,
            "error": result.error,
            "watermark": result.watermark,
            "duration_ms": round(result.duration_ms, 2),
        }

        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")

    def _read_entries(self) -> list[dict[str, Any]]:
        """Every parseable entry in write order. Corrupt lines are skipped."""
        if not self.log_path.exists():
            return []
        entries: list[dict[str, Any]] = []
        with self.log_path.open(encoding="utf-8") as f:
            for line in filter(None, map(str.strip, f)):
                with contextlib.suppress(json.JSONDecodeError):
                    entries.append(json.loads(line))
        return entries

    def get_recent_cycles(self, limit: int = 100) -> list[dict[str, Any]]:
        """Get recent cycle entries, most recent first."""
        return self._read_entries()[-limit:][::-1]

    def get_stats(self) -> dict[str, Any]:
        """Get aggregated statistics over the whole log.

        Returns:
            Dictionary with total cycles, per-status counts, tasks synced and
            average duration.
        """
        entries = self._read_entries()
        statuses = Counter(str(entry.get("status", "unknown")) for entry in entries)
        total_tasks = sum(int(entry.get("tasks_synced") or 0) for entry in entries)
        total_duration = sum(float(entry.get("duration_ms") or 0.0) for entry in entries)
        return {
            "total_cycles": len(entries),
            "status_counts": dict(statuses),
            "total_tasks_synced": total_tasks,
            "avg_duration_ms": round(total_duration / len(entries), 2) if entries else 0,
        }
