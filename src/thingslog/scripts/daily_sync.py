"""CLI entry point for one-shot Logbook sync runs."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from thingslog.config import get_settings
from thingslog.environment import is_platform_supported
from thingslog.logging.sync_logger import SyncLogger
from thingslog.models import SyncResult
from thingslog.scheduler import SyncService
from thingslog.settings import load_settings
from thingslog.things.logbook import ThingsLogbook
from thingslog.vault.daily_notes import DailyNoteStore

logger = logging.getLogger("thingslog.scripts")


def _rotate_logs(data_path: Path, max_size_mb: float = 10.0) -> None:
    """Rotate log files that exceed max_size_mb."""
    for log_name in ["sync.log", "sync_log.jsonl"]:
        log_file = data_path / log_name
        if log_file.exists() and log_file.stat().st_size > max_size_mb * 1024 * 1024:
            rotated = data_path / f"{log_name}.old"
            if rotated.exists():
                rotated.unlink()
            log_file.rename(rotated)
            logger.info("Rotated %s (exceeded %.1f MB)", log_name, max_size_mb)


def run_sync(vault_path: Path, data_path: Path) -> SyncResult:
    """Run a single sync cycle without arming the recurring timer."""
    settings = get_settings()
    notes = DailyNoteStore(
        vault_path,
        folder=settings.daily_folder,
        filename_format=settings.daily_note_format,
        template_path=settings.daily_template,
    )
    service = SyncService(
        ThingsLogbook(settings.things_db_path),
        notes,
        data_path,
        sync_logger=SyncLogger(data_path / "sync_log.jsonl"),
    )

    async def _once() -> SyncResult:
        return await service.trigger_sync_now()

    return asyncio.run(_once())


def main() -> None:
    parser = argparse.ArgumentParser(description="Sync the Things Logbook into daily notes")
    parser.add_argument(
        "command",
        nargs="?",
        default="sync",
        choices=["sync", "settings"],
        help="sync: run one cycle now; settings: print the effective sync settings",
    )
    parser.add_argument(
        "--vault-path",
        type=Path,
        default=None,
        help="Override vault path (default: from config/env)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    settings = get_settings()
    data_path = Path(settings.data_path)
    data_path.mkdir(parents=True, exist_ok=True)

    if args.command == "settings":
        print(json.dumps(load_settings(data_path).model_dump(), indent=2))
        return

    if not is_platform_supported(settings.force_platform_support):
        logger.error("Things is only available on macOS. Set THINGSLOG_FORCE_PLATFORM_SUPPORT=1")
        sys.exit(1)

    _rotate_logs(data_path)

    vault_path = args.vault_path or settings.vault_path
    if vault_path is None:
        logger.error("No vault path configured. Set THINGSLOG_VAULT_PATH or use --vault-path")
        sys.exit(1)

    vault_path = Path(vault_path)
    if not vault_path.exists():
        logger.error("Vault path does not exist: %s", vault_path)
        sys.exit(1)

    logger.info("Vault path: %s", vault_path)
    result = run_sync(vault_path, data_path)
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
