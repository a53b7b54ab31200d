"""User-configurable sync settings stored in data/settings.json."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SECTION_HEADING = "## Logbook"
DEFAULT_TAG_PREFIX = "things/"
DEFAULT_SYNC_INTERVAL = 5 * 60  # seconds
DEFAULT_CANCELED_MARK = "c"

# Changing any of these requires the timer to be re-armed
RESCHEDULE_FIELDS = frozenset({"sync_interval", "is_sync_enabled"})

_SETTINGS_FILE = "settings.json"

# An ATX heading with text: "## Logbook", not "##" or "#tag"
SECTION_HEADING_RE = re.compile(r"^#{1,6}[ \t]\S")


def _check_section_heading(value: str) -> str:
    heading = value.strip()
    if not SECTION_HEADING_RE.match(heading):
        raise ValueError("section_heading must be a markdown heading such as '## Logbook'")
    return heading


class SyncConfig(BaseModel):
    """The persisted sync configuration blob."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    latest_sync_time: int = Field(default=0, ge=0)
    sync_interval: int = Field(default=DEFAULT_SYNC_INTERVAL, ge=1)
    is_sync_enabled: bool = True

    section_heading: str = DEFAULT_SECTION_HEADING
    tag_prefix: str = DEFAULT_TAG_PREFIX
    include_tags: bool = True
    include_headers: bool = True
    include_link: bool = False
    does_sync_note_body: bool = True
    render_checklists: bool = True
    canceled_mark: str = DEFAULT_CANCELED_MARK
    alternative_checkbox_prefix: str = ""

    use_tab: bool = True
    tab_size: int = Field(default=4, ge=1)

    @field_validator("section_heading")
    @classmethod
    def _normalize_section_heading(cls, value: str) -> str:
        return _check_section_heading(value)


class SyncConfigUpdate(BaseModel):
    """A partial settings diff. Unset fields are left untouched."""

    model_config = ConfigDict(extra="forbid")

    latest_sync_time: int | None = Field(default=None, ge=0)
    sync_interval: int | None = Field(default=None, ge=1)
    is_sync_enabled: bool | None = None
    section_heading: str | None = None
    tag_prefix: str | None = None
    include_tags: bool | None = None
    include_headers: bool | None = None
    include_link: bool | None = None
    does_sync_note_body: bool | None = None
    render_checklists: bool | None = None
    canceled_mark: str | None = None
    alternative_checkbox_prefix: str | None = None
    use_tab: bool | None = None
    tab_size: int | None = Field(default=None, ge=1)

    @field_validator("section_heading")
    @classmethod
    def _normalize_section_heading(cls, value: str | None) -> str | None:
        return None if value is None else _check_section_heading(value)

    def to_diff(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


DEFAULT_SETTINGS: dict[str, Any] = SyncConfig().model_dump()


def load_settings(data_path: Path) -> SyncConfig:
    """Read settings from data_path/settings.json.

    Returns the defaults and writes the defaults file if missing, unparseable,
    or invalid.
    """
    settings_file = data_path / _SETTINGS_FILE
    if settings_file.exists():
        try:
            with open(settings_file, encoding="utf-8") as f:
                raw: dict[str, Any] = json.load(f)
            return SyncConfig.model_validate(raw)
        except (json.JSONDecodeError, OSError):
            logger.warning("Settings file corrupt or unreadable, returning defaults")
        except ValidationError as e:
            logger.warning("Settings file invalid (%d errors), returning defaults", e.error_count())
    config = SyncConfig()
    # Write defaults so the file exists for next time
    save_settings(data_path, config)
    return config


def save_settings(data_path: Path, config: SyncConfig) -> None:
    """Write settings to data_path/settings.json using atomic write."""
    data_path.mkdir(parents=True, exist_ok=True)
    settings_file = data_path / _SETTINGS_FILE
    fd, tmp_path = tempfile.mkstemp(dir=str(data_path), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)
            f.write("\n")
        os.replace(tmp_path, str(settings_file))
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def apply_diff(config: SyncConfig, diff: dict[str, Any]) -> tuple[SyncConfig, bool]:
    """Merge a partial diff into config.

    Returns the new config and whether the change requires a reschedule.
    """
    updated = config.model_copy(update=diff)
    # model_copy skips validation, so re-validate the merged blob
    updated = SyncConfig.model_validate(updated.model_dump())
    needs_reschedule = any(
        field in diff and getattr(config, field) != getattr(updated, field)
        for field in RESCHEDULE_FIELDS
    )
    return updated, needs_reschedule
