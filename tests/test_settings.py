"""Tests for the sync settings module."""

import json

import pytest
from pydantic import ValidationError

from thingslog.settings import (
    DEFAULT_SECTION_HEADING,
    DEFAULT_SETTINGS,
    DEFAULT_TAG_PREFIX,
    SyncConfig,
    SyncConfigUpdate,
    apply_diff,
    load_settings,
    save_settings,
)

# ── load_settings / save_settings ──


class TestLoadSettings:
    def test_returns_defaults_when_file_missing(self, tmp_path):
        result = load_settings(tmp_path)
        assert result.model_dump() == DEFAULT_SETTINGS

    def test_writes_defaults_file_when_missing(self, tmp_path):
        load_settings(tmp_path)
        assert (tmp_path / "settings.json").exists()

    def test_default_table(self, tmp_path):
        result = load_settings(tmp_path)
        assert result.section_heading == DEFAULT_SECTION_HEADING == "## Logbook"
        assert result.tag_prefix == DEFAULT_TAG_PREFIX
        assert result.sync_interval == 300
        assert result.latest_sync_time == 0
        assert result.alternative_checkbox_prefix == ""

    def test_reads_valid_json(self, tmp_path):
        (tmp_path / "settings.json").write_text(
            json.dumps({"latest_sync_time": 1234, "tag_prefix": "done/"})
        )
        result = load_settings(tmp_path)
        assert result.latest_sync_time == 1234
        assert result.tag_prefix == "done/"
        # absent fields fall back to defaults
        assert result.section_heading == DEFAULT_SECTION_HEADING

    def test_ignores_unknown_fields(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"hasAcceptedDisclaimer": True}))
        assert load_settings(tmp_path) == SyncConfig()

    def test_returns_defaults_on_corrupt_json(self, tmp_path):
        (tmp_path / "settings.json").write_text("{invalid json!!")
        assert load_settings(tmp_path).model_dump() == DEFAULT_SETTINGS

    def test_returns_defaults_on_invalid_values(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"sync_interval": 0}))
        assert load_settings(tmp_path).sync_interval == 300

    def test_creates_parent_directories(self, tmp_path):
        nested = tmp_path / "deep" / "nested" / "dir"
        load_settings(nested)
        assert (nested / "settings.json").exists()


class TestSaveSettings:
    def test_round_trip(self, tmp_path):
        config = SyncConfig(latest_sync_time=99, include_tags=False, use_tab=False, tab_size=2)
        save_settings(tmp_path, config)
        assert load_settings(tmp_path) == config

    def test_atomic_write_leaves_no_temp_files(self, tmp_path):
        save_settings(tmp_path, SyncConfig())
        assert list(tmp_path.glob("*.tmp")) == []

    def test_overwrites_existing(self, tmp_path):
        save_settings(tmp_path, SyncConfig(tag_prefix="old/"))
        save_settings(tmp_path, SyncConfig(tag_prefix="new/"))
        assert load_settings(tmp_path).tag_prefix == "new/"


class TestApplyDiff:
    def test_merges_partial_diff(self):
        updated, _ = apply_diff(SyncConfig(), {"tag_prefix": "x/"})
        assert updated.tag_prefix == "x/"
        assert updated.section_heading == DEFAULT_SECTION_HEADING

    def test_interval_change_needs_reschedule(self):
        _, needs = apply_diff(SyncConfig(sync_interval=60), {"sync_interval": 120})
        assert needs is True

    def test_same_interval_does_not_reschedule(self):
        _, needs = apply_diff(SyncConfig(sync_interval=60), {"sync_interval": 60})
        assert needs is False

    def test_enable_toggle_needs_reschedule(self):
        _, needs = apply_diff(SyncConfig(), {"is_sync_enabled": False})
        assert needs is True

    def test_rendering_change_does_not_reschedule(self):
        _, needs = apply_diff(SyncConfig(), {"include_tags": False, "canceled_mark": "-"})
        assert needs is False

    def test_rejects_invalid_values(self):
        with pytest.raises(ValidationError):
            apply_diff(SyncConfig(), {"sync_interval": 0})


class TestSyncConfigUpdate:
    def test_to_diff_excludes_unset(self):
        assert SyncConfigUpdate(include_tags=False).to_diff() == {"include_tags": False}

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            SyncConfigUpdate.model_validate({"nope": 1})


class TestSectionHeadingValidation:
    def test_strips_surrounding_whitespace(self):
        assert SyncConfig(section_heading="  ## Logbook \t").section_heading == "## Logbook"

    def test_accepts_every_level(self):
        assert SyncConfig(section_heading="# Logbook").section_heading == "# Logbook"
        assert SyncConfig(section_heading="###### Logbook").section_heading == "###### Logbook"

    def test_rejects_plain_text(self):
        with pytest.raises(ValidationError):
            SyncConfig(section_heading="Logbook")

    def test_rejects_tag_and_bare_marks(self):
        for heading in ("#Logbook", "##", "## ", "####### Logbook"):
            with pytest.raises(ValidationError):
                SyncConfig(section_heading=heading)

    def test_update_normalizes_heading(self):
        diff = SyncConfigUpdate(section_heading=" ### Done ").to_diff()
        assert diff == {"section_heading": "### Done"}

    def test_update_rejects_plain_text(self):
        with pytest.raises(ValidationError):
            SyncConfigUpdate(section_heading="Logbook")

    def test_apply_diff_rejects_plain_text(self):
        with pytest.raises(ValidationError):
            apply_diff(SyncConfig(), {"section_heading": "Logbook"})

    def test_settings_file_with_plain_heading_falls_back(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"section_heading": "Logbook"}))
        assert load_settings(tmp_path).section_heading == DEFAULT_SECTION_HEADING

    def test_settings_file_heading_is_normalized(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"section_heading": "  ## Done"}))
        assert load_settings(tmp_path).section_heading == "## Done"


class TestTabSize:
    def test_rejects_zero(self):
        with pytest.raises(ValidationError):
            SyncConfig(use_tab=False, tab_size=0)

    def test_update_rejects_zero(self):
        with pytest.raises(ValidationError):
            SyncConfigUpdate(tab_size=0)
