"""Daily note store and section merging."""

from thingslog.vault.daily_notes import DailyNoteStore
from thingslog.vault.sections import merge_section

__all__ = ["DailyNoteStore", "merge_section"]
