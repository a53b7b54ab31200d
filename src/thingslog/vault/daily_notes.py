"""Daily note store for an Obsidian vault."""

import logging
from datetime import date
from pathlib import Path

import frontmatter

from thingslog.vault.sections import merge_section

logger = logging.getLogger(__name__)


class DailyNoteStore:
    """Resolves, creates and updates daily notes in a vault folder."""

    def __init__(
        self,
        vault_path: Path,
        folder: str = "Daily",
        filename_format: str = "%Y-%m-%d",
        template_path: Path | None = None,
    ) -> None:
        """Initialize the daily note store.

        Args:
            vault_path: Path to the Obsidian vault root.
            folder: Daily notes folder, relative to the vault root.
            filename_format: strftime pattern for note filenames (without .md).
            template_path: Optional template for new notes, relative to the vault root.
        """
        self.vault_path = vault_path
        self.daily_dir = vault_path / folder
        self.filename_format = filename_format
        self.template_path = template_path

    def note_path(self, day: date) -> Path:
        return self.daily_dir / f"{day.strftime(self.filename_format)}.md"

    def get(self, day: date) -> Path | None:
        """Return the daily note for `day` if it exists."""
        path = self.note_path(day)
        return path if path.is_file() else None

    def resolve_or_create(self, day: date) -> Path:
        """Return the daily note for `day`, creating it if missing."""
        path = self.get(day)
        if path is not None:
            return path
        path = self.note_path(day)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self._initial_content(day), encoding="utf-8")
        logger.info("Created daily note: %s", path.relative_to(self.vault_path))
        return path

    def _initial_content(self, day: date) -> str:
        if self.template_path is not None:
            template = self.vault_path / self.template_path
            try:
                content = template.read_text(encoding="utf-8")
            except OSError:
                logger.warning("Daily note template unreadable: %s", template)
            else:
                return content.replace("{{date}}", day.isoformat())
        post = frontmatter.Post("", date=day.isoformat(), type="daily")
        return frontmatter.dumps(post) + "\n"

    def read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write(self, path: Path, content: str) -> None:
        path.write_text(content, encoding="utf-8")

    def merge_section(self, day: date, heading: str, body: str) -> Path:
        """Merge `body` into the `heading` section of the note for `day`.

        The file is only rewritten when its content changes.
        """
        path = self.resolve_or_create(day)
        content = self.read(path)
        updated = merge_section(content, heading, body)
        if updated == content:
            logger.debug("Daily note unchanged: %s", path.name)
        else:
            self.write(path, updated)
            logger.info("Updated %s in %s", heading, path.name)
        return path
