"""Things 3 Logbook to Obsidian daily notes sync."""

__version__ = "0.1.0"
