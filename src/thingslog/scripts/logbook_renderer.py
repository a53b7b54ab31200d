"""Render Logbook tasks as a markdown section body."""

from __future__ import annotations

import re

from thingslog.scripts.task_aggregator import group_tasks_by_area
from thingslog.settings import SyncConfig
from thingslog.things.logbook import Subtask, Task
from thingslog.vault.sections import heading_level, to_heading

THINGS_URL = "things:///show?id={uuid}"
WHITESPACE_RE = re.compile(r"\s+")


def get_tab(use_tab: bool, tab_size: int) -> str:
    """One indent unit: a tab, or tab_size spaces."""
    return "\t" if use_tab else " " * tab_size


def format_tag(tag: str, prefix: str) -> str:
    """`Deep Work` -> `#<prefix>deep-work`."""
    return f"#{prefix}{WHITESPACE_RE.sub('-', tag.strip()).lower()}"


class LogbookRenderer:
    """Renders tasks according to the user's sync settings."""

    def __init__(self, config: SyncConfig) -> None:
        self.config = config
        self.tab = get_tab(config.use_tab, config.tab_size)

    def _checkbox(self, task: Task) -> str:
        alt = self.config.alternative_checkbox_prefix
        if alt:
            return self.config.canceled_mark if task.cancelled else alt
        mark = self.config.canceled_mark if task.cancelled else "x"
        return f"- [{mark}]"

    def _subtask_checkbox(self, subtask: Subtask) -> str:
        alt = self.config.alternative_checkbox_prefix
        if subtask.completed:
            return alt or "- [x]"
        return "- [ ]"

    def _title(self, task: Task) -> str:
        title = task.title
        if self.config.include_link and task.uuid:
            title = f"[{title}]({THINGS_URL.format(uuid=task.uuid)})"
        tags = ""
        if self.config.include_tags:
            tags = " ".join(
                format_tag(tag, self.config.tag_prefix) for tag in task.tags if tag and tag.strip()
            )
        return f"{title} {tags}".rstrip()

    def render_task(self, task: Task) -> str:
        """Render one task, its notes and its checklist as markdown lines."""
        lines = [f"{self._checkbox(task)} {self._title(task)}".rstrip()]

        if self.config.does_sync_note_body and task.notes:
            lines.extend(
                f"{self.tab}{line}" for line in task.notes.rstrip().splitlines() if line.strip()
            )

        if self.config.render_checklists:
            lines.extend(
                f"{self.tab}{self._subtask_checkbox(subtask)} {subtask.title}"
                for subtask in task.subtasks
            )

        return "\n".join(line for line in lines if line.strip())

    def render(self, tasks: list[Task]) -> str:
        """Render a full section body: heading, area sub-headings and tasks."""
        section_heading = self.config.section_heading
        level = heading_level(section_heading)

        output = [section_heading]
        for area, area_tasks in group_tasks_by_area(tasks).items():
            if area and self.config.include_headers:
                output.append(to_heading(area, level + 1))
            output.extend(self.render_task(task) for task in area_tasks)

        return "\n".join(output)
