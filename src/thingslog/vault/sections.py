"""Heading-delimited section replacement for markdown documents.

Works on raw lines, not a markdown AST: a section runs from its heading line
to the next heading of equal or shallower level, or the end of the document.
"""

import re

HEADING_RE = re.compile(r"^(#{1,6})(?:[ \t]|$)")
FRONTMATTER_FENCE = "---"


def heading_level(line: str) -> int:
    """Return the ATX heading level of a line, or 0 if it is not a heading.

    "#tag" is a tag, not a heading.
    """
    match = HEADING_RE.match(line)
    return len(match.group(1)) if match else 0


def to_heading(text: str, level: int) -> str:
    return f"{'#' * level} {text}"


def _body_start(lines: list[str]) -> int:
    """Index of the first line after a leading YAML frontmatter block."""
    if not lines or lines[0].rstrip() != FRONTMATTER_FENCE:
        return 0
    for i in range(1, len(lines)):
        if lines[i].rstrip() == FRONTMATTER_FENCE:
            return i + 1
    return 0


def find_section(lines: list[str], heading: str) -> tuple[int, int] | None:
    """Locate the first section whose heading line matches `heading` exactly.

    Returns (start, end) line indices, end exclusive, or None.
    """
    target = heading.strip()
    level = heading_level(target)
    start = None
    for i in range(_body_start(lines), len(lines)):
        line = lines[i]
        if start is None:
            if line.rstrip() == target:
                start = i
            continue
        current = heading_level(line)
        if current and (not level or current <= level):
            return start, i
    if start is None:
        return None
    return start, len(lines)


def merge_section(text: str, heading: str, body: str) -> str:
    """Replace the body of the section headed by `heading` with `body`.

    `body` is expected to start with the heading line itself. When the heading
    is missing, `body` is appended after a blank line.
    """
    body = body.rstrip("\n")
    if not text:
        return body + "\n"

    trailing_newline = text.endswith("\n")
    lines = (text[:-1] if trailing_newline else text).split("\n")

    span = find_section(lines, heading)
    if span is None:
        separator = "\n" if trailing_newline else "\n\n"
        return f"{text}{separator}{body}\n"

    start, end = span
    merged = [*lines[:start], *body.split("\n"), *lines[end:]]
    return "\n".join(merged) + ("\n" if trailing_newline else "")
