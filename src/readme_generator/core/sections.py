"""Split README markdown into heading-delimited sections and splice edits back."""

from __future__ import annotations

import re
from dataclasses import dataclass

from readme_generator.schemas import Section
from readme_generator.utils import slugify

INTRODUCTION = "Introduction"

_HEADING = re.compile(r"^(#{1,3})\s+(\S.*)$")


class StaleSectionError(ValueError):
    """A Section no longer matches the markdown it is applied to."""


@dataclass
class _OpenSection:
    title: str
    start: int
    level: int


def clean_title(heading: str) -> str:
    """Keep letters, digits and whitespace only."""
    return "".join(ch for ch in heading if ch.isalnum() or ch.isspace()).strip()


def _make_section(lines: list[str], position: int, title: str, start: int, end: int, level: int) -> Section:
    return Section(
        id=f"{position}-{slugify(title)}",
        title=title,
        content="\n".join(lines[start:end + 1]),
        start_line=start,
        end_line=end,
        level=level,
    )


def segment_sections(markdown: str) -> list[Section]:
    """Split markdown at level 1-3 headings.

    Text before the first heading becomes a synthetic "Introduction" section,
    unless the document already has a heading with that title.
    """
    if not markdown:
        return []

    lines = markdown.split("\n")
    sections: list[Section] = []
    current: _OpenSection | None = None
    headings = [clean_title(m.group(2)) for m in map(_HEADING.match, lines) if m]
    explicit_intro = INTRODUCTION in headings

    def add_introduction(end: int) -> None:
        preamble = lines[: end + 1]
        if explicit_intro or not any(line.strip() for line in preamble):
            return
        sections.append(_make_section(lines, len(sections), INTRODUCTION, 0, end, 0))

    for index, line in enumerate(lines):
        match = _HEADING.match(line)
        if not match:
            continue
        if current is None:
            if index > 0:
                add_introduction(index - 1)
        else:
            sections.append(
                _make_section(lines, len(sections), current.title, current.start, index - 1, current.level)
            )
        current = _OpenSection(title=clean_title(match.group(2)), start=index, level=len(match.group(1)))

    last = len(lines) - 1
    if current is not None:
        sections.append(_make_section(lines, len(sections), current.title, current.start, last, current.level))
    else:
        add_introduction(last)

    return sections


def find_section(
    sections: list[Section],
    title: str | None = None,
    index: int | None = None,
) -> Section | None:
    """Address a section by position, or by title (first match wins)."""
    if index is not None:
        return sections[index] if 0 <= index < len(sections) else None
    if title is None:
        return None
    wanted = clean_title(title)
    for section in sections:
        if section.title == wanted:
            return section
    return None


def replace_section(markdown: str, section: Section, replacement: str) -> str:
    """Splice ``replacement`` over the section's line span.

    Raises:
        StaleSectionError: If the section was computed from different markdown.
    """
    lines = markdown.split("\n")
    start, end = section.start_line, section.end_line
    if start < 0 or end >= len(lines) or start > end:
        msg = f"Section '{section.title}' is out of range for this document"
        raise StaleSectionError(msg)
    if "\n".join(lines[start:end + 1]) != section.content:
        msg = f"Section '{section.title}' does not match the current document"
        raise StaleSectionError(msg)

    before = "\n".join(lines[:start])
    after = "\n".join(lines[end + 1:])
    return "\n".join(part for part in (before, replacement, after) if part)
