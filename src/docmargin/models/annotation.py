"""Data models for document sections and the comments embedded in them.

These are plain dataclasses rebuilt from raw document text on every scan.
Nothing here is persisted directly: the document body is the only store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def section_id_for_line(start_line: int) -> str:
    """Return the position-derived section id for a 0-based start line."""
    return f"line-{start_line + 1}"


@dataclass(frozen=True, slots=True)
class Annotation:
    """A comment decoded from (or about to be encoded into) a marker block.

    Attributes:
        author: Free-text author name.
        date: ISO-8601 timestamp captured when the comment was created.
        id: Unique token, immutable once created.
        content: Comment body, possibly multi-line, stored trimmed.
        target_section_id: Section id captured at creation time, or None for
            legacy markers.
        start_line: First line of the marker block in the scanned body.
        end_line: Line after the marker block's close token.
    """

    author: str
    date: str
    id: str
    content: str
    target_section_id: str | None = None
    start_line: int | None = field(default=None, compare=False)
    end_line: int | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "author": self.author,
            "date": self.date,
            "id": self.id,
            "content": self.content,
            "target_section_id": self.target_section_id,
        }


@dataclass
class Section:
    """A contiguous run of content lines treated as one commentable unit.

    Attributes:
        index: Position of the section in scan order.
        start_line: 0-based index of the first content line.
        content: The section's lines, in order.
        comments: Annotations attached to this section, in body order.
        line_numbers: Body line index of each entry in ``content``. A marker
            block inside a section leaves a gap here.
    """

    index: int
    start_line: int
    content: list[str] = field(default_factory=list)
    comments: list[Annotation] = field(default_factory=list)
    line_numbers: list[int] = field(default_factory=list)

    @property
    def section_id(self) -> str:
        return section_id_for_line(self.start_line)

    @property
    def end_line(self) -> int:
        """Exclusive index after the last content line."""
        if not self.line_numbers:
            return self.start_line + len(self.content)
        return self.line_numbers[-1] + 1

    def append_line(self, line_no: int, line: str) -> None:
        self.content.append(line)
        self.line_numbers.append(line_no)

    @property
    def text(self) -> str:
        return "\n".join(self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "section_id": self.section_id,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "content": list(self.content),
            "comments": [c.to_dict() for c in self.comments],
        }


@dataclass
class DocumentScan:
    """Sections and their comments, derived from one document body.

    Attributes:
        sections: Sections in scan order.
        line_index: Maps each content line to the index of its section.
        dropped: Comments that decoded but had no section to attach to.
    """

    sections: list[Section] = field(default_factory=list)
    line_index: dict[int, int] = field(default_factory=dict)
    dropped: list[Annotation] = field(default_factory=list)

    @property
    def annotations(self) -> list[Annotation]:
        """All attached comments, ordered by their position in the body."""
        found = [c for s in self.sections for c in s.comments]
        return sorted(found, key=lambda c: c.start_line or 0)

    def find_annotation(self, comment_id: str) -> Annotation | None:
        for section in self.sections:
            for comment in section.comments:
                if comment.id == comment_id:
                    return comment
        return None

    def section_for_line(self, line: int) -> Section | None:
        idx = self.line_index.get(line)
        return None if idx is None else self.sections[idx]

    def section_by_id(self, section_id: str) -> Section | None:
        for section in self.sections:
            if section.section_id == section_id:
                return section
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"sections": [s.to_dict() for s in self.sections]}
