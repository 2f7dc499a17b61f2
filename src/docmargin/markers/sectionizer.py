"""Split a Markdown body into commentable sections and collect their comments.

One pass over the body's lines, driven by an explicit state machine:

- **IDLE**: between sections (start of input, or after a blank line).
- **IN_SECTION**: accumulating content lines for the current section.
- **IN_MARKER**: buffering a comment marker block up to its close token.

A section is closed by a blank line or by a *trigger* line (heading, list
item, bold label or ``Word:`` label) that follows existing content. Marker
blocks are never section content: they are decoded and attached to a
section, either the one named on the open token (``<!--comment:line-N``) or,
for legacy markers, the most recent section with content.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from docmargin.markers.codec import decode_marker, is_marker_open
from docmargin.markers.constants import CLOSE_TOKEN, OPEN_TOKEN
from docmargin.models.annotation import Annotation, DocumentScan, Section

logger = logging.getLogger(__name__)

# Lines that start a new section even without a blank line before them.
_TRIGGER_PATTERNS = (
    re.compile(r"#{1,6}(?:\s|$)"),  # heading
    re.compile(r"(?:[-*+]|\d+[.)])\s"),  # list item
    re.compile(r"\*\*"),  # bold label
    re.compile(r"[A-Za-z][\w-]*:(?:\s|$)"),  # Word: label
)


def split_lines(text: str) -> list[str]:
    """Split a body into lines so that ``"\\n".join()`` restores it exactly."""
    return text.split("\n")


def is_blank(line: str) -> bool:
    return not line.strip()


def is_trigger_line(line: str) -> bool:
    """Return True if *line* starts a new section on its own."""
    return any(p.match(line) for p in _TRIGGER_PATTERNS)


def closes_marker(line: str, *, is_open_line: bool = False) -> bool:
    """Return True if *line* contains the marker close token.

    On the open line itself only text after the open token counts, so
    ``<!--comment-->`` closes but the ``<!--`` of the open token does not.
    """
    if is_open_line:
        line = line[len(OPEN_TOKEN) :]
    return CLOSE_TOKEN in line


class ScanState(Enum):
    """States of the section scanner."""

    IDLE = "idle"
    IN_SECTION = "in_section"
    IN_MARKER = "in_marker"


@dataclass
class _PendingComment:
    """A decoded comment waiting for section association."""

    annotation: Annotation
    # Most recent section with content at the marker's position
    fallback: int | None


@dataclass
class _Scanner:
    """Mutable state threaded through the scan."""

    lines: list[str]
    state: ScanState = ScanState.IDLE
    sections: list[Section] = field(default_factory=list)
    current: Section | None = None
    marker_start: int = 0
    marker_buffer: list[str] = field(default_factory=list)
    resume_state: ScanState = ScanState.IDLE
    pending: list[_PendingComment] = field(default_factory=list)

    # -- section accumulation ------------------------------------------------

    def open_section(self, line_no: int) -> None:
        self.current = Section(index=len(self.sections), start_line=line_no)
        self.current.append_line(line_no, self.lines[line_no])
        self.state = ScanState.IN_SECTION

    def close_section(self) -> None:
        if self.current is not None and self.current.content:
            self.sections.append(self.current)
        self.current = None
        self.state = ScanState.IDLE

    def latest_section(self) -> int | None:
        """Index of the most recent section with content, open or closed."""
        if self.current is not None and self.current.content:
            return self.current.index
        if self.sections:
            return self.sections[-1].index
        return None

    def handle_content(self, line_no: int) -> None:
        line = self.lines[line_no]
        if self.state == ScanState.IN_SECTION:
            if is_blank(line):
                self.close_section()
            elif is_trigger_line(line):
                self.close_section()
                self.open_section(line_no)
            else:
                self.current.append_line(line_no, line)  # type: ignore[union-attr]
        elif not is_blank(line):
            self.open_section(line_no)

    # -- marker collection ---------------------------------------------------

    def begin_marker(self, line_no: int) -> None:
        self.resume_state = self.state
        self.state = ScanState.IN_MARKER
        self.marker_start = line_no
        self.marker_buffer = [self.lines[line_no]]
        if closes_marker(self.lines[line_no], is_open_line=True):
            self.finish_marker(line_no)

    def finish_marker(self, line_no: int) -> None:
        self.state = self.resume_state
        annotation = decode_marker("\n".join(self.marker_buffer))
        if annotation is None:
            logger.debug(
                "Undecodable comment marker at line %d kept as text",
                self.marker_start + 1,
            )
            self.replay_marker()
            return

        positioned = Annotation(
            author=annotation.author,
            date=annotation.date,
            id=annotation.id,
            content=annotation.content,
            target_section_id=annotation.target_section_id,
            start_line=self.marker_start,
            end_line=line_no + 1,
        )
        self.pending.append(_PendingComment(positioned, self.latest_section()))
        self.marker_buffer = []

    def replay_marker(self) -> None:
        """Feed buffered marker lines back through as ordinary content."""
        buffered = len(self.marker_buffer)
        self.marker_buffer = []
        for line_no in range(self.marker_start, self.marker_start + buffered):
            self.handle_content(line_no)

    # -- driver --------------------------------------------------------------

    def run(self) -> None:
        for line_no, line in enumerate(self.lines):
            if self.state == ScanState.IN_MARKER:
                self.marker_buffer.append(line)
                if closes_marker(line):
                    self.finish_marker(line_no)
            elif is_marker_open(line):
                self.begin_marker(line_no)
            else:
                self.handle_content(line_no)

        if self.state == ScanState.IN_MARKER:
            # Unterminated marker: the block is ordinary text
            logger.debug(
                "Unterminated comment marker at line %d kept as text",
                self.marker_start + 1,
            )
            self.state = self.resume_state
            self.replay_marker()

        self.close_section()


def _associate(scanner: _Scanner, scan: DocumentScan) -> None:
    """Attach pending comments to their sections."""
    by_id = {s.section_id: s for s in scan.sections}
    for item in scanner.pending:
        target = item.annotation.target_section_id
        section = by_id.get(target) if target else None
        if section is None and item.fallback is not None:
            section = scan.sections[item.fallback]
        if section is None:
            logger.debug(
                "Dropping comment %s at line %d: no section to attach to",
                item.annotation.id,
                (item.annotation.start_line or 0) + 1,
            )
            scan.dropped.append(item.annotation)
            continue
        section.comments.append(item.annotation)

    # Keep comments in body order regardless of how they were resolved
    for section in scan.sections:
        section.comments.sort(key=lambda c: c.start_line or 0)


def scan_document(text: str) -> DocumentScan:
    """Scan a document body into sections with their attached comments.

    Args:
        text: Full document body.

    Returns:
        DocumentScan with sections in order, a line-to-section index and
        any comments that could not be attached.
    """
    scanner = _Scanner(lines=split_lines(text))
    scanner.run()

    scan = DocumentScan(sections=scanner.sections)
    for section in scan.sections:
        for line_no in section.line_numbers:
            scan.line_index[line_no] = section.index

    _associate(scanner, scan)
    return scan
