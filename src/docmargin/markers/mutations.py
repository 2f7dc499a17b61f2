"""Add, edit and delete comment markers in a document body.

Every operation is a pure function of the current body text and its
arguments, and returns a new body in a MutationResult. Operations work on the
raw lines of the body, never on a previously derived DocumentScan, so a stale
scan cannot corrupt the document. Lines outside the affected marker block are
passed through byte-identical, except the open lines of other markers whose
``line-N`` tag is renumbered to follow its section when lines shift.

Not-found conditions are reported through ``MutationResult.count == 0``
rather than exceptions; callers decide whether that is an error.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from docmargin.markers.codec import (
    decode_marker,
    encode_marker_lines,
    is_marker_open,
    validate_markers,
)
from docmargin.markers.constants import DEFAULT_AUTHOR, LINE_TAG_PATTERN
from docmargin.markers.sectionizer import (
    closes_marker,
    is_blank,
    scan_document,
    split_lines,
)
from docmargin.models.annotation import Annotation

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Outcome of a single mutation.

    Attributes:
        text: The new document body (the input body when nothing changed).
        count: Number of marker blocks inserted, rewritten or removed.
        annotation: The comment as written, for add and edit.
    """

    text: str
    count: int = 0
    annotation: Annotation | None = None

    @property
    def changed(self) -> bool:
        return self.count > 0


@dataclass(frozen=True, slots=True)
class MarkerBlock:
    """Location of one marker block in a body's lines.

    Attributes:
        start: Index of the open-token line.
        end: Index after the close-token line.
        annotation: The decoded comment, or None if the block did not decode.
    """

    start: int
    end: int
    annotation: Annotation | None


def iso_timestamp(moment: datetime | None = None) -> str:
    """Format *moment* (default: now) as UTC ISO-8601 with milliseconds.

    Example: ``2025-01-15T10:30:00.000Z``.
    """
    moment = (moment or datetime.now(UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _marker_end(lines: list[str], start: int) -> int | None:
    """Return the index after the close line of the marker opened at *start*."""
    if closes_marker(lines[start], is_open_line=True):
        return start + 1
    for i in range(start + 1, len(lines)):
        if closes_marker(lines[i]):
            return i + 1
    return None


def iter_marker_blocks(lines: list[str]) -> Iterator[MarkerBlock]:
    """Yield every marker block in *lines*, in order.

    An open token without a close token is not a block; scanning resumes on
    the following line.
    """
    i = 0
    while i < len(lines):
        if not is_marker_open(lines[i]):
            i += 1
            continue
        end = _marker_end(lines, i)
        if end is None:
            i += 1
            continue
        annotation = decode_marker("\n".join(lines[i:end]))
        yield MarkerBlock(start=i, end=end, annotation=annotation)
        i = end


def _section_end(lines: list[str], start: int) -> int:
    """Walk forward from *start* over non-blank lines and whole marker blocks."""
    i = start
    while i < len(lines) and not is_blank(lines[i]):
        if is_marker_open(lines[i]):
            end = _marker_end(lines, i)
            if end is not None:
                i = end
                continue
        i += 1
    return i


# (old line index, delta): every old line at or after the index moves by delta
LineShift = tuple[int, int]


def _shifted(line_no: int, shifts: list[LineShift]) -> int:
    return line_no + sum(delta for at, delta in shifts if line_no >= at)


def _retag(lines: list[str], shifts: list[LineShift]) -> list[str]:
    """Renumber ``line-N`` section tags after lines were inserted or removed.

    Tags in *lines* still name sections by their old start line. Each tag is
    moved by the same amount as the line it names, so a comment keeps its
    section instead of being captured by whichever section now starts at
    the old line number.
    """
    if not any(delta for _, delta in shifts):
        return lines
    out = list(lines)
    for block in iter_marker_blocks(out):
        match = LINE_TAG_PATTERN.match(out[block.start])
        if match is None:
            continue
        old_start = int(match.group("number")) - 1
        new_start = _shifted(old_start, shifts)
        if new_start != old_start:
            out[block.start] = (
                f"{match.group('prefix')}{new_start + 1}{match.group('rest')}"
            )
    return out


def add_comment(
    text: str,
    section_index: int,
    content: str,
    *,
    author: str = DEFAULT_AUTHOR,
    comment_id: str | None = None,
    created_at: datetime | None = None,
) -> MutationResult:
    """Insert a new comment marker after a section.

    The marker is tagged with the section's id and spliced, preceded by a
    blank line, after the section's last non-blank line.

    Args:
        text: Current document body.
        section_index: Index of the target section in a scan of *text*.
        content: Comment text. Leading/trailing whitespace is trimmed.
        author: Author name written into the marker.
        comment_id: Id for the new comment (default: a fresh uuid4).
        created_at: Creation time (default: now).

    Returns:
        MutationResult with the new body and the created Annotation, or the
        unchanged body with ``count == 0`` when *content* is empty.

    Raises:
        IndexError: If *section_index* does not name a section of *text*.
        MalformedMarkerError: If the comment cannot be encoded, or the new
            body fails marker validation.
    """
    content = content.strip()
    if not content:
        return MutationResult(text=text)

    scan = scan_document(text)
    if not 0 <= section_index < len(scan.sections):
        msg = f"Section index {section_index} out of range ({len(scan.sections)})"
        raise IndexError(msg)
    section = scan.sections[section_index]

    annotation = Annotation(
        author=author,
        date=iso_timestamp(created_at),
        id=comment_id or str(uuid.uuid4()),
        content=content,
        target_section_id=section.section_id,
    )
    marker_lines = encode_marker_lines(annotation)

    lines = split_lines(text)
    end = _section_end(lines, section.start_line)
    inserted = ["", *marker_lines]
    new_lines = _retag(
        [*lines[:end], *inserted, *lines[end:]], [(end, len(inserted))]
    )
    new_text = "\n".join(new_lines)

    validate_markers(new_text)
    return MutationResult(text=new_text, count=1, annotation=annotation)


def delete_comment(text: str, comment_id: str) -> MutationResult:
    """Remove the marker block(s) whose decoded id is *comment_id*.

    Section tags of the markers below are renumbered by the removed lines.

    Returns:
        MutationResult with the marker lines omitted, or the unchanged body
        with ``count == 0`` when no block matches.
    """
    lines = split_lines(text)
    out: list[str] = []
    shifts: list[LineShift] = []
    cursor = 0
    for block in iter_marker_blocks(lines):
        if block.annotation is None or block.annotation.id != comment_id:
            continue
        out.extend(lines[cursor : block.start])
        shifts.append((block.end, block.start - block.end))
        cursor = block.end

    if not shifts:
        return MutationResult(text=text)
    out.extend(lines[cursor:])
    return MutationResult(text="\n".join(_retag(out, shifts)), count=len(shifts))


def edit_comment(text: str, comment_id: str, content: str) -> MutationResult:
    """Replace the body of the marker block(s) whose id is *comment_id*.

    Author, date, id and section tag are preserved.

    Returns:
        MutationResult with the re-encoded block spliced in place, or the
        unchanged body with ``count == 0`` when no block matches or *content*
        is empty.

    Raises:
        MalformedMarkerError: If the new content cannot be encoded.
    """
    content = content.strip()
    if not content:
        return MutationResult(text=text)

    lines = split_lines(text)
    out: list[str] = []
    shifts: list[LineShift] = []
    cursor = 0
    edited: Annotation | None = None
    for block in iter_marker_blocks(lines):
        if block.annotation is None or block.annotation.id != comment_id:
            continue
        old = block.annotation
        edited = Annotation(
            author=old.author,
            date=old.date,
            id=old.id,
            content=content,
            target_section_id=old.target_section_id,
        )
        marker_lines = encode_marker_lines(edited)
        out.extend(lines[cursor : block.start])
        out.extend(marker_lines)
        shifts.append((block.end, len(marker_lines) - (block.end - block.start)))
        cursor = block.end

    if not shifts:
        return MutationResult(text=text)
    out.extend(lines[cursor:])
    new_text = "\n".join(_retag(out, shifts))
    validate_markers(new_text)
    return MutationResult(text=new_text, count=len(shifts), annotation=edited)
