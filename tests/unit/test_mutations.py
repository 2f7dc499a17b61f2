"""Unit tests for adding, editing and deleting comment markers."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from docmargin.markers.codec import MalformedMarkerError, find_malformed_markers
from docmargin.markers.mutations import (
    add_comment,
    delete_comment,
    edit_comment,
    iso_timestamp,
    iter_marker_blocks,
)
from docmargin.markers.sectionizer import scan_document, split_lines

CREATED = datetime(2025, 2, 1, 8, 15, 30, 123456, tzinfo=UTC)


class TestIsoTimestamp:
    """Tests for iso_timestamp."""

    def test_millisecond_utc_format(self) -> None:
        """Timestamps use milliseconds and a Z suffix."""
        assert iso_timestamp(CREATED) == "2025-02-01T08:15:30.123Z"

    def test_defaults_to_now(self) -> None:
        """Without an argument the current time is used."""
        assert iso_timestamp().endswith("Z")


class TestIterMarkerBlocks:
    """Tests for iter_marker_blocks."""

    def test_finds_sample_blocks(self, sample_document: str) -> None:
        """Both sample markers are found with their line spans."""
        blocks = list(iter_marker_blocks(split_lines(sample_document)))
        assert [(b.start, b.end) for b in blocks] == [(3, 9), (13, 20)]
        assert [b.annotation.id for b in blocks] == ["c-alice", "c-bob"]

    def test_unclosed_open_is_not_a_block(self) -> None:
        """An open token without a close token yields nothing."""
        assert list(iter_marker_blocks(["<!--comment", "author: a"])) == []


class TestAddComment:
    """Tests for add_comment."""

    def test_add_then_scan_recovers_comment(self, sample_document: str) -> None:
        """A new comment is found on the target section after a re-scan."""
        result = add_comment(
            sample_document,
            0,
            "  Nice title  ",
            comment_id="c-new",
            created_at=CREATED,
        )
        assert result.count == 1
        scan = scan_document(result.text)
        assert [c.id for c in scan.sections[0].comments] == ["c-new"]
        added = scan.find_annotation("c-new")
        assert added.content == "Nice title"
        assert added.author == "You"
        assert added.date == "2025-02-01T08:15:30.123Z"
        assert added.target_section_id == "line-1"
        assert result.annotation == added

    def test_marker_inserted_after_blank_line(self, sample_document: str) -> None:
        """The marker follows the section's last line, after a blank line."""
        result = add_comment(sample_document, 0, "x", comment_id="c-new")
        lines = split_lines(result.text)
        assert lines[:3] == ["# Contract of Sale", "", "<!--comment:line-1"]

    def test_other_comments_survive(self, sample_document: str) -> None:
        """Existing comments keep their sections after lines shift."""
        scan = scan_document(add_comment(sample_document, 0, "x").text)
        assert [c.id for c in scan.sections[1].comments] == ["c-alice"]
        assert [c.id for c in scan.sections[2].comments] == ["c-bob"]

    def test_appends_after_existing_comment(self, sample_document: str) -> None:
        """Adding to a commented section places the new marker last."""
        result = add_comment(sample_document, 1, "Second thought", comment_id="c-new")
        scan = scan_document(result.text)
        assert [c.id for c in scan.sections[1].comments] == ["c-alice", "c-new"]

    def test_blank_line_inside_comment_body(self) -> None:
        """The section walk steps over whole markers, blank lines included."""
        text = (
            "Intro line\n"
            "<!--comment\nauthor: A\ndate: d\nid: x\nPara one\n\nPara two\n-->\n"
            "More text\n"
            "\n"
            "Next"
        )
        result = add_comment(text, 0, "Later", comment_id="c-new")
        assert find_malformed_markers(result.text) == []
        scan = scan_document(result.text)
        assert [c.id for c in scan.sections[0].comments] == ["x", "c-new"]
        assert scan.find_annotation("x").content == "Para one\n\nPara two"
        assert scan.sections[1].content == ["Next"]

    def test_author_override(self, sample_document: str) -> None:
        """The author can be set per comment."""
        result = add_comment(sample_document, 3, "ok", author="Carol")
        assert result.annotation.author == "Carol"

    def test_empty_content_is_noop(self, sample_document: str) -> None:
        """Blank content leaves the body untouched."""
        result = add_comment(sample_document, 0, "   \n ")
        assert result.count == 0
        assert not result.changed
        assert result.text == sample_document

    def test_out_of_range_section(self, sample_document: str) -> None:
        """A stale section index is an error."""
        with pytest.raises(IndexError):
            add_comment(sample_document, 5, "x")

    def test_close_token_in_content_rejected(self, sample_document: str) -> None:
        """Content that would break the marker is refused."""
        with pytest.raises(MalformedMarkerError):
            add_comment(sample_document, 0, "a --> b")

    def test_crlf_lines_preserved(self) -> None:
        """Carriage returns on untouched lines survive."""
        text = "One\r\nstill one\r\n\r\nTwo\r\n"
        result = add_comment(text, 0, "x")
        assert result.text.startswith("One\r\nstill one\r\n")
        assert result.text.endswith("-->\n\r\nTwo\r\n")


class TestDeleteComment:
    """Tests for delete_comment."""

    def test_removes_only_the_block(self, sample_document: str) -> None:
        """The marker lines go; other lines keep their order and text."""
        lines = split_lines(sample_document)
        result = delete_comment(sample_document, "c-alice")
        assert result.count == 1
        expected = lines[:3] + lines[9:]
        # Bob's section moved up six lines, and its tag with it
        expected[7] = "<!--comment:line-5"
        assert split_lines(result.text) == expected

    def test_comment_count_drops_by_one(self, sample_document: str) -> None:
        """N comments become N-1."""
        before = scan_document(sample_document).annotations
        after = scan_document(delete_comment(sample_document, "c-bob").text)
        assert len(after.annotations) == len(before) - 1
        assert after.find_annotation("c-bob") is None

    def test_unknown_id_is_noop(self, sample_document: str) -> None:
        """Deleting a missing id changes nothing."""
        result = delete_comment(sample_document, "nope")
        assert result.count == 0
        assert result.text == sample_document

    def test_delete_after_add_restores_body(self, sample_document: str) -> None:
        """Deleting a just-added comment leaves only the spacer line."""
        added = add_comment(sample_document, 2, "temp", comment_id="c-tmp")
        removed = delete_comment(added.text, "c-tmp")
        assert removed.count == 1
        assert scan_document(removed.text).find_annotation("c-tmp") is None


class TestEditComment:
    """Tests for edit_comment."""

    def test_preserves_identity(self, sample_document: str) -> None:
        """Author, date, id and section tag survive an edit."""
        result = edit_comment(sample_document, "c-bob", "  GST is included.  ")
        assert result.count == 1
        edited = scan_document(result.text).find_annotation("c-bob")
        assert edited.content == "GST is included."
        assert edited.author == "Bob"
        assert edited.date == "2025-01-16T09:00:00.000Z"
        assert edited.target_section_id == "line-11"

    def test_other_lines_untouched(self, sample_document: str) -> None:
        """Lines outside the edited block are byte-identical."""
        lines = split_lines(sample_document)
        new_lines = split_lines(edit_comment(sample_document, "c-alice", "new").text)
        assert new_lines[:3] == lines[:3]
        assert new_lines[-15:] == lines[-15:]

    def test_multiline_edit(self, sample_document: str) -> None:
        """An edit may change the number of body lines."""
        result = edit_comment(sample_document, "c-alice", "one\ntwo\nthree")
        scan = scan_document(result.text)
        assert scan.find_annotation("c-alice").content == "one\ntwo\nthree"
        assert [c.id for c in scan.sections[1].comments] == ["c-alice"]

    def test_unknown_id_is_noop(self, sample_document: str) -> None:
        """Editing a missing id changes nothing."""
        result = edit_comment(sample_document, "nope", "text")
        assert result.count == 0
        assert result.text == sample_document

    def test_empty_content_is_noop(self, sample_document: str) -> None:
        """Blank replacement text changes nothing."""
        assert edit_comment(sample_document, "c-bob", "  ").count == 0


def _owner(text: str, comment_id: str) -> list[str]:
    """Content of the section holding *comment_id*."""
    for section in scan_document(text).sections:
        if any(c.id == comment_id for c in section.comments):
            return section.content
    return []


# Sections A (line-1), B (line-3) and C (line-10), with a comment tagged on C.
# Adding to A pushes B down to line 10, the number C's tag still names.
SHIFTING_DOCUMENT = "\n".join(
    [
        "A",
        "",
        "B",
        "b2",
        "b3",
        "b4",
        "b5",
        "b6",
        "",
        "C",
        "",
        "<!--comment:line-10",
        "author: X",
        "date: 2025-01-15T10:30:00.000Z",
        "id: c1",
        "on C",
        "-->",
    ]
)


class TestTagsFollowSections:
    """Section tags are renumbered when a mutation shifts lines."""

    def test_add_above_keeps_owner(self) -> None:
        """Adding a comment above a tagged one does not move it."""
        assert _owner(SHIFTING_DOCUMENT, "c1") == ["C"]
        result = add_comment(SHIFTING_DOCUMENT, 0, "on A", comment_id="a1")
        assert _owner(result.text, "c1") == ["C"]
        assert _owner(result.text, "a1") == ["A"]
        assert "<!--comment:line-17" in split_lines(result.text)

    def test_delete_above_keeps_owner(self) -> None:
        """Removing a comment above a tagged one does not move it."""
        added = add_comment(SHIFTING_DOCUMENT, 0, "on A", comment_id="a1")
        result = delete_comment(added.text, "a1")
        assert _owner(result.text, "c1") == ["C"]
        # One spacer line from the add remains above B
        assert "<!--comment:line-11" in split_lines(result.text)

    def test_delete_renumbers_later_tag(self) -> None:
        """Removing lines above a tagged comment moves its tag up."""
        body = (
            "A\n\n<!--comment:line-1\nauthor: X\ndate: d\nid: a1\nhi\n-->\n\n"
            "B\n\nC\n\n<!--comment:line-12\nauthor: X\ndate: d\nid: c1\nhi\n-->"
        )
        assert _owner(body, "c1") == ["C"]
        result = delete_comment(body, "a1")
        assert _owner(result.text, "c1") == ["C"]
        assert "<!--comment:line-6" in split_lines(result.text)

    def test_growing_edit_keeps_later_owner(self) -> None:
        """A longer comment body pushes later tags down with their sections."""
        added = add_comment(SHIFTING_DOCUMENT, 1, "on B", comment_id="b1")
        result = edit_comment(added.text, "b1", "one\ntwo\nthree\nfour")
        assert _owner(result.text, "c1") == ["C"]
        assert _owner(result.text, "b1") == ["B", "b2", "b3", "b4", "b5", "b6"]
        assert "<!--comment:line-20" in split_lines(result.text)

    def test_tags_above_splice_untouched(self, sample_document: str) -> None:
        """Tags naming sections above the change keep their number."""
        result = add_comment(sample_document, 4, "last", comment_id="z")
        lines = split_lines(result.text)
        assert lines[13] == "<!--comment:line-11"
