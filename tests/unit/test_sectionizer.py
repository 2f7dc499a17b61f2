"""Unit tests for section scanning and comment association."""

from __future__ import annotations

from docmargin.markers.sectionizer import (
    closes_marker,
    is_trigger_line,
    scan_document,
    split_lines,
)

LEGACY_MARKER = "<!--comment\nauthor: A\ndate: d\nid: {}\n{}\n-->"


class TestTriggerLines:
    """Tests for lines that open a section on their own."""

    def test_heading(self) -> None:
        """Markdown headings are triggers."""
        assert is_trigger_line("## Terms")

    def test_list_items(self) -> None:
        """Bullet and numbered list items are triggers."""
        assert is_trigger_line("- item")
        assert is_trigger_line("3. item")

    def test_bold_label(self) -> None:
        """A line starting with bold text is a trigger."""
        assert is_trigger_line("**Price:** $100")

    def test_word_label(self) -> None:
        """A ``Word:`` label is a trigger."""
        assert is_trigger_line("Note: read carefully")

    def test_plain_prose_is_not_trigger(self) -> None:
        """Ordinary sentences continue the current section."""
        assert not is_trigger_line("The seller agrees.")
        assert not is_trigger_line("#hashtag")


class TestClosesMarker:
    """Tests for close-token detection."""

    def test_open_token_alone_does_not_close(self) -> None:
        """The ``<!--`` of the open token is not a close token."""
        assert not closes_marker("<!--comment", is_open_line=True)

    def test_close_on_open_line(self) -> None:
        """A close token after the open token counts."""
        assert closes_marker("<!--comment-->", is_open_line=True)


class TestSplitLines:
    """Tests for split_lines."""

    def test_round_trip_is_exact(self) -> None:
        """Joining split lines restores the body byte-for-byte."""
        text = "a\r\nb\n\nc\n"
        assert "\n".join(split_lines(text)) == text


class TestSectioning:
    """Tests for splitting a body into sections."""

    def test_sample_sections(self, sample_document: str) -> None:
        """Blank lines and trigger lines both start sections."""
        scan = scan_document(sample_document)
        assert [s.content for s in scan.sections] == [
            ["# Contract of Sale"],
            ["The seller agrees to sell the goods."],
            ["**Price:** $100", "Payable on delivery."],
            ["- Item one"],
            ["- Item two"],
        ]

    def test_section_ids_from_start_line(self, sample_document: str) -> None:
        """Section ids are ``line-N`` with N the 1-based first content line."""
        scan = scan_document(sample_document)
        assert [s.section_id for s in scan.sections] == [
            "line-1",
            "line-3",
            "line-11",
            "line-22",
            "line-23",
        ]
        assert [s.index for s in scan.sections] == [0, 1, 2, 3, 4]

    def test_consecutive_headings(self) -> None:
        """Each heading starts its own section; prose continues the last."""
        scan = scan_document("# One\n## Two\nBody")
        assert [s.content for s in scan.sections] == [["# One"], ["## Two", "Body"]]

    def test_line_index(self, sample_document: str) -> None:
        """Every content line maps to its section; marker lines do not."""
        scan = scan_document(sample_document)
        assert scan.line_index == {0: 0, 2: 1, 10: 2, 11: 2, 21: 3, 22: 4}
        assert scan.section_for_line(11).index == 2
        assert scan.section_for_line(5) is None

    def test_section_spans_marker(self) -> None:
        """Content after a marker with no blank line stays in the section."""
        text = "Intro\n" + LEGACY_MARKER.format("x", "hi") + "\nMore text"
        scan = scan_document(text)
        assert len(scan.sections) == 1
        section = scan.sections[0]
        assert section.content == ["Intro", "More text"]
        assert section.line_numbers == [0, 7]
        assert section.end_line == 8

    def test_empty_document(self) -> None:
        """An empty body has no sections."""
        scan = scan_document("")
        assert scan.sections == []
        assert scan.annotations == []

    def test_scan_is_idempotent(self, sample_document: str) -> None:
        """Scanning the same body twice gives the same result."""
        assert (
            scan_document(sample_document).to_dict()
            == scan_document(sample_document).to_dict()
        )


class TestAssociation:
    """Tests for attaching comments to sections."""

    def test_sample_comments(self, sample_document: str) -> None:
        """Legacy and tagged comments attach to the expected sections."""
        scan = scan_document(sample_document)
        assert [c.id for c in scan.sections[1].comments] == ["c-alice"]
        assert [c.id for c in scan.sections[2].comments] == ["c-bob"]
        assert [c.id for c in scan.annotations] == ["c-alice", "c-bob"]

    def test_multiline_content(self, sample_document: str) -> None:
        """Comment bodies keep their inner newlines."""
        bob = scan_document(sample_document).find_annotation("c-bob")
        assert bob is not None
        assert bob.content == "Is GST included?\nPlease confirm."
        assert bob.target_section_id == "line-11"

    def test_marker_positions_recorded(self, sample_document: str) -> None:
        """Decoded comments remember where their block sits."""
        alice = scan_document(sample_document).find_annotation("c-alice")
        assert (alice.start_line, alice.end_line) == (3, 9)

    def test_legacy_attaches_to_most_recent_section(self) -> None:
        """A legacy marker after two sections belongs to the second."""
        text = "First section\n\nSecond section\n\n" + LEGACY_MARKER.format("x", "hi")
        scan = scan_document(text)
        assert scan.sections[0].comments == []
        assert [c.id for c in scan.sections[1].comments] == ["x"]

    def test_tag_resolves_to_named_section(self) -> None:
        """A tagged marker attaches to its section even when placed later."""
        text = (
            "First\n\nSecond\n\n"
            "<!--comment:line-1\nauthor: A\ndate: d\nid: t\nhi\n-->"
        )
        scan = scan_document(text)
        assert [c.id for c in scan.sections[0].comments] == ["t"]
        assert scan.sections[1].comments == []

    def test_stale_tag_falls_back_to_position(self) -> None:
        """A tag naming no section falls back to the positional rule."""
        text = "First\n\nSecond\n\n<!--comment:line-99\nauthor: A\ndate: d\nid: t\nhi\n-->"
        scan = scan_document(text)
        assert [c.id for c in scan.sections[1].comments] == ["t"]

    def test_marker_before_any_section_is_dropped(self) -> None:
        """A legacy marker with no preceding section has no owner."""
        text = LEGACY_MARKER.format("x", "orphan") + "\n\nText"
        scan = scan_document(text)
        assert scan.annotations == []
        assert [c.id for c in scan.dropped] == ["x"]
        assert scan.sections[0].content == ["Text"]

    def test_undecodable_marker_is_text(self) -> None:
        """A marker missing its fields is kept as ordinary content."""
        scan = scan_document("Text\n<!--comment\nnotafield: x\n-->")
        assert scan.annotations == []
        assert sorted(scan.line_index) == [0, 1, 2, 3]

    def test_unterminated_marker_is_text(self) -> None:
        """An open token with no close token is kept as ordinary content."""
        scan = scan_document("Intro\n<!--comment\nauthor: A")
        assert scan.annotations == []
        assert sorted(scan.line_index) == [0, 1, 2]

    def test_comments_in_body_order(self) -> None:
        """A section's comments are ordered by position, however resolved."""
        text = (
            "First\n\n"
            "<!--comment:line-1\nauthor: A\ndate: d\nid: one\nhi\n-->\n\n"
            "Second\n\n"
            "<!--comment:line-1\nauthor: A\ndate: d\nid: two\nhi\n-->"
        )
        scan = scan_document(text)
        assert [c.id for c in scan.sections[0].comments] == ["one", "two"]

    def test_section_by_id(self, sample_document: str) -> None:
        """Sections can be looked up by their id."""
        scan = scan_document(sample_document)
        assert scan.section_by_id("line-11").index == 2
        assert scan.section_by_id("line-2") is None
