"""Encoding, decoding and validation of comment marker blocks.

The codec owns the marker grammar (see ``markers/constants.py``). Decoding is
lenient: anything that does not match the full grammar yields ``None`` and is
left in the document as ordinary text. Validation is strict: any block that
starts with the comment open token but lacks the ``author:``/``date:``/``id:``
header is reported as malformed so that saves can be rejected before a
corrupted document reaches disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lark import Lark

from docmargin.markers.constants import (
    CLOSE_TOKEN,
    FIELD_TEMPLATE,
    MARKER_HEADER_PATTERN,
    MARKER_PATTERN,
    OPEN_TEMPLATE,
    OPEN_TOKEN,
    SECTION_ID_PATTERN,
)
from docmargin.models.annotation import Annotation

# Longest snippet of an offending block carried in error messages
_SNIPPET_LENGTH = 200


class MalformedMarkerError(ValueError):
    """A comment marker does not match the marker grammar.

    Attributes:
        snippets: The offending marker text(s), for diagnostics.
    """

    def __init__(self, message: str, snippets: list[str] | None = None) -> None:
        self.snippets = snippets or []
        super().__init__(message)

    def __str__(self) -> str:
        if not self.snippets:
            return self.args[0]
        shown = "\n---\n".join(self.snippets)
        return f"{self.args[0]}\n{shown}"


def is_marker_open(line: str) -> bool:
    """Return True if *line* starts a comment marker block."""
    return line.startswith(OPEN_TOKEN)


def decode_marker(block: str) -> Annotation | None:
    """Decode one marker block into an Annotation.

    Args:
        block: Marker text from the open token through the close token.

    Returns:
        The decoded Annotation, or None if the block does not carry the
        three required fields in order before the close token.
    """
    match = MARKER_PATTERN.match(block)
    if match is None:
        return None
    return Annotation(
        author=match.group("author").strip(),
        date=match.group("date").strip(),
        id=match.group("id").strip(),
        content=match.group("body").strip(),
        target_section_id=match.group("section") or None,
    )


def _check_single_line(name: str, value: str) -> None:
    if "\n" in value or "\r" in value:
        msg = f"Comment {name} must be a single line"
        raise MalformedMarkerError(msg, [value[:_SNIPPET_LENGTH]])
    if CLOSE_TOKEN in value:
        msg = f"Comment {name} may not contain '{CLOSE_TOKEN}'"
        raise MalformedMarkerError(msg, [value[:_SNIPPET_LENGTH]])


def encode_marker_lines(annotation: Annotation) -> list[str]:
    """Encode *annotation* as the list of lines making up its marker block.

    Raises:
        MalformedMarkerError: If a field value would break the grammar
            (a newline in a header field, a close token anywhere, or a
            section id with whitespace).
    """
    for name in ("author", "date", "id"):
        _check_single_line(name, getattr(annotation, name))
    if CLOSE_TOKEN in annotation.content:
        msg = f"Comment text may not contain '{CLOSE_TOKEN}'"
        raise MalformedMarkerError(msg, [annotation.content[:_SNIPPET_LENGTH]])

    section = annotation.target_section_id
    if section is not None and not SECTION_ID_PATTERN.fullmatch(section):
        msg = f"Invalid section id for comment marker: {section!r}"
        raise MalformedMarkerError(msg)

    lines = [OPEN_TEMPLATE.format(f":{section}" if section else "")]
    lines.append(FIELD_TEMPLATE.format("author", annotation.author))
    lines.append(FIELD_TEMPLATE.format("date", annotation.date))
    lines.append(FIELD_TEMPLATE.format("id", annotation.id))
    if annotation.content:
        lines.extend(annotation.content.split("\n"))
    lines.append(CLOSE_TOKEN)
    return lines


def encode_marker(annotation: Annotation) -> str:
    """Encode *annotation* as a marker block string (no trailing newline)."""
    return "\n".join(encode_marker_lines(annotation))


# ---------------------------------------------------------------------------
# Validation lexer
# ---------------------------------------------------------------------------
# BLOCK matches an HTML comment through its close token, or through the end
# of input when the close token is missing. TEXT catches everything else.
_BLOCK_GRAMMAR = (
    r"BLOCK: /<!--(?:(?!-->).)*(?:-->|\Z)/s" "\n"
    r"TEXT: /(?:(?!<!--).)+/s"
)

# Compile once at module load
_block_lexer = Lark(_BLOCK_GRAMMAR, parser=None, lexer="basic")


class BlockTokenType(Enum):
    """Token types for the validation lexer."""

    TEXT = "TEXT"
    BLOCK = "BLOCK"


@dataclass(frozen=True, slots=True)
class BlockToken:
    """A token from the validation lexer.

    Attributes:
        type: TEXT or BLOCK.
        value: The raw matched text.
        start_pos: Start offset in the input.
        end_pos: End offset in the input.
    """

    type: BlockTokenType
    value: str
    start_pos: int
    end_pos: int

    @property
    def is_comment_marker(self) -> bool:
        return self.type == BlockTokenType.BLOCK and self.value.startswith(OPEN_TOKEN)

    @property
    def is_closed(self) -> bool:
        return self.value.endswith(CLOSE_TOKEN)


def tokenize_blocks(text: str) -> list[BlockToken]:
    """Split *text* into HTML comment blocks and the prose between them.

    Example:
        >>> [t.type.value for t in tokenize_blocks("a <!-- b --> c")]
        ['TEXT', 'BLOCK', 'TEXT']
    """
    if not text:
        return []

    tokens: list[BlockToken] = []
    for lark_token in _block_lexer.lex(text):
        start_pos = lark_token.start_pos if lark_token.start_pos is not None else 0
        end_pos = lark_token.end_pos if lark_token.end_pos is not None else 0
        tokens.append(
            BlockToken(
                type=BlockTokenType[lark_token.type],
                value=lark_token.value,
                start_pos=start_pos,
                end_pos=end_pos,
            )
        )
    return tokens


def find_malformed_markers(text: str) -> list[str]:
    """Return the text of every malformed comment marker in *text*.

    A marker is malformed if it starts with the comment open token but is
    never closed, or lacks the ``author:``/``date:``/``id:`` header lines in
    order. Other HTML comments are treated as ordinary prose.
    """
    malformed: list[str] = []
    for token in tokenize_blocks(text):
        if not token.is_comment_marker:
            continue
        if token.is_closed and MARKER_HEADER_PATTERN.match(token.value):
            continue
        malformed.append(token.value[:_SNIPPET_LENGTH])
    return malformed


def validate_markers(text: str) -> None:
    """Raise if *text* contains any malformed comment marker.

    Raises:
        MalformedMarkerError: Listing the offending marker text.
    """
    malformed = find_malformed_markers(text)
    if malformed:
        count = len(malformed)
        msg = f"Document contains {count} malformed comment marker(s)"
        raise MalformedMarkerError(msg, malformed)
