"""Comment markers embedded in Markdown: codec, section scanner, mutations."""

from docmargin.markers.codec import (
    MalformedMarkerError,
    decode_marker,
    encode_marker,
    encode_marker_lines,
    find_malformed_markers,
    validate_markers,
)
from docmargin.markers.mutations import (
    MutationResult,
    add_comment,
    delete_comment,
    edit_comment,
)
from docmargin.markers.sectionizer import ScanState, scan_document

__all__ = [
    "MalformedMarkerError",
    "MutationResult",
    "ScanState",
    "add_comment",
    "decode_marker",
    "delete_comment",
    "edit_comment",
    "encode_marker",
    "encode_marker_lines",
    "find_malformed_markers",
    "scan_document",
    "validate_markers",
]
