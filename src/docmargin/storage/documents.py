"""Read and write Markdown documents under the docs root.

These are the read/write collaborators for the annotation core: they know how
document paths map to files, the core does not. Paths are always relative
POSIX paths under the root; anything that would escape the root is refused.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath

from docmargin.markers.codec import validate_markers
from docmargin.models.document import DocumentEntry

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".md"


class DocumentNotFoundError(FileNotFoundError):
    """Raised when a document path does not name an existing file."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Document not found: {path}")


class InvalidDocumentPathError(ValueError):
    """Raised when a document path is absolute, hidden, escapes the root or
    is not a Markdown file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid document path {path!r}: {reason}")


def list_documents(root: Path) -> list[DocumentEntry]:
    """Recursively list Markdown documents under *root*.

    Hidden files and directories (names starting with ``.``) are skipped.

    Returns:
        DocumentEntry list sorted by relative path.

    Raises:
        OSError: If *root* cannot be read.
    """
    entries: list[DocumentEntry] = []
    _collect(root, PurePosixPath(), entries)
    return sorted(entries, key=lambda e: e.path)


def _collect(directory: Path, relative: PurePosixPath, out: list[DocumentEntry]) -> None:
    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if child.name.startswith("."):
            continue
        if child.is_dir():
            _collect(child, relative / child.name, out)
        elif child.name.endswith(DOCUMENT_SUFFIX):
            out.append(DocumentEntry.from_path(relative / child.name))


def resolve_document_path(root: Path, path: str) -> Path:
    """Map a relative document path to a file under *root*.

    Args:
        root: Docs root directory.
        path: Relative POSIX path, e.g. ``contracts/lease.md``.

    Returns:
        Absolute path of the existing document.

    Raises:
        InvalidDocumentPathError: For absolute, hidden, escaping or
            non-Markdown paths.
        DocumentNotFoundError: If no such file exists.
    """
    relative = PurePosixPath(path)
    if not path or relative.is_absolute():
        raise InvalidDocumentPathError(path, "must be a relative path")
    if any(part.startswith(".") for part in relative.parts):
        raise InvalidDocumentPathError(path, "hidden or parent path components")
    if relative.suffix != DOCUMENT_SUFFIX:
        raise InvalidDocumentPathError(path, "not a Markdown document")

    safe_base = root.resolve()
    requested = (safe_base / relative).resolve()
    if not requested.is_relative_to(safe_base):
        logger.warning("Path traversal attempt blocked: %s", path)
        raise InvalidDocumentPathError(path, "outside the documents directory")
    if not requested.is_file():
        raise DocumentNotFoundError(path)
    return requested


def read_document(root: Path, path: str) -> str:
    """Read a document's full body without newline translation."""
    file_path = resolve_document_path(root, path)
    with file_path.open(encoding="utf-8", newline="") as f:
        return f.read()


def write_document(root: Path, path: str, text: str) -> None:
    """Replace a document's body.

    The body is validated first; a body with a malformed comment marker is
    rejected and the file is left untouched. The write goes to a temporary
    file in the same directory which then replaces the document.

    Raises:
        MalformedMarkerError: If *text* contains a malformed marker.
        InvalidDocumentPathError, DocumentNotFoundError: See
            ``resolve_document_path``.
    """
    file_path = resolve_document_path(root, path)
    validate_markers(text)

    fd, tmp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote %s (%d chars)", path, len(text))
