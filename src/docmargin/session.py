"""Editing session for one document: mutate, persist, re-scan.

A DocumentSession holds the last body known to be persisted and the scan
derived from it. Each comment operation computes a new body with the
mutation engine, hands it to the writer, and only after a successful write
adopts the new body and re-scans it. If the write fails, the previous body
and scan stay authoritative.

There is no locking: two sessions on the same document race and the last
write wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from docmargin.markers.codec import validate_markers
from docmargin.markers.constants import DEFAULT_AUTHOR
from docmargin.markers.mutations import (
    MutationResult,
    add_comment,
    delete_comment,
    edit_comment,
)
from docmargin.markers.sectionizer import scan_document
from docmargin.storage.documents import read_document, write_document

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from pathlib import Path

    from docmargin.models.annotation import Annotation, DocumentScan

    DocumentWriter = Callable[[str, str], Awaitable[None]]

logger = logging.getLogger(__name__)


class CommentNotFoundError(LookupError):
    """Raised when an edit or delete matches no comment in the document."""

    def __init__(self, path: str, comment_id: str) -> None:
        self.path = path
        self.comment_id = comment_id
        super().__init__(f"Comment {comment_id} not found in {path}")


class DocumentSaveError(RuntimeError):
    """Raised when the writer fails; the session keeps its previous body."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        super().__init__(f"Failed to save {path}: {cause}")


def file_writer(root: Path) -> DocumentWriter:
    """Return an async writer that saves documents under *root*.

    The blocking file write runs in a worker thread.
    """

    async def write(path: str, text: str) -> None:
        await asyncio.to_thread(write_document, root, path, text)

    return write


class DocumentSession:
    """The persisted body of one document and the comments derived from it.

    Attributes:
        path: Document path, passed through to the writer.
        text: Last body known to be persisted.
        scan: Sections and comments derived from ``text``.
        author: Author name for comments added in this session.
    """

    def __init__(
        self,
        path: str,
        text: str,
        *,
        writer: DocumentWriter,
        author: str = DEFAULT_AUTHOR,
    ) -> None:
        self.path = path
        self.author = author
        self._writer = writer
        self.text = text
        self.scan: DocumentScan = scan_document(text)

    @classmethod
    def open(cls, root: Path, path: str, *, author: str = DEFAULT_AUTHOR) -> DocumentSession:
        """Read *path* under *root* and start a session writing back to it."""
        text = read_document(root, path)
        return cls(path, text, writer=file_writer(root), author=author)

    async def add_comment(self, section_index: int, content: str) -> Annotation | None:
        """Add a comment after the section at *section_index*.

        Returns:
            The new Annotation, or None if *content* was blank.
        """
        result = add_comment(self.text, section_index, content, author=self.author)
        if not result.changed:
            return None
        await self._commit(result, "add")
        return result.annotation

    async def edit_comment(self, comment_id: str, content: str) -> Annotation | None:
        """Replace the text of comment *comment_id*.

        Returns:
            The edited Annotation, or None if *content* was blank.

        Raises:
            CommentNotFoundError: If no comment has that id.
        """
        if not content.strip():
            return None
        result = edit_comment(self.text, comment_id, content)
        if not result.changed:
            raise CommentNotFoundError(self.path, comment_id)
        await self._commit(result, "edit")
        return result.annotation

    async def delete_comment(self, comment_id: str) -> None:
        """Remove comment *comment_id*.

        Raises:
            CommentNotFoundError: If no comment has that id.
        """
        result = delete_comment(self.text, comment_id)
        if not result.changed:
            raise CommentNotFoundError(self.path, comment_id)
        await self._commit(result, "delete")

    async def replace_text(self, text: str) -> None:
        """Persist a whole new body, e.g. from a raw edit."""
        validate_markers(text)
        await self._commit(MutationResult(text=text, count=1), "replace")

    async def _commit(self, result: MutationResult, action: str) -> None:
        validate_markers(result.text)
        try:
            await self._writer(self.path, result.text)
        except Exception as exc:
            logger.exception("Failed to persist %s of %s", action, self.path)
            raise DocumentSaveError(self.path, exc) from exc

        self.text = result.text
        self.scan = scan_document(result.text)
        logger.info(
            "Persisted %s on %s (%d comments)",
            action,
            self.path,
            len(self.scan.annotations),
        )
