"""Filesystem access for the document tree."""

from docmargin.storage.documents import (
    DocumentNotFoundError,
    InvalidDocumentPathError,
    list_documents,
    read_document,
    resolve_document_path,
    write_document,
)

__all__ = [
    "DocumentNotFoundError",
    "InvalidDocumentPathError",
    "list_documents",
    "read_document",
    "resolve_document_path",
    "write_document",
]
