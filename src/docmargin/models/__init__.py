"""Data models for DocMargin documents, sections and comments."""

from docmargin.models.annotation import (
    Annotation,
    DocumentScan,
    Section,
    section_id_for_line,
)
from docmargin.models.document import DocumentEntry, title_from_filename

__all__ = [
    "Annotation",
    "DocumentEntry",
    "DocumentScan",
    "Section",
    "section_id_for_line",
    "title_from_filename",
]
