"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from docmargin.models.annotation import Annotation

SAMPLE_DATE = "2025-01-15T10:30:00.000Z"


@pytest.fixture
def make_annotation():
    """Factory for Annotation instances with sensible defaults."""

    def _make(
        content: str = "A comment",
        *,
        author: str = "You",
        comment_id: str = "c-1",
        target: str | None = None,
    ) -> Annotation:
        return Annotation(
            author=author,
            date=SAMPLE_DATE,
            id=comment_id,
            content=content,
            target_section_id=target,
        )

    return _make
