"""Shared pytest fixtures for DocMargin tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docmargin.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

# A small contract with two legacy comments and one tagged comment.
SAMPLE_DOCUMENT = """# Contract of Sale

The seller agrees to sell the goods.
<!--comment
author: Alice
date: 2025-01-15T10:30:00.000Z
id: c-alice
Check the delivery date.
-->

**Price:** $100
Payable on delivery.

<!--comment:line-11
author: Bob
date: 2025-01-16T09:00:00.000Z
id: c-bob
Is GST included?
Please confirm.
-->

- Item one
- Item two
"""


@pytest.fixture
def sample_document() -> str:
    """Markdown body with three embedded comments."""
    return SAMPLE_DOCUMENT


@pytest.fixture
def docs_root(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Temporary docs directory wired into settings.

    Contains ``contract-of-sale.md`` (the sample document), ``notes/todo.md``
    and a hidden file that listings must skip.
    """
    root = tmp_path / "docs"
    (root / "notes").mkdir(parents=True)
    (root / "contract-of-sale.md").write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    (root / "notes" / "todo.md").write_text("First task\n", encoding="utf-8")
    (root / ".hidden.md").write_text("secret\n", encoding="utf-8")
    (root / "readme.txt").write_text("not markdown\n", encoding="utf-8")

    monkeypatch.setenv("APP__DOCS_DIR", str(root))
    get_settings.cache_clear()
    yield root
    get_settings.cache_clear()
