"""Shared layout components for DocMargin.

Provides the header, the navigation drawer with the document tree, and the
page content container.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING
from urllib.parse import quote

from nicegui import ui

from docmargin.config import get_settings
from docmargin.pages.registry import get_visible_pages
from docmargin.storage.documents import list_documents

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


def document_url(path: str) -> str:
    """Return the viewer URL for a document path."""
    return f"/document?path={quote(path, safe='')}"


def _nav_item(label: str, route: str, icon: str | None = None) -> None:
    """Create a navigation item in the drawer."""
    with ui.item(on_click=lambda: ui.navigate.to(route)).classes("w-full"):
        if icon:
            with ui.item_section().props("avatar"):
                ui.icon(icon)
        with ui.item_section():
            ui.item_label(label)


def _document_list(current_path: str | None) -> None:
    """Render the document tree in the drawer."""
    ui.label("Documents").classes("text-h6 q-pa-md")
    try:
        documents = list_documents(get_settings().app.docs_dir)
    except OSError:
        logger.exception("Error listing documents")
        ui.label("Failed to list documents").classes("text-red-600 q-px-md")
        return

    if not documents:
        ui.label("No documents found").classes("text-grey-7 q-px-md")
        return

    with ui.list().props("dense padding"):
        for doc in documents:
            item = ui.item(
                on_click=lambda p=doc.path: ui.navigate.to(document_url(p))
            ).classes("w-full")
            if doc.path == current_path:
                item.classes("bg-blue-1")
            with item, ui.item_section():
                ui.item_label(doc.title)
                if "/" in doc.path:
                    ui.item_label(doc.path.rsplit("/", 1)[0]).props("caption")


@contextmanager
def page_layout(title: str = "DocMargin", current_path: str | None = None) -> Iterator[None]:
    """Context manager for consistent page layout with header and nav drawer.

    Usage:
        @page_route("/my-page", title="My Page", icon="star")
        async def my_page():
            with page_layout("My Page"):
                ui.label("Page content here")

    Args:
        title: Page title shown in header.
        current_path: Document path to highlight in the document list.

    Yields:
        Context for page content.
    """
    with ui.header().classes("bg-primary items-center q-py-xs"):
        menu_btn = ui.button(icon="menu").props("flat color=white")
        ui.label(title).classes("text-h6 text-white q-ml-sm")

    with ui.left_drawer().classes("bg-grey-2") as drawer:
        with ui.list().props("padding"):
            for page in get_visible_pages():
                _nav_item(page.title, page.route, page.icon)
        ui.separator()
        _document_list(current_path)

    menu_btn.on("click", drawer.toggle)

    with ui.element("div").classes("q-pa-md w-full"):
        yield
