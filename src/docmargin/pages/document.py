"""Document viewer page.

Renders each section of a Markdown document as its own block with a comment
count badge. Clicking a block selects it and shows its comments in the side
panel, where comments can be added, edited and deleted. Every change is
written back into the document and the page is rebuilt from a fresh scan.

Route: /document?path=<relative path>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from nicegui import ui

from docmargin.config import get_settings
from docmargin.models.document import title_from_filename
from docmargin.pages.comment_cards import build_comments_panel
from docmargin.pages.layout import page_layout
from docmargin.pages.registry import page_route
from docmargin.session import DocumentSession
from docmargin.storage.documents import DocumentNotFoundError, InvalidDocumentPathError

if TYPE_CHECKING:
    from docmargin.models.annotation import Section

logger = logging.getLogger(__name__)


@dataclass
class ViewerState:
    """Per-page state for the document viewer."""

    session: DocumentSession
    selected_index: int | None = None
    # Set during page build
    refresh_view: Any | None = field(default=None, repr=False)

    @property
    def selected_section(self) -> Section | None:
        sections = self.session.scan.sections
        if self.selected_index is None or self.selected_index >= len(sections):
            return None
        return sections[self.selected_index]

    def select(self, index: int) -> None:
        self.selected_index = index
        self.refresh()

    def refresh(self) -> None:
        if self.refresh_view:
            self.refresh_view()

    def reload(self) -> None:
        """Re-read the document from disk and rebuild the view."""
        settings = get_settings()
        self.session = DocumentSession.open(
            settings.app.docs_dir,
            self.session.path,
            author=settings.annotations.default_author,
        )
        self.refresh()


def _build_section_block(state: ViewerState, section: Section) -> None:
    has_comments = bool(section.comments)
    selected = state.selected_index == section.index

    with ui.element("div").classes("relative w-full"):
        block = ui.element("div").classes(
            "cursor-pointer border-l-2 pl-4 -ml-4 transition-all"
        )
        if has_comments:
            block.classes("border-blue-500 bg-blue-50")
        else:
            block.classes("border-transparent hover:border-blue-200")
        if selected:
            block.classes("ring-2 ring-blue-200 rounded")
        block.on("click", lambda idx=section.index: state.select(idx))
        with block:
            ui.markdown(section.text, extras=["tables", "fenced-code-blocks"])

        if has_comments:
            ui.badge(str(len(section.comments))).props("rounded color=primary").classes(
                "absolute -right-10 top-1/2"
            )


@page_route("/document", title="Document", icon="description", category="hidden")
async def document_page(path: str = "") -> None:
    """Viewer for one document."""
    settings = get_settings()
    try:
        session = DocumentSession.open(
            settings.app.docs_dir, path, author=settings.annotations.default_author
        )
    except (DocumentNotFoundError, InvalidDocumentPathError) as exc:
        logger.warning("Cannot open document %r: %s", path, exc)
        with page_layout("Document Viewer"):
            with ui.column().classes("w-full items-center mt-16"):
                ui.label("Error").classes("text-2xl font-serif text-red-600 mb-2")
                ui.label("Document not found").classes("text-red-600")
        return

    state = ViewerState(session=session)
    entry_title = title_from_filename(PurePosixPath(path).name)

    with page_layout(entry_title, current_path=path):

        @ui.refreshable
        def view() -> None:
            with ui.row().classes("w-full no-wrap items-start gap-0"):
                with ui.column().classes("flex-1 p-8 items-center"):
                    with ui.card().classes("max-w-4xl w-full p-8 gap-2"):
                        sections = state.session.scan.sections
                        if not sections:
                            ui.label("This document is empty.").classes("text-grey-6")
                        for section in sections:
                            _build_section_block(state, section)
                build_comments_panel(state)

        state.refresh_view = view.refresh
        view()
