"""Index page for DocMargin."""

from nicegui import ui

from docmargin.pages.layout import page_layout
from docmargin.pages.registry import page_route


@page_route("/", title="Home", icon="home", order=10)
async def index_page() -> None:
    """Welcome page; documents are picked from the drawer."""
    with page_layout("Document Viewer"):
        with ui.column().classes("w-full items-center mt-16"):
            ui.label("Document Viewer").classes("text-3xl font-serif mb-4")
            ui.label("Select a document from the sidebar to begin.").classes(
                "text-grey-8"
            )
