"""Comment panel UI for the document viewer.

Builds the sidebar listing the selected section's comments, with edit and
delete actions on each card and an input for new comments.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from nicegui import ui

from docmargin.markers.codec import MalformedMarkerError
from docmargin.session import CommentNotFoundError, DocumentSaveError

if TYPE_CHECKING:
    from docmargin.models.annotation import Annotation
    from docmargin.pages.document import ViewerState

logger = logging.getLogger(__name__)


def format_comment_date(value: str) -> str:
    """Format an ISO-8601 comment date for display, e.g. ``Jan 15, 2025``.

    Unparseable dates are shown as stored.
    """
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{moment:%b} {moment.day}, {moment.year}"


def panel_title(state: ViewerState) -> str:
    if state.selected_index is None:
        return "Select a Section to View Comments"
    return "Comments for Selected Section"


async def _run_action(state: ViewerState, action, success: str) -> None:
    """Run a session action, reporting failures without changing the view."""
    try:
        await action()
    except MalformedMarkerError as exc:
        logger.warning("Rejected comment on %s: %s", state.session.path, exc.args[0])
        ui.notify(f"Comment rejected: {exc.args[0]}", type="negative")
        return
    except CommentNotFoundError as exc:
        logger.info("Stale comment action: %s", exc)
        ui.notify("That comment no longer exists. Reloading.", type="warning")
        state.reload()
        return
    except DocumentSaveError:
        ui.notify("Failed to save comment. Please try again.", type="negative")
        return
    ui.notify(success, type="positive")
    state.refresh()


def _build_edit_form(state: ViewerState, comment: Annotation, card: ui.card) -> None:
    card.clear()
    with card:
        editor = ui.textarea(value=comment.content).props("autogrow outlined dense")
        editor.classes("w-full")

        async def save(cid: str = comment.id) -> None:
            text = editor.value or ""
            if not text.strip():
                ui.notify("Comment text cannot be empty", type="warning")
                return
            await _run_action(
                state,
                lambda: state.session.edit_comment(cid, text),
                "Comment updated",
            )

        with ui.row().classes("w-full justify-end gap-2 mt-2"):
            ui.button("Cancel", on_click=state.refresh).props("flat dense")
            ui.button("Save", on_click=save).props("dense color=primary")


def _build_comment_card(state: ViewerState, comment: Annotation) -> None:
    with ui.card().classes("w-full mb-3").props("flat bordered") as card:
        with ui.row().classes("w-full items-center justify-between no-wrap"):
            with ui.row().classes("items-center gap-2"):
                ui.label(comment.author).classes("font-medium")
                ui.label("•").classes("text-grey-5")
                ui.label(format_comment_date(comment.date)).classes(
                    "text-sm text-grey-7"
                )
            with ui.row().classes("gap-0"):
                ui.button(
                    icon="edit",
                    on_click=lambda c=comment, k=card: _build_edit_form(state, c, k),
                ).props("flat dense size=sm").tooltip("Edit comment")

                async def do_delete(cid: str = comment.id) -> None:
                    await _run_action(
                        state,
                        lambda: state.session.delete_comment(cid),
                        "Comment deleted",
                    )

                ui.button(icon="close", on_click=do_delete).props(
                    "flat dense size=sm"
                ).tooltip("Delete comment")
        ui.label(comment.content).classes("text-grey-9 whitespace-pre-wrap")


def _build_comment_input(state: ViewerState, section_index: int) -> None:
    with ui.element("div").classes("w-full p-4 border-t"):
        comment_input = ui.textarea(
            placeholder="Write your comment here... (Ctrl+Enter to save)"
        ).props("outlined").classes("w-full")

        async def submit(idx: int = section_index) -> None:
            text = comment_input.value or ""
            if not text.strip():
                return
            comment_input.value = ""
            await _run_action(
                state,
                lambda: state.session.add_comment(idx, text),
                "Comment saved",
            )

        comment_input.on("keydown.ctrl.enter", submit)
        comment_input.on("keydown.meta.enter", submit)
        with ui.row().classes("w-full justify-end mt-2"):
            ui.button("Add Comment", on_click=submit).props("color=primary")


def build_comments_panel(state: ViewerState) -> None:
    """Build the comments sidebar for the currently selected section."""
    section = state.selected_section
    comments = section.comments if section is not None else []

    with ui.column().classes("w-96 gap-0 bg-grey-1 border-l min-h-screen"):
        ui.label(f"{panel_title(state)} ({len(comments)})").classes(
            "text-lg font-serif p-4 border-b w-full"
        )
        with ui.column().classes("w-full p-4 gap-0"):
            if not comments:
                ui.label("No comments yet.").classes("text-grey-6 self-center mt-8")
            for comment in comments:
                _build_comment_card(state, comment)
        if section is not None:
            _build_comment_input(state, section.index)
