"""Command-line access to document comments.

Lists documents, shows sections with their comments, adds, edits and deletes
comments, and checks documents for malformed comment markers. Every change
goes through a DocumentSession, so the CLI writes exactly what the web
viewer would.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from rich.console import Console

from docmargin.markers.codec import MalformedMarkerError, find_malformed_markers
from docmargin.session import CommentNotFoundError, DocumentSaveError, DocumentSession
from docmargin.storage.documents import (
    DocumentNotFoundError,
    InvalidDocumentPathError,
    list_documents,
    read_document,
)

if TYPE_CHECKING:
    from pathlib import Path

console = Console()


def _build_comments_parser():
    """Build argparse parser for docmargin-comments subcommands."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="docmargin-comments",
        description="Inspect and edit comments embedded in Markdown documents.",
    )
    parser.add_argument(
        "--docs-dir",
        default=None,
        help="Documents directory (default: APP__DOCS_DIR setting)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # list
    sub.add_parser("list", help="List documents")

    # show
    show_p = sub.add_parser("show", help="Show sections and their comments")
    show_p.add_argument("path", help="Document path relative to the docs directory")

    # add
    add_p = sub.add_parser("add", help="Add a comment to a section")
    add_p.add_argument("path", help="Document path")
    add_p.add_argument("section", type=int, help="Section index (see 'show')")
    add_p.add_argument("text", help="Comment text")
    add_p.add_argument("--author", default=None, help="Author name")

    # edit
    edit_p = sub.add_parser("edit", help="Replace a comment's text")
    edit_p.add_argument("path", help="Document path")
    edit_p.add_argument("comment_id", help="Comment id")
    edit_p.add_argument("text", help="New comment text")

    # delete
    delete_p = sub.add_parser("delete", help="Delete a comment")
    delete_p.add_argument("path", help="Document path")
    delete_p.add_argument("comment_id", help="Comment id")

    # check
    check_p = sub.add_parser("check", help="Check documents for malformed markers")
    check_p.add_argument(
        "path", nargs="?", default=None, help="Document path (default: all)"
    )

    return parser


def _preview(text: str, width: int = 60) -> str:
    """First line of *text*, shortened to *width* characters."""
    first = text.split("\n", 1)[0]
    if len(first) > width or "\n" in text:
        return first[: width - 3].rstrip() + "..."
    return first


def _cmd_list(root: Path, *, console: Console | None = None) -> None:
    """List documents as a Rich table."""
    from rich.table import Table

    con = console or globals()["console"]
    documents = list_documents(root)
    if not documents:
        con.print(f"[yellow]No documents found in {root}.[/]")
        return

    table = Table(title="Documents")
    table.add_column("Path", style="cyan")
    table.add_column("Title")
    for doc in documents:
        table.add_row(doc.path, doc.title)
    con.print(table)


def _cmd_show(root: Path, path: str, *, console: Console | None = None) -> None:
    """Show a document's sections and the comments attached to each."""
    from rich.table import Table

    from docmargin.markers.sectionizer import scan_document

    con = console or globals()["console"]
    scan = scan_document(read_document(root, path))

    table = Table(title=path)
    table.add_column("#", justify="right")
    table.add_column("Section", style="dim")
    table.add_column("Text")
    table.add_column("Comments", justify="right")
    for section in scan.sections:
        table.add_row(
            str(section.index),
            section.section_id,
            _preview(section.text),
            str(len(section.comments)) if section.comments else "",
        )
    con.print(table)

    for section in scan.sections:
        for comment in section.comments:
            con.print(
                f"\n[bold]{comment.author}[/] on section {section.index} "
                f"[dim]{comment.date}[/]"
            )
            con.print(f"  ID: [dim]{comment.id}[/]")
            for line in comment.content.split("\n"):
                con.print(f"  {line}", markup=False)

    if scan.dropped:
        con.print(
            f"\n[yellow]{len(scan.dropped)} comment(s) could not be attached "
            "to any section.[/]"
        )


async def _cmd_add(
    root: Path,
    path: str,
    section_index: int,
    text: str,
    *,
    author: str,
    console: Console | None = None,
) -> None:
    """Add a comment to a section."""
    con = console or globals()["console"]
    session = DocumentSession.open(root, path, author=author)
    try:
        annotation = await session.add_comment(section_index, text)
    except IndexError:
        count = len(session.scan.sections)
        con.print(f"[red]Error:[/] no section {section_index} ({count} sections)")
        sys.exit(1)
    if annotation is None:
        con.print("[yellow]Nothing to add:[/] comment text is empty.")
        return
    con.print(f"[green]Added[/] comment {annotation.id} to section {section_index}.")


async def _cmd_edit(
    root: Path,
    path: str,
    comment_id: str,
    text: str,
    *,
    console: Console | None = None,
) -> None:
    """Replace a comment's text."""
    con = console or globals()["console"]
    session = DocumentSession.open(root, path)
    annotation = await session.edit_comment(comment_id, text)
    if annotation is None:
        con.print("[yellow]Nothing to change:[/] comment text is empty.")
        return
    con.print(f"[green]Updated[/] comment {comment_id}.")


async def _cmd_delete(
    root: Path,
    path: str,
    comment_id: str,
    *,
    console: Console | None = None,
) -> None:
    """Delete a comment."""
    con = console or globals()["console"]
    session = DocumentSession.open(root, path)
    await session.delete_comment(comment_id)
    con.print(f"[green]Deleted[/] comment {comment_id}.")


def _cmd_check(
    root: Path, path: str | None = None, *, console: Console | None = None
) -> int:
    """Report malformed markers in one document or all of them.

    Returns:
        Number of malformed markers found.
    """
    con = console or globals()["console"]
    paths = [path] if path else [d.path for d in list_documents(root)]

    total = 0
    for doc_path in paths:
        malformed = find_malformed_markers(read_document(root, doc_path))
        if not malformed:
            con.print(f"[green]OK[/] {doc_path}")
            continue
        total += len(malformed)
        con.print(f"[red]Malformed:[/] {doc_path} ({len(malformed)} marker(s))")
        for snippet in malformed:
            con.print(f"  {snippet}", markup=False, style="dim")
    return total


def comments() -> None:
    """Inspect and edit comments in the documents directory.

    Usage:
        uv run docmargin-comments <command> [options]

    Commands:
        list                          List documents
        show <path>                   Show sections and comments
        add <path> <section> <text>   Add a comment (--author to override)
        edit <path> <id> <text>       Replace a comment's text
        delete <path> <id>            Delete a comment
        check [path]                  Check for malformed markers
    """
    from pathlib import Path

    from docmargin.config import get_settings

    parser = _build_comments_parser()
    args = parser.parse_args(sys.argv[1:])

    settings = get_settings()
    root = Path(args.docs_dir) if args.docs_dir else settings.app.docs_dir

    async def _run() -> None:
        match args.command:
            case "list":
                _cmd_list(root)
            case "show":
                _cmd_show(root, args.path)
            case "add":
                await _cmd_add(
                    root,
                    args.path,
                    args.section,
                    args.text,
                    author=args.author or settings.annotations.default_author,
                )
            case "edit":
                await _cmd_edit(root, args.path, args.comment_id, args.text)
            case "delete":
                await _cmd_delete(root, args.path, args.comment_id)
            case "check":
                if _cmd_check(root, args.path):
                    sys.exit(1)

    try:
        asyncio.run(_run())
    except (DocumentNotFoundError, InvalidDocumentPathError) as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)
    except CommentNotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)
    except MalformedMarkerError as exc:
        console.print(f"[red]Rejected:[/] {exc.args[0]}")
        for snippet in exc.snippets:
            console.print(f"  {snippet}", markup=False, style="dim")
        sys.exit(1)
    except DocumentSaveError as exc:
        console.print(f"[red]Save failed:[/] {exc}")
        sys.exit(1)
    except OSError as exc:
        console.print(f"[red]Error:[/] cannot read {root}: {exc}")
        sys.exit(1)
