"""HTTP API for the document tree.

Routes are collected on an APIRouter and mounted on the NiceGUI app by
``docmargin.main()``. The docs root is read from settings on every request so
tests can point it at a temporary directory. File access runs in a worker
thread so the event loop is never blocked on disk.

Endpoints:
    GET  /api/documents              list documents
    GET  /api/documents/{path}       raw Markdown body
    PUT  /api/documents/{path}       replace the body (marker-validated)
    GET  /api/sections/{path}        sections and comments as JSON
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from docmargin.config import get_settings
from docmargin.markers.codec import MalformedMarkerError
from docmargin.markers.sectionizer import scan_document
from docmargin.storage.documents import (
    DocumentNotFoundError,
    InvalidDocumentPathError,
    list_documents,
    read_document,
    write_document,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _docs_root() -> Path:
    return get_settings().app.docs_dir


def _path_error(exc: Exception) -> JSONResponse:
    if isinstance(exc, DocumentNotFoundError):
        return JSONResponse({"error": "Document not found"}, status_code=404)
    return JSONResponse(
        {"error": "Invalid document path", "details": str(exc)}, status_code=400
    )


@router.get("/documents")
async def get_documents() -> JSONResponse:
    try:
        documents = await asyncio.to_thread(list_documents, _docs_root())
    except OSError:
        logger.exception("Error reading documents directory")
        return JSONResponse({"error": "Failed to list documents"}, status_code=500)
    logger.debug("Found %d documents", len(documents))
    return JSONResponse([d.to_dict() for d in documents])


@router.get("/documents/{path:path}", response_model=None)
async def get_document(path: str) -> PlainTextResponse | JSONResponse:
    try:
        text = await asyncio.to_thread(read_document, _docs_root(), path)
    except (DocumentNotFoundError, InvalidDocumentPathError) as exc:
        return _path_error(exc)
    return PlainTextResponse(text, media_type="text/markdown")


@router.put("/documents/{path:path}", response_model=None)
async def put_document(path: str, request: Request) -> JSONResponse:
    try:
        body = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        return JSONResponse(
            {"error": "Document body must be UTF-8"}, status_code=400
        )
    try:
        await asyncio.to_thread(write_document, _docs_root(), path, body)
    except (DocumentNotFoundError, InvalidDocumentPathError) as exc:
        return _path_error(exc)
    except MalformedMarkerError as exc:
        logger.warning("Rejected save of %s: %s", path, exc.args[0])
        return JSONResponse(
            {"error": "Malformed comment marker", "details": str(exc)},
            status_code=422,
        )
    return JSONResponse({"status": "saved"})


@router.get("/sections/{path:path}", response_model=None)
async def get_sections(path: str) -> JSONResponse:
    try:
        text = await asyncio.to_thread(read_document, _docs_root(), path)
    except (DocumentNotFoundError, InvalidDocumentPathError) as exc:
        return _path_error(exc)
    return JSONResponse(scan_document(text).to_dict())
