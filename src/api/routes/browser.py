"""
Browsing endpoints: the index page, the viewer page, inline viewing
and downloads.

Object names contain slashes, so every per-object route captures the
rest of the path with {name:path}.
"""

import logging
import os
import posixpath
import tempfile
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import FileResponse, HTMLResponse
from starlette.types import Receive, Scope, Send

from ...core.files.errors import ObjectNotFoundError
from ...core.files.listing import describe_object, list_files
from ...core.files.naming import detect_content_type
from ...core.files.ports import ObjectStore
from ..dependencies import StoreDep, templates

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def content_disposition(disposition: str, name: str) -> str:
    """Build a Content-Disposition header value for an object's basename."""
    filename = posixpath.basename(name)
    if filename.isascii():
        return f'{disposition}; filename="{filename}"'
    return f"{disposition}; filename*=utf-8''{quote(filename)}"


async def spool_object(store: ObjectStore, name: str) -> str:
    """
    Copy an object to a local temp file and return its path.

    The caller owns the file; it is removed here only if the copy fails.
    """
    fd, path = tempfile.mkstemp(prefix="view-")
    try:
        with os.fdopen(fd, "wb") as f:
            await store.download_to(name, f)
    except BaseException:
        os.unlink(path)
        raise
    return path


class SpooledFileResponse(FileResponse):
    """
    FileResponse over a spooled temp file.

    The file is removed when the response ends, including when sending
    the body fails partway.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            os.unlink(self.path)


async def serve_object(
    store: ObjectStore,
    name: str,
    disposition: str | None,
) -> SpooledFileResponse:
    try:
        path = await spool_object(store, name)
    except ObjectNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    headers = {}
    if disposition:
        headers["Content-Disposition"] = content_disposition(disposition, name)

    return SpooledFileResponse(
        path,
        media_type=detect_content_type(name),
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/", response_class=HTMLResponse, summary="List bucket contents")
async def index(request: Request, store: StoreDep):
    listing = await list_files(store)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "bucket_name": store.bucket_name,
            "files": listing.entries,
        },
    )


@router.get("/viewer/{name:path}", response_class=HTMLResponse, summary="Preview page")
async def viewer(request: Request, name: str, store: StoreDep):
    if not name:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    details = await describe_object(store, name)

    return templates.TemplateResponse(
        request,
        "view.html",
        {
            "bucket_name": store.bucket_name,
            "file": details,
        },
    )


@router.get("/view/{name:path}", summary="View a file inline")
async def view(name: str, store: StoreDep, raw: bool = False):
    """
    Return the object's bytes with its detected content type.

    raw=true skips the Content-Disposition header, for embedding in
    <img>/<video> tags on the viewer page.
    """
    if not name:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return await serve_object(store, name, None if raw else "inline")


@router.get("/download/{name:path}", summary="Download a file")
async def download(name: str, store: StoreDep):
    if not name:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    logger.info("Download requested", extra={"object_name": name})

    return await serve_object(store, name, "attachment")
