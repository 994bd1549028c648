"""
Upload endpoints.

GET shows the upload form; POST stores the file under an optional
folder and custom name, then generates its thumbnail straight away.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import HTMLResponse

from ...core.files.errors import InvalidUploadError
from ...core.files.naming import human_readable_size
from ...core.files.uploads import UploadTooLargeError
from ..dependencies import StoreDep, UploadServiceDep, templates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_class=HTMLResponse, summary="Upload form")
async def upload_form(request: Request, store: StoreDep):
    return templates.TemplateResponse(
        request,
        "upload.html",
        {"bucket_name": store.bucket_name, "message": ""},
    )


@router.post(
    "",
    response_class=HTMLResponse,
    summary="Upload a file",
    description="Store a file in the bucket and pre-generate its thumbnail",
)
async def upload_file(
    request: Request,
    file: Annotated[UploadFile, File(description="File to store")],
    store: StoreDep,
    uploads: UploadServiceDep,
    folder: Annotated[str, Form()] = "",
    custom_name: Annotated[str, Form()] = "",
):
    logger.info(
        "Upload started",
        extra={
            "upload_filename": file.filename,
            "folder": folder,
            "custom_name": custom_name,
            "content_type": file.content_type,
        }
    )

    try:
        receipt = await uploads.ingest(
            source=file.file,
            filename=file.filename or "",
            folder=folder,
            custom_name=custom_name,
        )
    except UploadTooLargeError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(e),
        )
    except InvalidUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    finally:
        await file.close()

    return templates.TemplateResponse(
        request,
        "upload.html",
        {
            "bucket_name": store.bucket_name,
            "message": f"Uploaded {receipt.name} ({human_readable_size(receipt.size)})",
            "receipt": receipt,
        },
    )
