"""
Thumbnail endpoint.

GET /thumb/<original name> serves the cached thumbnail for an object,
generating it on first request. The URL carries the original's name,
not the thumbnail key; the resolver does the mapping.
"""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from fastapi.responses import RedirectResponse

from ...core.files.errors import InvalidObjectNameError, ObjectNotFoundError
from ...core.files.listing import FILE_ICON_URL
from ...core.files.models import Placeholder
from ..dependencies import ResolverDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{name:path}",
    summary="Thumbnail for an object",
    description="Serves thumb/<name>.jpg from the bucket, generating it on a miss.",
    responses={
        200: {"content": {"image/jpeg": {}}},
        302: {"description": "No thumbnail possible, redirects to the file icon"},
        404: {"description": "Original object not found"},
    },
)
async def thumbnail(name: str, resolver: ResolverDep) -> Response:
    try:
        outcome = await resolver.resolve(name)
    except InvalidObjectNameError:
        # empty name, or a thumbnail of a thumbnail
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ObjectNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    if isinstance(outcome, Placeholder):
        logger.debug(
            "Serving placeholder icon",
            extra={"object_name": name, "reason": outcome.reason.value}
        )
        return RedirectResponse(FILE_ICON_URL, status_code=status.HTTP_302_FOUND)

    for failure in outcome.soft_failures:
        logger.warning(
            "Thumbnail served but not cached",
            extra={"object_name": name, "operation": failure.operation, "error": failure.error}
        )

    return Response(
        content=outcome.data,
        media_type=outcome.content_type,
        headers={"Cache-Control": outcome.cache_control},
    )
