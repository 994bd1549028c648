"""
FastAPI dependency injection.

Dependencies provide the store client, thumbnail resolver and upload
service to route handlers. They are built once when the app starts
(see build_services) and held on app.state for the life of the process,
instead of in module-level globals. Tests hand create_app() their own
Services built around fakes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates

from ..config.settings import Settings
from ..core.files.ports import ObjectStore
from ..core.files.thumbnails import ThumbnailResolver
from ..core.files.uploads import UploadService
from ..infrastructure.media.codec import PillowImageCodec
from ..infrastructure.media.transcoder import create_transcoder
from ..infrastructure.storage.client import StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@dataclass
class Services:
    """Long-lived collaborators shared by every request."""
    settings: Settings
    store: ObjectStore
    resolver: ThumbnailResolver
    uploads: UploadService


def build_services(settings: Settings) -> Services:
    """
    Construct the store client and everything built on it.

    Called once at startup. Fails fast if FFmpeg is missing, since video
    thumbnails cannot work without it.
    """
    if settings.storage_mock_mode:
        store = create_storage_client(mock_mode=True)
    else:
        store = create_storage_client(config=StorageConfig(
            access_key_id=settings.b2_key_id,
            secret_access_key=settings.b2_app_key,
            bucket_name=settings.b2_bucket_name,
            endpoint_url=settings.b2_endpoint,
            region=settings.b2_region,
        ))

    transcoder = create_transcoder(
        mock_mode=settings.transcoder_mock_mode,
        ffmpeg_path=settings.ffmpeg_path,
    )

    resolver = ThumbnailResolver(
        store=store,
        codec=PillowImageCodec(jpeg_quality=settings.thumbnail_jpeg_quality),
        transcoder=transcoder,
        width=settings.thumbnail_width,
        frame_offset_seconds=settings.thumbnail_frame_offset_seconds,
        cache_control=settings.thumbnail_cache_control,
    )

    uploads = UploadService(
        store=store,
        resolver=resolver,
        max_size_bytes=settings.max_upload_size_mb * 1024 * 1024,
    )

    logger.info(
        "Services ready",
        extra={
            "bucket": store.bucket_name,
            "mock_mode": {
                "storage": settings.storage_mock_mode,
                "transcoder": settings.transcoder_mock_mode,
            },
        }
    )

    return Services(settings=settings, store=store, resolver=resolver, uploads=uploads)


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_services(request: Request) -> Services:
    return request.app.state.services


def get_app_settings(services: Annotated[Services, Depends(get_services)]) -> Settings:
    return services.settings


def get_store(services: Annotated[Services, Depends(get_services)]) -> ObjectStore:
    return services.store


def get_resolver(services: Annotated[Services, Depends(get_services)]) -> ThumbnailResolver:
    return services.resolver


def get_upload_service(services: Annotated[Services, Depends(get_services)]) -> UploadService:
    return services.uploads


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
ServicesDep = Annotated[Services, Depends(get_services)]
StoreDep = Annotated[ObjectStore, Depends(get_store)]
ResolverDep = Annotated[ThumbnailResolver, Depends(get_resolver)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
