"""
Image HTTP routes: POST /api/images, GET /api/images/{file_name},
                   GET /api/images/{file_name}/signed-url,
                   DELETE /api/images/{file_name}

All routes require the API key (router-level dependency).
Images are addressed by storage key only; nothing here reads or writes profiles.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse, Response

from petprofiles.api.images.image_service import ImageService
from petprofiles.api.images.schemas import ImageUploadResponse, SignedUrlResponse
from petprofiles.api.images.validator import MAX_IMAGE_SIZE
from petprofiles.auth import require_api_key
from petprofiles.config import settings
from petprofiles.storage import S3BlobStore

router = APIRouter(
    prefix="/api/images",
    tags=["images"],
    dependencies=[Depends(require_api_key)],
)
logger = logging.getLogger(__name__)

MAX_SIGNED_URL_SECONDS = 7 * 24 * 3600  # S3 SigV4 upper bound


@lru_cache(maxsize=1)
def get_blob_store() -> S3BlobStore:
    """One store (and one aioboto3.Session) per process."""
    return S3BlobStore.from_settings(settings)


def get_image_service(
    blob_store: S3BlobStore = Depends(get_blob_store),
) -> ImageService:
    """FastAPI dependency; tests override it with an in-memory blob store."""
    return ImageService(blob_store, settings)


def _proxy_base_url(request: Request) -> str:
    if settings.image_proxy_base_url:
        return settings.image_proxy_base_url
    return str(request.base_url).rstrip("/") + router.prefix


@router.post("", status_code=201, response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Query(None, description="Pet name, used for logging only"),
    images: ImageService = Depends(get_image_service),
) -> JSONResponse:
    """
    Upload a .jpg/.jpeg/.png/.gif image of at most 5 MB.

    Returns:
        201: {fileName, imageUrl} with a Location header pointing at the image
        400: NO_FILE, INVALID_FILE_TYPE or FILE_TOO_LARGE
    """
    # Read one byte past the limit: enough to detect oversize without buffering huge uploads
    contents = await file.read(MAX_IMAGE_SIZE + 1) if file is not None else b""
    file_name = (file.filename if file is not None else None) or ""

    uploaded = await images.upload(
        contents,
        file_name,
        base_url=_proxy_base_url(request),
        label=name,
    )
    body = ImageUploadResponse(file_name=uploaded.file_name, image_url=uploaded.image_url)
    return JSONResponse(
        status_code=201,
        content=body.model_dump(by_alias=True),
        headers={"Location": uploaded.image_url},
    )


@router.get("/{file_name}", response_class=Response)
async def get_image(
    file_name: str,
    direct: bool = Query(False, description="Redirect to the object store URL instead of streaming"),
    images: ImageService = Depends(get_image_service),
) -> Response:
    """
    Stream the image bytes with a content type derived from the extension.

    Returns:
        200: image bytes
        307: redirect to the public store URL when direct=true
        404: image missing or store unreachable
    """
    if direct:
        return RedirectResponse(images.get_public_url(file_name))

    data, content_type = await images.download(file_name)
    return Response(content=data, media_type=content_type)


@router.get("/{file_name}/signed-url", response_model=SignedUrlResponse)
async def get_signed_image_url(
    file_name: str,
    expires_in: Optional[int] = Query(
        None,
        alias="expiresIn",
        ge=1,
        le=MAX_SIGNED_URL_SECONDS,
        description="Validity in seconds (default SIGNED_URL_EXPIRY_SECONDS)",
    ),
    images: ImageService = Depends(get_image_service),
) -> SignedUrlResponse:
    """Time-limited read URL; falls back to the unsigned URL if signing fails."""
    seconds = expires_in or settings.signed_url_expiry_seconds
    url = await images.get_signed_url(file_name, timedelta(seconds=seconds))
    return SignedUrlResponse(file_name=file_name, url=url, expires_in=seconds)


@router.delete("/{file_name}", status_code=204, response_class=Response)
async def delete_image(
    file_name: str,
    images: ImageService = Depends(get_image_service),
) -> Response:
    """Delete an image. Missing images are not an error; store failures return 500."""
    await images.delete(file_name)
    return Response(status_code=204)
