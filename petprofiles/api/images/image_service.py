"""
image_service.py: lifecycle of uploaded pet images.

Validates uploads, names them, hands bytes to the blob store and builds the
URLs clients get back. Images are independent of profile rows: a profile
only holds the returned URL as a string.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from petprofiles.api.images.validator import content_type_for, validate_upload
from petprofiles.config import Settings
from petprofiles.errors import ImageNotFoundError
from petprofiles.storage import BlobStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedImage:
    file_name: str
    image_url: str


def generate_file_name(extension: str) -> str:
    """img-<uuid4><ext>; collisions are negligible so no existence check is made."""
    return f"img-{uuid.uuid4()}{extension}"


class ImageService:
    def __init__(self, blob_store: BlobStore, config: Settings) -> None:
        self.blob_store = blob_store
        self.public_base_url = config.storage_public_base_url
        self.default_expiry = config.signed_url_expiry

    async def upload(
        self,
        data: bytes,
        original_file_name: str,
        base_url: str,
        label: Optional[str] = None,
    ) -> UploadedImage:
        """
        Validate and store an image.

        base_url is the prefix of the client-facing (proxy) URL; the stored
        key is appended to it. label is only used for logging.
        """
        extension = validate_upload(data, original_file_name)
        file_name = generate_file_name(extension)

        await self.blob_store.upload(
            file_name,
            data,
            content_type=content_type_for(file_name),
            overwrite=True,
        )

        image_url = f"{base_url.rstrip('/')}/{file_name}"
        logger.info(
            "Image uploaded successfully for %s: %s", label or "Unknown", file_name
        )
        return UploadedImage(file_name=file_name, image_url=image_url)

    async def download(self, file_name: str) -> tuple[bytes, str]:
        """
        Return (bytes, content_type). Any store failure, whether the object is
        missing or the store is down, is reported as ImageNotFoundError.
        """
        try:
            data = await self.blob_store.download(file_name)
        except Exception:
            logger.error("Error downloading image: %s", file_name, exc_info=True)
            raise ImageNotFoundError(file_name)
        return data, content_type_for(file_name)

    async def delete(self, file_name: str) -> None:
        """Idempotent: deleting a missing image succeeds."""
        await self.blob_store.delete(file_name)
        logger.info("Image deleted successfully: %s", file_name)

    def get_public_url(self, file_name: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{file_name}"
        return self.blob_store.public_url(file_name)

    async def get_signed_url(
        self,
        file_name: str,
        expiration: Optional[timedelta] = None,
    ) -> str:
        """
        Time-limited read URL for file_name.

        If signing fails for any reason (e.g. no signing credentials) the
        unsigned public URL is returned instead of raising. This keeps images
        reachable at the cost of access control.
        """
        try:
            return await self.blob_store.signed_url(
                file_name, expiration or self.default_expiry
            )
        except Exception:
            logger.error("Error generating signed URL for: %s", file_name, exc_info=True)
            return self.get_public_url(file_name)
