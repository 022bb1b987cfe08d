"""
storage.py: S3-compatible object storage client for pet images.

Thin async wrapper over aioboto3. Works against AWS S3, MinIO and LocalStack
(set S3_ENDPOINT_URL for the latter two).

Design:
  - One aioboto3.Session per process; a short-lived client per call
  - Driver errors (ClientError / BotoCoreError) are wrapped in BlobStoreError
    and raised without retrying; retries belong to the SDK config
  - Missing objects raise BlobNotFoundError, except on delete which is a no-op
"""
import logging
from datetime import timedelta
from typing import Optional, Protocol

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from petprofiles.config import Settings
from petprofiles.errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreError,
)

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class BlobStore(Protocol):
    """What ImageService needs from an object store."""

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = True,
    ) -> None: ...

    async def download(self, key: str) -> bytes: ...

    async def delete(self, key: str) -> None: ...

    def public_url(self, key: str) -> str: ...

    async def signed_url(self, key: str, expiration: timedelta) -> str: ...


class S3BlobStore:
    """
    Object store for one bucket.

    Every public method may raise BlobStoreError when the store is
    unreachable or rejects the request.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        session: Optional[aioboto3.Session] = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.session = session or aioboto3.Session()

    @classmethod
    def from_settings(cls, config: Settings) -> "S3BlobStore":
        session = aioboto3.Session(
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.s3_region,
        )
        return cls(
            bucket=config.s3_bucket,
            region=config.s3_region,
            endpoint_url=config.s3_endpoint_url,
            session=session,
        )

    def _client(self):
        return self.session.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
        )

    # ==================== BUCKET MANAGEMENT ====================

    async def _ensure_bucket_exists(self, s3) -> None:
        """Create the bucket if it doesn't exist."""
        try:
            await s3.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            if _error_code(e) not in _MISSING_CODES:
                raise
            create_config = {}
            if self.region != "us-east-1":
                create_config["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.region
                }
            await s3.create_bucket(Bucket=self.bucket, **create_config)
            logger.info("Created bucket: %s", self.bucket)

    # ==================== OBJECTS ====================

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = True,
    ) -> None:
        """Store data under key, creating the bucket on first use."""
        logger.info("Uploading object: %s (%d bytes)", key, len(data))
        extra = {"ContentType": content_type} if content_type else {}
        try:
            async with self._client() as s3:
                await self._ensure_bucket_exists(s3)
                if not overwrite and await self._exists(s3, key):
                    raise BlobAlreadyExistsError(key)
                await s3.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            logger.error("Error uploading object: %s", key, exc_info=True)
            raise BlobStoreError(f"Upload of '{key}' failed") from e
        logger.info("Successfully uploaded object: %s", key)

    async def _exists(self, s3, key: str) -> bool:
        try:
            await s3.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return False
            raise
        return True

    async def download(self, key: str) -> bytes:
        """Return the full object body. Images are capped at 5 MB, so it is read into memory."""
        logger.info("Downloading object: %s", key)
        try:
            async with self._client() as s3:
                response = await s3.get_object(Bucket=self.bucket, Key=key)
                return await response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                raise BlobNotFoundError(key) from e
            logger.error("Error downloading object: %s", key, exc_info=True)
            raise BlobStoreError(f"Download of '{key}' failed") from e
        except BotoCoreError as e:
            logger.error("Error downloading object: %s", key, exc_info=True)
            raise BlobStoreError(f"Download of '{key}' failed") from e

    async def delete(self, key: str) -> None:
        """Delete key. Deleting a missing object is not an error."""
        logger.info("Deleting object: %s", key)
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return
            logger.error("Error deleting object: %s", key, exc_info=True)
            raise BlobStoreError(f"Delete of '{key}' failed") from e
        except BotoCoreError as e:
            logger.error("Error deleting object: %s", key, exc_info=True)
            raise BlobStoreError(f"Delete of '{key}' failed") from e

    # ==================== URLS ====================

    def public_url(self, key: str) -> str:
        """Unsigned URL in the store's own addressing scheme."""
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def signed_url(self, key: str, expiration: timedelta) -> str:
        """Presigned, read-only GET URL valid for expiration."""
        try:
            async with self._client() as s3:
                return await s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": key},
                    ExpiresIn=int(expiration.total_seconds()),
                )
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Could not sign URL for '{key}'") from e
