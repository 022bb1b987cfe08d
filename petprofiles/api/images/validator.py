"""
validator.py: upload checks and extension helpers for pet images.

Checks run in a fixed order (empty, type, size) so a caller always sees the
first violated rule.
"""
import os

from petprofiles.errors import (
    EmptyImageError,
    ImageTooLargeError,
    UnsupportedImageTypeError,
)

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5 MB
ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})
CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}
DEFAULT_CONTENT_TYPE = "image/jpeg"


def file_extension(file_name: str) -> str:
    """Lowercased extension including the dot, '' if none."""
    return os.path.splitext(file_name or "")[1].lower()


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(file_extension(file_name), DEFAULT_CONTENT_TYPE)


def validate_upload(data: bytes, file_name: str) -> str:
    """
    Validate an uploaded image and return its lowercased extension.

    Raises:
        EmptyImageError: no bytes were sent.
        UnsupportedImageTypeError: extension is not .jpg/.jpeg/.png/.gif.
        ImageTooLargeError: more than MAX_IMAGE_SIZE bytes.
    """
    if not data:
        raise EmptyImageError()

    extension = file_extension(file_name)
    if extension not in ALLOWED_EXTENSIONS:
        raise UnsupportedImageTypeError(extension)

    if len(data) > MAX_IMAGE_SIZE:
        raise ImageTooLargeError(len(data))

    return extension
