"""
errors.py: domain exceptions for the Pet Profiles API.

Each exception carries the HTTP status and semantic error code that the
global handler in main.py renders into the standard error envelope.
Routes and services raise these; they never build error responses themselves.
"""


class PetProfilesError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

class ProfileNotFoundError(PetProfilesError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, profile_id: int) -> None:
        super().__init__(f"Pet profile {profile_id} not found")
        self.profile_id = profile_id


class ProfileIdMismatchError(PetProfilesError):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, path_id: int, body_id: int) -> None:
        super().__init__("ID mismatch")
        self.path_id = path_id
        self.body_id = body_id


class ProfileConflictError(PetProfilesError):
    """The profile changed between read and write."""

    status_code = 409
    code = "CONFLICT"

    def __init__(self, profile_id: int) -> None:
        super().__init__(f"Pet profile {profile_id} was modified concurrently")
        self.profile_id = profile_id


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class ImageValidationError(PetProfilesError):
    status_code = 400
    code = "VALIDATION_ERROR"


class EmptyImageError(ImageValidationError):
    code = "NO_FILE"

    def __init__(self) -> None:
        super().__init__("No file uploaded")


class UnsupportedImageTypeError(ImageValidationError):
    code = "INVALID_FILE_TYPE"

    def __init__(self, extension: str) -> None:
        super().__init__("Invalid file type. Only JPG, PNG, and GIF files are allowed.")
        self.extension = extension


class ImageTooLargeError(ImageValidationError):
    code = "FILE_TOO_LARGE"

    def __init__(self, size: int) -> None:
        super().__init__("File size too large. Maximum size is 5MB.")
        self.size = size


class ImageNotFoundError(PetProfilesError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, file_name: str) -> None:
        super().__init__(f"Image '{file_name}' not found")
        self.file_name = file_name


# ---------------------------------------------------------------------------
# Object storage
# ---------------------------------------------------------------------------

class BlobStoreError(PetProfilesError):
    """The object store failed or is unreachable."""

    code = "STORAGE_ERROR"


class BlobNotFoundError(BlobStoreError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, key: str) -> None:
        super().__init__(f"Object '{key}' not found")
        self.key = key


class BlobAlreadyExistsError(BlobStoreError):
    status_code = 409
    code = "CONFLICT"

    def __init__(self, key: str) -> None:
        super().__init__(f"Object '{key}' already exists")
        self.key = key
