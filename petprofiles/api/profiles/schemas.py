"""
schemas.py: pet profile Pydantic v2 data contracts.

JSON uses camelCase (imageUrl, createdAt, updatedAt) to stay compatible with
existing mobile clients; snake_case names are accepted on input as well.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PetProfileBase(_CamelModel):
    name: str = Field(..., min_length=1, max_length=100, description="Pet name.")
    breed: str = Field(..., min_length=1, max_length=100, description="Pet breed.")
    age: int = Field(..., ge=0, description="Age in years.")
    image_url: Optional[str] = Field(
        default=None,
        max_length=500,
        description="URL returned by POST /api/images. Stored as-is, never dereferenced.",
    )

    @field_validator("name", "breed")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PetProfileCreate(PetProfileBase):
    """POST body. id and timestamps are assigned by the server; a client-sent id is ignored."""


class PetProfileUpdate(PetProfileBase):
    """PUT body. Full record; id must match the path id."""

    id: int = Field(..., description="Must equal the id in the request path.")


class PetProfileRead(PetProfileBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Timestamps are stored in UTC; some backends (SQLite) drop the offset.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
