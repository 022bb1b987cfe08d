"""
schemas.py: image endpoint response contracts (camelCase JSON).
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageUploadResponse(_CamelModel):
    file_name: str = Field(..., description="Storage key, e.g. img-<uuid>.png")
    image_url: str = Field(..., description="Proxy URL to store on a pet profile")


class SignedUrlResponse(_CamelModel):
    file_name: str
    url: str = Field(..., description="Presigned URL, or the unsigned public URL if signing failed")
    expires_in: int = Field(..., description="Requested validity in seconds")
