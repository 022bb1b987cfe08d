"""
Pet profile HTTP routes: GET/POST /api/profiles,
                         GET/PUT/DELETE /api/profiles/{profile_id}

All routes require the API key (router-level dependency).
Deleting a profile does not delete its image; clients call DELETE /api/images/{fileName}.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from petprofiles import store
from petprofiles.api.profiles.schemas import (
    PetProfileCreate,
    PetProfileRead,
    PetProfileUpdate,
)
from petprofiles.auth import require_api_key
from petprofiles.database import get_db

router = APIRouter(
    prefix="/api/profiles",
    tags=["profiles"],
    dependencies=[Depends(require_api_key)],
)
logger = logging.getLogger(__name__)


@router.get("", response_model=list[PetProfileRead])
async def list_pet_profiles(
    db: AsyncSession = Depends(get_db),
) -> list[PetProfileRead]:
    """Return every pet profile. No pagination."""
    logger.info("Getting all pet profiles")
    return await store.list_profiles(db)


@router.get("/{profile_id}", response_model=PetProfileRead)
async def get_pet_profile(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
) -> PetProfileRead:
    """
    Returns:
        200: The stored profile
        404: Standard error envelope if the profile does not exist
    """
    profile = await store.get_profile(db, profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Pet profile {profile_id} not found")
    return profile


@router.post("", status_code=201, response_model=PetProfileRead)
async def create_pet_profile(
    payload: PetProfileCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Create a profile. id, createdAt and updatedAt are assigned by the server.

    Returns:
        201: The stored profile, Location header set to its URL
        400: VALIDATION_ERROR listing every invalid field
    """
    profile = await store.create_profile(db, payload)
    location = request.url_for("get_pet_profile", profile_id=str(profile.id))
    return JSONResponse(
        status_code=201,
        content=profile.model_dump(mode="json", by_alias=True),
        headers={"Location": str(location)},
    )


@router.put("/{profile_id}", status_code=204, response_class=Response)
async def update_pet_profile(
    profile_id: int,
    payload: PetProfileUpdate,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Replace name, breed, age and imageUrl.

    Returns:
        204: Updated
        400: Path id and body id differ, or invalid fields
        404: Profile does not exist
        409: Profile was modified concurrently
    """
    await store.update_profile(db, profile_id, payload)
    return Response(status_code=204)


@router.delete("/{profile_id}", status_code=204, response_class=Response)
async def delete_pet_profile(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Returns:
        204: Deleted
        404: Profile does not exist
        409: Profile was modified concurrently
    """
    await store.delete_profile(db, profile_id)
    return Response(status_code=204)
