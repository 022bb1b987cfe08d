"""
store.py: data access facade for pet profiles.

All profile routes use these functions; no route touches SQLAlchemy directly.

Design principles:
  - All functions are async and accept an AsyncSession parameter
  - No raw SQL: ORM-only queries
  - flush() not commit(): the get_db() dependency commits per request
  - Returns PetProfileRead objects (not ORM instances) so callers are persistence-agnostic
  - Updates and deletes are version-checked (PetProfileORM.version); a stale
    write surfaces as ProfileConflictError, or ProfileNotFoundError when the
    row vanished in the meantime
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from petprofiles.api.profiles.schemas import (
    PetProfileCreate,
    PetProfileRead,
    PetProfileUpdate,
)
from petprofiles.errors import (
    ProfileConflictError,
    ProfileIdMismatchError,
    ProfileNotFoundError,
)
from petprofiles.models.pet_profile import PetProfileORM, utcnow

logger = logging.getLogger(__name__)


async def _load(db: AsyncSession, profile_id: int) -> Optional[PetProfileORM]:
    result = await db.execute(
        select(PetProfileORM).where(PetProfileORM.id == profile_id)
    )
    orm = result.scalar_one_or_none()
    if orm is None:
        logger.warning("Pet profile id=%s not found", profile_id)
    return orm


async def _exists(db: AsyncSession, profile_id: int) -> bool:
    result = await db.execute(
        select(PetProfileORM.id).where(PetProfileORM.id == profile_id)
    )
    return result.scalar_one_or_none() is not None


async def list_profiles(db: AsyncSession) -> list[PetProfileRead]:
    """Return every stored profile in store order. No pagination."""
    result = await db.execute(select(PetProfileORM))
    rows = result.scalars().all()
    logger.info("Listed %d pet profiles", len(rows))
    return [PetProfileRead.model_validate(row) for row in rows]


async def get_profile(
    db: AsyncSession,
    profile_id: int,
) -> Optional[PetProfileRead]:
    """Return the profile, or None if absent (caller raises 404)."""
    orm = await _load(db, profile_id)
    if orm is None:
        return None
    return PetProfileRead.model_validate(orm)


async def create_profile(
    db: AsyncSession,
    data: PetProfileCreate,
) -> PetProfileRead:
    """
    Persist a new profile.

    created_at and updated_at are set to the same instant; id is assigned by
    the database on flush.
    """
    now = utcnow()
    orm = PetProfileORM(
        name=data.name,
        breed=data.breed,
        age=data.age,
        image_url=data.image_url,
        created_at=now,
        updated_at=now,
    )
    db.add(orm)
    await db.flush()
    logger.info("Created pet profile id=%s", orm.id)
    return PetProfileRead.model_validate(orm)


async def update_profile(
    db: AsyncSession,
    profile_id: int,
    data: PetProfileUpdate,
) -> PetProfileRead:
    """
    Overwrite name, breed, age and image_url of an existing profile.

    Raises:
        ProfileIdMismatchError: path id differs from data.id (nothing is read or written).
        ProfileNotFoundError: no such profile, before or during the write.
        ProfileConflictError: the row version changed since it was read.
    """
    if profile_id != data.id:
        raise ProfileIdMismatchError(profile_id, data.id)

    orm = await _load(db, profile_id)
    if orm is None:
        raise ProfileNotFoundError(profile_id)

    orm.name = data.name
    orm.breed = data.breed
    orm.age = data.age
    orm.image_url = data.image_url
    orm.updated_at = utcnow()

    try:
        await db.flush()
    except StaleDataError:
        await db.rollback()
        if not await _exists(db, profile_id):
            raise ProfileNotFoundError(profile_id)
        logger.warning("Concurrent modification of pet profile id=%s", profile_id)
        raise ProfileConflictError(profile_id)

    logger.info("Updated pet profile id=%s version=%s", profile_id, orm.version)
    return PetProfileRead.model_validate(orm)


async def delete_profile(db: AsyncSession, profile_id: int) -> None:
    """
    Permanently remove a profile. Its image (if any) is left in object storage.
    """
    orm = await _load(db, profile_id)
    if orm is None:
        raise ProfileNotFoundError(profile_id)

    await db.delete(orm)
    try:
        await db.flush()
    except StaleDataError:
        await db.rollback()
        if not await _exists(db, profile_id):
            raise ProfileNotFoundError(profile_id)
        raise ProfileConflictError(profile_id)

    logger.info("Deleted pet profile id=%s", profile_id)
