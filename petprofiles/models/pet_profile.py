"""
models/pet_profile.py: SQLAlchemy ORM model for pet profiles.

Table: pet_profiles
image_url is a loose string reference to an uploaded image. There is no
foreign key to the object store, so deleting either side never cascades.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from petprofiles.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PetProfileORM(Base):
    """
    ORM model for one pet.

    version: row version checked on every UPDATE/DELETE (optimistic
             concurrency). A write against a stale version raises
             StaleDataError at flush time.
    """
    __tablename__ = "pet_profiles"
    # Never reuse ids of deleted rows on SQLite; PostgreSQL sequences already don't.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    breed: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Proxy or direct URL of the pet image, not validated for reachability",
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}
