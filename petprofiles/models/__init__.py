"""
models/__init__.py: imports all ORM models so Alembic's env.py
sees them via Base.metadata.
"""
from petprofiles.models.pet_profile import PetProfileORM

__all__ = ["PetProfileORM"]
