"""
Test configuration for the Pet Profiles API.

No live infrastructure is needed:
  - PostgreSQL is replaced by in-memory SQLite (aiosqlite, StaticPool so every
    session shares the one connection that holds the schema)
  - S3 is replaced by InMemoryBlobStore
  - get_db / get_image_service / get_credential_validator are swapped through
    app.dependency_overrides
"""
from datetime import timedelta
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import petprofiles.models  # noqa: F401  (registers tables on Base.metadata)
from petprofiles.api.images.image_service import ImageService
from petprofiles.api.images.routes import get_image_service
from petprofiles.auth import SharedSecretValidator, get_credential_validator
from petprofiles.config import Settings
from petprofiles.database import Base, get_db
from petprofiles.errors import BlobNotFoundError, BlobStoreError
from petprofiles.main import app

TEST_API_KEY = "test-api-key"


class InMemoryBlobStore:
    """Dict-backed stand-in for S3BlobStore."""

    base_url = "https://blobs.test/pet-images"

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, Optional[str]]] = {}
        self.fail_signing = False
        self.unavailable = False

    def _check_available(self) -> None:
        if self.unavailable:
            raise BlobStoreError("store unreachable")

    async def upload(self, key, data, content_type=None, overwrite=True) -> None:
        self._check_available()
        self.objects[key] = (data, content_type)

    async def download(self, key) -> bytes:
        self._check_available()
        if key not in self.objects:
            raise BlobNotFoundError(key)
        return self.objects[key][0]

    async def delete(self, key) -> None:
        self._check_available()
        self.objects.pop(key, None)

    def public_url(self, key) -> str:
        return f"{self.base_url}/{key}"

    async def signed_url(self, key, expiration: timedelta) -> str:
        if self.fail_signing:
            raise BlobStoreError("no signing credential")
        return f"{self.public_url(key)}?se={int(expiration.total_seconds())}&sig=test"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        api_key=TEST_API_KEY,
        storage_public_base_url=None,
        image_proxy_base_url=None,
        signed_url_expiry_seconds=3600,
    )


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def image_service(blob_store: InMemoryBlobStore, test_settings: Settings) -> ImageService:
    return ImageService(blob_store, test_settings)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """File-backed SQLite: each session gets its own connection, so concurrent writers really race."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pets.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


def _install_overrides(session_factory, image_service: ImageService) -> None:
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_image_service] = lambda: image_service
    app.dependency_overrides[get_credential_validator] = lambda: SharedSecretValidator(TEST_API_KEY)


@pytest_asyncio.fixture
async def client(session_factory, image_service):
    """Async httpx client using ASGI transport, sending the valid API key."""
    _install_overrides(session_factory, image_service)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": TEST_API_KEY},
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anonymous_client(session_factory, image_service):
    """Same app, no API key header."""
    _install_overrides(session_factory, image_service)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
