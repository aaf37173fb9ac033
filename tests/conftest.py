"""Pytest configuration and shared fixtures.

Tests run against a throwaway SQLite file per test (created from the ORM
metadata) and an in-memory object store standing in for the storage
service.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set testing mode BEFORE importing app so settings pick it up
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "portfolio-admin-api-test-secret-0123456789abcdef"
os.environ["LOG_FORMAT"] = "text"

from portfolio_api.config import settings

# Override settings for testing
settings.testing = True

from portfolio_api.core.security import create_identity_token
from portfolio_api.database import get_db
from portfolio_api.main import app
from portfolio_api.models import (
    ABOUT_CONTENT_ID,
    CONTACT_PAGE_DETAILS_ID,
    HERO_CONTENT_ID,
    PRIVACY_POLICY_ID,
    RESUME_META_ID,
    SITE_SETTINGS_ID,
    TERMS_AND_CONDITIONS_ID,
    AboutContent,
    Base,
    ContactPageDetails,
    HeroContent,
    LegalDocument,
    ResumeMeta,
    SiteSettings,
)
from portfolio_api.services.storage_client import (
    StorageError,
    StorageUnavailableError,
    get_storage_client,
)

ADMIN_USER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_ADMIN_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


class FakeClock:
    """Manually advanced clock for ``TimeBudget``."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000


class FakeStorage:
    """In-memory object store shaped like the storage REST API.

    Objects are ``path -> size`` per bucket. Listings return the direct
    children of a prefix, folders as entries with ``id`` None, sorted by
    name and offset paginated.
    """

    def __init__(self, buckets: dict[str, dict[str, int]] | None = None):
        self.buckets: dict[str, dict[str, int]] = {
            name: dict(objects) for name, objects in (buckets or {}).items()
        }
        self.list_calls: list[tuple[str, str, int, int]] = []
        self.remove_calls: list[tuple[str, list[str]]] = []
        self.fail_list: set[str] = set()
        self.fail_remove: set[str] = set()
        self.unavailable = False
        self.on_list: Callable[[], None] | None = None

    def add(self, bucket: str, objects: dict[str, int]) -> None:
        self.buckets.setdefault(bucket, {}).update(objects)

    def _check_available(self) -> None:
        if self.unavailable:
            raise StorageUnavailableError("Storage service unreachable: connection refused")

    async def list_buckets(self) -> list[dict[str, Any]]:
        self._check_available()
        return [{"id": name, "name": name, "public": True} for name in self.buckets]

    async def list_objects(
        self, bucket: str, prefix: str = "", limit: int = 100, offset: int = 0
    ) -> list[dict[str, Any]]:
        self._check_available()
        self.list_calls.append((bucket, prefix, limit, offset))
        if self.on_list is not None:
            self.on_list()
        if bucket in self.fail_list:
            raise StorageError("Bucket not found", status_code=404)

        entries: dict[str, dict[str, Any]] = {}
        for path, size in self.buckets.get(bucket, {}).items():
            if not path.startswith(prefix):
                continue
            rest = path[len(prefix) :]
            if "/" in rest:
                folder = rest.split("/", 1)[0]
                entries[folder] = {"name": folder, "id": None, "metadata": None}
            else:
                entries[rest] = {
                    "name": rest,
                    "id": f"obj-{bucket}-{path}",
                    "metadata": {"size": size},
                }
        ordered = [entries[name] for name in sorted(entries)]
        return ordered[offset : offset + limit]

    async def remove_objects(self, bucket: str, paths: list[str]) -> list[dict[str, Any]]:
        self._check_available()
        self.remove_calls.append((bucket, list(paths)))
        if bucket in self.fail_remove:
            raise StorageError("new row violates row-level security policy", 403)
        objects = self.buckets.get(bucket, {})
        removed = [path for path in paths if objects.pop(path, None) is not None]
        return [{"name": path} for path in removed]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database file with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'portfolio.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for each test."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_db(session_maker) -> None:
    """Insert the singleton rows every deployment starts with."""
    async with session_maker() as session:
        session.add_all(
            [
                HeroContent(
                    id=HERO_CONTENT_ID,
                    main_name="Jane Doe",
                    subtitles=["Engineer", "Writer"],
                    social_media_links=[{"label": "GitHub", "url": "https://github.com"}],
                ),
                AboutContent(
                    id=ABOUT_CONTENT_ID,
                    headline_main="Building things",
                    paragraph1="Hello there.",
                    image_url="https://cdn.example.com/about/me.png",
                ),
                ContactPageDetails(
                    id=CONTACT_PAGE_DETAILS_ID,
                    address="1 Main Street",
                    phone="+1 555 0100",
                    email="jane@example.com",
                ),
                ResumeMeta(
                    id=RESUME_META_ID,
                    description="Ten years of shipping software.",
                    resume_pdf_url="https://cdn.example.com/resume.pdf",
                ),
                LegalDocument(
                    id=TERMS_AND_CONDITIONS_ID,
                    title="Terms",
                    content="Original terms.",
                ),
                LegalDocument(
                    id=PRIVACY_POLICY_ID,
                    title="Privacy",
                    content="Original privacy policy.",
                ),
                SiteSettings(
                    id=SITE_SETTINGS_ID,
                    is_maintenance_mode=True,
                    maintenance_message="Back soon!",
                ),
            ]
        )
        await session.commit()


def make_token(
    user_id: uuid.UUID = ADMIN_USER_ID,
    email: str | None = "admin@example.com",
    role: str | None = "admin",
) -> str:
    return create_identity_token(user_id, email=email, role=role)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def non_admin_headers() -> dict[str, str]:
    token = make_token(user_id=uuid.uuid4(), email="visitor@example.com", role=None)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_maker, fake_storage) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the test database and store."""

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    async def _get_storage() -> FakeStorage:
        return fake_storage

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage_client] = _get_storage
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
