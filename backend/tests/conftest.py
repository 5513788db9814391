"""Pytest fixtures for the videotube backend."""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from api.deps import get_config, get_db, get_gateway
from app import create_app
from core.config import Settings, settings
from services import MediaUploadGateway

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 128
DEFAULT_PASSWORD = "Secr3t!"

RegisterFn = Callable[..., Awaitable[tuple[dict[str, str], Response]]]
LoginFn = Callable[..., Awaitable[dict[str, Any]]]


def _run_alembic_migrations(database_url: str) -> None:
    """Apply Alembic migrations to the given database URL."""
    backend_dir = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(backend_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(backend_dir / "alembic"))

    original_database_url = settings.database_url
    try:
        settings.database_url = database_url
        command.upgrade(alembic_cfg, "head")
    finally:
        settings.database_url = original_database_url


@pytest.fixture(scope="session")
def database_path(tmp_path_factory) -> Path:
    """Create and migrate a file-backed SQLite database for tests."""
    db_path = tmp_path_factory.mktemp("sqlite") / "backend-test.db"
    _run_alembic_migrations(f"sqlite:///{db_path}")
    return db_path


@pytest.fixture()
def test_settings(database_path: Path, tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        app_env="test",
        database_url=f"sqlite+aiosqlite:///{database_path}",
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
        minio_access_key="test-access-key",
        minio_secret_key="test-secret-key",
        media_public_base_url="https://media.test",
        upload_tmp_dir=str(tmp_path / "uploads"),
    )


@pytest_asyncio.fixture()
async def test_engine(test_settings: Settings) -> AsyncIterator:
    """Create an async engine bound to the migrated SQLite test database."""
    engine = create_async_engine(
        test_settings.database_url,
        connect_args={"check_same_thread": False},
    )
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture()
def minio_client() -> MagicMock:
    client = MagicMock(name="Minio")
    client.bucket_exists.return_value = True
    client.fput_object.return_value = SimpleNamespace(etag="etag-1", version_id=None)
    return client


@pytest.fixture()
def media_gateway(minio_client: MagicMock) -> MediaUploadGateway:
    return MediaUploadGateway(
        minio_client,
        bucket="videotube",
        public_base_url="https://media.test",
    )


@pytest.fixture()
def app(session_maker, test_settings: Settings, media_gateway: MediaUploadGateway) -> Iterator[FastAPI]:
    """Create the FastAPI app with test database, settings and media overrides."""
    application = create_app(test_settings)

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_config] = lambda: test_settings
    application.dependency_overrides[get_gateway] = lambda: media_gateway
    yield application


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an HTTPX async client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture(autouse=True)
async def clean_database(session_maker) -> AsyncIterator[None]:
    """Clear tables before each test to guarantee isolation."""
    async with session_maker() as session:
        for table in reversed(SQLModel.metadata.sorted_tables):
            await session.execute(table.delete())
        await session.commit()
    yield


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    """Provide a raw database session to tests."""
    async with session_maker() as session:
        yield session


def build_registration(**overrides: str) -> dict[str, str]:
    suffix = uuid4().hex[:8]
    payload = {
        "username": f"alice_{suffix}",
        "email": f"alice_{suffix}@example.com",
        "full_name": "Alice Example",
        "password": DEFAULT_PASSWORD,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def register_account(async_client: AsyncClient) -> RegisterFn:
    """Return a helper that registers an account through the API."""

    async def _register(
        *, with_cover: bool = False, **overrides: str
    ) -> tuple[dict[str, str], Response]:
        payload = build_registration(**overrides)
        files = {"avatar": ("avatar.png", PNG_BYTES, "image/png")}
        if with_cover:
            files["cover_image"] = ("cover.jpg", PNG_BYTES, "image/jpeg")
        response = await async_client.post("/api/v1/auth/register", data=payload, files=files)
        return payload, response

    return _register


@pytest.fixture()
def login_account(async_client: AsyncClient, register_account: RegisterFn) -> LoginFn:
    """Return a helper that registers and logs in, yielding tokens and credentials."""

    async def _login(**overrides: str) -> dict[str, Any]:
        payload, response = await register_account(**overrides)
        assert response.status_code == 201, response.text
        login = await async_client.post(
            "/api/v1/auth/login",
            json={"username": payload["username"], "password": payload["password"]},
        )
        assert login.status_code == 200, login.text
        async_client.cookies.clear()
        body = login.json()
        return {
            **payload,
            "user_id": body["user"]["id"],
            "access_token": body["access_token"],
            "refresh_token": body["refresh_token"],
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
        }

    return _login


@pytest.fixture()
def upload_video(async_client: AsyncClient) -> Callable[..., Awaitable[Response]]:
    """Return a helper that uploads a video as the given account."""

    async def _upload(account: dict[str, Any], **overrides: str) -> Response:
        form = {
            "title": "Launch day",
            "description": "Walkthrough of the release",
            "duration": "12.5",
        }
        form.update(overrides)
        files = {
            "video_file": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        }
        return await async_client.post(
            "/api/v1/videos",
            data=form,
            files=files,
            headers=account["headers"],
        )

    return _upload
