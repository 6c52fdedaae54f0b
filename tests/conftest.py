"""Shared test fixtures."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vibeship.core.config import Settings, get_settings
from vibeship.core.errors import VibeshipError, vibeship_error_handler
from vibeship.core.github.client import get_github_client_factory
from vibeship.core.security.encryption import TokenEncryptionService, get_optional_encryption_service
from vibeship.core.storage.database import (
    Base,
    enable_sqlite_foreign_keys,
    get_db,
    get_session_factory,
)
from vibeship.core.storage.screenshot_storage import ScreenshotStorage, get_screenshot_storage
from vibeship.models.database import Project, ProjectStatus, User

WEBHOOK_SECRET = "test-webhook-secret"
TEST_API_KEY = "vs_0123456789abcdef0123456789abcdef"
TEST_REPO_ID = 424242


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine so concurrent sessions get their own connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Session for arranging and asserting test data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        app_url="http://test",
        github_webhook_secret=WEBHOOK_SECRET,
        github_api_url="https://api.github.test",
        screenshot_dir=str(tmp_path / "screenshots"),
        token_encryption_key=TokenEncryptionService.generate_master_key(),
    )


@pytest.fixture
def encryption_service(test_settings):
    return TokenEncryptionService(test_settings.token_encryption_key)


@pytest.fixture
def screenshot_storage(test_settings):
    return ScreenshotStorage(test_settings.screenshot_dir, test_settings.base_url)


@pytest.fixture
def github_client_factory():
    """Replace with a callable returning a fake client in GitHub tests."""
    return None


@pytest.fixture
def test_app(
    session_factory,
    test_settings,
    encryption_service,
    screenshot_storage,
    github_client_factory,
):
    """FastAPI app with every router and test dependencies."""
    from vibeship.api.routes import ai_instructions, github, owner, project_api, public, webhooks

    app = FastAPI()
    app.add_exception_handler(VibeshipError, vibeship_error_handler)
    for module in (webhooks, project_api, ai_instructions, owner, github, public):
        app.include_router(module.router, prefix="/api")

    async def get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_optional_encryption_service] = lambda: encryption_service
    app.dependency_overrides[get_screenshot_storage] = lambda: screenshot_storage
    if github_client_factory is not None:
        app.dependency_overrides[get_github_client_factory] = lambda: github_client_factory

    return app


@pytest.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def sample_user(db_session):
    user = User(id="user-1", username="shipper", display_name="Ship It")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def make_project(db_session, sample_user):
    """Factory for projects owned by sample_user."""
    counter = {"n": 0}

    async def _make(**overrides) -> Project:
        counter["n"] += 1
        values = {
            "user_id": sample_user.id,
            "name": f"Project {counter['n']}",
            "slug": f"project-{counter['n']}",
            "status": ProjectStatus.active,
        }
        values.update(overrides)
        project = Project(**values)
        db_session.add(project)
        await db_session.commit()
        await db_session.refresh(project)
        return project

    return _make


@pytest.fixture
async def sample_project(make_project):
    """Project with an API key and a webhook-enabled GitHub link."""
    return await make_project(
        name="Vibe Tracker",
        slug="vibe-tracker",
        description="Tracks vibes",
        api_key=TEST_API_KEY,
        github_repo_id=TEST_REPO_ID,
        github_repo_url="https://github.com/shipper/vibe-tracker",
        github_webhook_enabled=True,
    )


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TEST_API_KEY}"}


@pytest.fixture
def owner_headers(sample_user):
    return {"X-User-Id": sample_user.id}
