"""
Pytest configuration and fixtures for the gallery CMS tests.
Points the app at a throwaway SQLite file and upload directory before it is imported.
"""
import os
import shutil
import tempfile
from pathlib import Path

import pytest

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="gallery-cms-tests-"))

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'gallery-test.db'}"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "galleries")
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ADMIN_EMAIL"] = "curator@artgallery.io"
os.environ["GOOGLE_CLIENT_ID"] = "gallery-cms-tests.apps.googleusercontent.com"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient  # noqa: E402

from gallery_cms.config import settings  # noqa: E402
from gallery_cms.database import AsyncSessionLocal, create_tables, drop_tables  # noqa: E402
from gallery_cms.main import app  # noqa: E402
from gallery_cms.services.auth_service import AuthService  # noqa: E402
from gallery_cms.services.file_manager import file_manager  # noqa: E402
from gallery_cms.services.gallery_service import GalleryService  # noqa: E402
from gallery_cms.utils.jwt_auth import create_access_token  # noqa: E402
from tests.helpers import ADMIN_PASSWORD, make_image_bytes  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def upload_root():
    """Empty upload directory for each test."""
    root = Path(settings.UPLOAD_DIR)
    root.mkdir(parents=True, exist_ok=True)
    for child in root.iterdir():
        if child.is_dir():
            shutil.rmtree(child)
        else:
            child.unlink()
    return root


@pytest.fixture
async def db(anyio_backend, upload_root):
    """Fresh schema and a session bound to it."""
    await drop_tables()
    await create_tables()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def files(upload_root):
    return file_manager


@pytest.fixture
async def main_gallery(db, files):
    return await GalleryService(db, files).create(name="Main Gallery", slug="main")


@pytest.fixture
async def admin_user(db):
    return await AuthService(db).create_user(settings.ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def admin_headers(admin_user):
    token = create_access_token({"sub": str(admin_user.id), "email": admin_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(db):
    app.dependency_overrides.clear()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes()
