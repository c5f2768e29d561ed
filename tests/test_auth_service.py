"""
Tests for password and Google login, password change and password reset.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from gallery_cms.config import settings
from gallery_cms.errors import ForbiddenError, UnauthorizedError, ValidationError
from gallery_cms.services.auth_service import AuthService
from gallery_cms.utils.auth import hash_password, verify_password
from gallery_cms.utils.jwt_auth import ALGORITHM
from tests.helpers import ADMIN_PASSWORD

pytestmark = pytest.mark.anyio


@pytest.fixture
def service(db):
    return AuthService(db)


def test_password_hashing():
    hashed = hash_password("impasto")
    assert hashed != "impasto"
    assert verify_password("impasto", hashed)
    assert not verify_password("gouache", hashed)
    assert not verify_password("impasto", "")
    assert not verify_password("impasto", "not-a-bcrypt-hash")


class TestLogin:
    async def test_returns_token_and_user(self, service, admin_user):
        session = await service.login(settings.ADMIN_EMAIL, ADMIN_PASSWORD)

        assert session["user"] == {"id": admin_user.id, "email": admin_user.email}
        claims = jwt.decode(session["token"], settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
        assert claims["sub"] == str(admin_user.id)
        assert claims["type"] == "access"

    async def test_email_is_case_insensitive(self, service, admin_user):
        session = await service.login(settings.ADMIN_EMAIL.upper(), ADMIN_PASSWORD)
        assert session["user"]["id"] == admin_user.id

    async def test_wrong_password_and_unknown_email_look_the_same(self, service, admin_user):
        with pytest.raises(UnauthorizedError) as wrong_password:
            await service.login(settings.ADMIN_EMAIL, "not-the-password")
        with pytest.raises(UnauthorizedError) as unknown_email:
            await service.login("visitor@artgallery.io", ADMIN_PASSWORD)

        assert wrong_password.value.message == unknown_email.value.message

    async def test_google_only_account_cannot_use_password(self, service):
        await service.federated_login("google-sub-1", settings.ADMIN_EMAIL)
        with pytest.raises(UnauthorizedError):
            await service.login(settings.ADMIN_EMAIL, "")


class TestFederatedLogin:
    async def test_creates_account_on_first_sight(self, service):
        session = await service.federated_login("google-sub-1", settings.ADMIN_EMAIL)

        user = await service.get_user(session["user"]["id"])
        assert user.google_id == "google-sub-1"
        assert user.password_hash == ""

    async def test_links_existing_account(self, service, admin_user):
        session = await service.federated_login("google-sub-1", settings.ADMIN_EMAIL)

        assert session["user"]["id"] == admin_user.id
        user = await service.get_user(admin_user.id)
        assert user.google_id == "google-sub-1"
        # Password login keeps working after linking
        await service.login(settings.ADMIN_EMAIL, ADMIN_PASSWORD)

    async def test_other_emails_are_forbidden(self, service):
        with pytest.raises(ForbiddenError):
            await service.federated_login("google-sub-2", "visitor@artgallery.io")
        assert await service.get_user_by_email("visitor@artgallery.io") is None


class TestChangePassword:
    async def test_requires_current_password(self, service, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            await service.change_password(admin_user.id, "wrong-guess", "fresh-varnish")
        assert "current_password" in exc_info.value.errors

    async def test_new_password_replaces_old(self, service, admin_user):
        await service.change_password(admin_user.id, ADMIN_PASSWORD, "fresh-varnish")

        await service.login(settings.ADMIN_EMAIL, "fresh-varnish")
        with pytest.raises(UnauthorizedError):
            await service.login(settings.ADMIN_EMAIL, ADMIN_PASSWORD)


class TestPasswordReset:
    async def test_unknown_email_returns_no_token(self, service):
        assert await service.request_password_reset("visitor@artgallery.io") is None

    async def test_token_is_single_use(self, service, admin_user):
        token = await service.request_password_reset(settings.ADMIN_EMAIL)

        await service.reset_password(token, "new-canvas")
        await service.login(settings.ADMIN_EMAIL, "new-canvas")

        with pytest.raises(ValidationError):
            await service.reset_password(token, "another-canvas")

    async def test_expired_token_is_rejected(self, service, db, admin_user):
        token = await service.request_password_reset(settings.ADMIN_EMAIL)
        user = await service.get_user(admin_user.id)
        user.reset_token_expires = datetime.now(timezone.utc) - timedelta(minutes=1)
        await db.commit()

        with pytest.raises(ValidationError):
            await service.reset_password(token, "new-canvas")

    async def test_unknown_token(self, service, admin_user):
        with pytest.raises(ValidationError):
            await service.reset_password("made-up-token", "new-canvas")
