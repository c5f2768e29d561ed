"""
Auth service: password and Google login, password change and reset.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_cms.database import get_db
from gallery_cms.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from gallery_cms.models import User
from gallery_cms.utils.auth import dummy_hash, hash_password, is_admin_email, verify_password
from gallery_cms.utils.jwt_auth import create_access_token, create_reset_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _session_for(user: User) -> dict:
    token = create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": "admin" if is_admin_email(user.email) else "user",
    })
    return {"token": token, "user": {"id": user.id, "email": user.email}}


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def login(self, email: str, password: str) -> dict:
        """
        Authenticate with email and password.

        Raises:
            UnauthorizedError: For an unknown email or a wrong password alike
        """
        user = await self.get_user_by_email(email)

        if user is None:
            verify_password(password, dummy_hash())
            logger.info("Failed login attempt for unknown email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.info(f"Failed login attempt for user {user.id}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info(f"User {user.id} logged in")
        return _session_for(user)

    async def federated_login(self, external_id: str, email: str) -> dict:
        """
        Sign in with an identity already verified by Google.
        Creates the account on first use or links the Google id to an existing one.

        Raises:
            ForbiddenError: If the email is not the administrator's
        """
        if not is_admin_email(email):
            logger.warning("Rejected Google login for a non-admin email")
            raise ForbiddenError("This email is not allowed to access the admin panel")

        user = await self.get_user_by_email(email)
        if user is None:
            user = User(email=email.strip().lower(), password_hash="", google_id=external_id)
            self.db.add(user)
            logger.info("Created admin account from Google login")
        elif not user.google_id:
            user.google_id = external_id
            logger.info(f"Linked Google account to user {user.id}")
        elif user.google_id != external_id:
            logger.warning(f"User {user.id} signed in with a different Google id than the one linked")

        await self.db.commit()
        await self.db.refresh(user)
        return _session_for(user)

    async def get_user(self, user_id: int) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create_user(self, email: str, password: str) -> User:
        user = User(email=email.strip().lower(), password_hash=hash_password(password))
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    async def set_password(self, email: str, password: str) -> User:
        """Set a password for the email, creating the account when it does not exist."""
        user = await self.get_user_by_email(email)
        if user is None:
            return await self.create_user(email, password)

        user.password_hash = hash_password(password)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Password set for user {user.id}")
        return user

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = await self.get_user(user_id)

        if not verify_password(current_password, user.password_hash):
            raise ValidationError(
                "Current password is incorrect",
                {"current_password": ["Current password is incorrect"]},
            )

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info(f"User {user_id} changed their password")

    async def request_password_reset(self, email: str) -> Optional[str]:
        """
        Issue a reset token for the email.

        Returns:
            The token, or None when no such user exists. Callers must answer both cases
            identically so the endpoint does not reveal which emails are registered.
        """
        user = await self.get_user_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None

        token, expires = create_reset_token()
        user.reset_token = token
        user.reset_token_expires = expires
        await self.db.commit()

        logger.info(f"Password reset token issued for user {user.id}")
        return token

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Consume a reset token and set a new password.

        Raises:
            ValidationError: If the token is unknown, already used, or expired
        """
        result = await self.db.execute(select(User).where(User.reset_token == token))
        user = result.scalar_one_or_none()

        now = datetime.now(timezone.utc)
        if user is None or user.reset_token_expires is None or _as_utc(user.reset_token_expires) <= now:
            raise ValidationError("Invalid or expired reset token", {"token": ["Invalid or expired reset token"]})

        user.password_hash = hash_password(new_password)
        user.reset_token = None
        user.reset_token_expires = None
        await self.db.commit()
        logger.info(f"Password reset completed for user {user.id}")


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """FastAPI dependency building an AuthService for the request session."""
    return AuthService(db)
