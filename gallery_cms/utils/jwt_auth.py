"""
JWT token-based authentication utilities for the admin API.
Provides token generation, verification and the FastAPI auth dependencies.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status, Header
from gallery_cms.config import settings
from gallery_cms.utils.auth import is_admin_email


# JWT Configuration
ALGORITHM = "HS256"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to include in token
        expires_delta: Optional custom expiration time

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access"
    })

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


def create_reset_token() -> tuple[str, datetime]:
    """
    Create a signed password-reset token.

    Returns:
        tuple: (token, expiry). The caller stores both; the token is single use.
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    token = jwt.encode(
        {"type": "reset", "jti": secrets.token_hex(16), "exp": expire},
        settings.JWT_SECRET_KEY,
        algorithm=ALGORITHM,
    )
    return token, expire


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Args:
        token: JWT token string

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: If token is invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid token", "message": "Authentication token is invalid or expired"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    # Reset tokens share the signing key but must never authenticate requests
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid token type", "message": "Token is not an access token"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    return payload


def get_token_payload(
    authorization: Optional[str] = Header(None, description="Bearer token for authentication")
) -> dict:
    """
    FastAPI dependency for JWT token authentication.
    Verifies the Bearer token from the Authorization header.

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = None
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Missing token", "message": "Authentication required"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    return verify_token(token)


def require_admin(payload: dict = Depends(get_token_payload)) -> dict:
    """
    FastAPI dependency for admin-only routes.

    Raises:
        HTTPException: 401 from get_token_payload, 403 if the token is not the admin's
    """
    if not is_admin_email(payload.get("email", "")):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Forbidden", "message": "Administrator access required"}
        )
    return payload
