"""
Auth routes for the admin console.
Login, Google sign-in and password reset are rate limited per client IP.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from typing import Callable
import logging

from gallery_cms.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from gallery_cms.services.auth_service import AuthService, get_auth_service
from gallery_cms.utils.google_auth import FederatedIdentity, get_google_verifier
from gallery_cms.utils.jwt_auth import get_token_payload
from gallery_cms.utils.rate_limit import limiter, RATE_LIMITS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["auth"])
async def login(
    request: Request,
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Log in with email and password.

    Raises:
        UnauthorizedError: 401 with the same message for unknown email and wrong password
    """
    return await service.login(payload.email, payload.password)


@router.post("/google", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["auth"])
async def google_login(
    request: Request,
    payload: GoogleLoginRequest,
    service: AuthService = Depends(get_auth_service),
    verify_credential: Callable[[str], FederatedIdentity] = Depends(get_google_verifier),
):
    """
    Log in with a Google ID token from the admin console.

    Raises:
        UnauthorizedError: 401 if Google rejects the credential
        ForbiddenError: 403 if the Google account is not the administrator's
    """
    identity = await run_in_threadpool(verify_credential, payload.credential)
    return await service.federated_login(identity.subject, identity.email)


@router.get("/me", response_model=UserResponse)
async def get_me(
    token: dict = Depends(get_token_payload),
    service: AuthService = Depends(get_auth_service),
):
    """Get the account behind the bearer token."""
    return await service.get_user(int(token["sub"]))


@router.post("/logout", response_model=MessageResponse)
async def logout(token: dict = Depends(get_token_payload)):
    """
    Tokens are stateless; the client discards its copy.
    Kept so the console has a single logout call to make.
    """
    logger.info(f"User {token.get('sub')} logged out")
    return MessageResponse(message="Logged out successfully")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    token: dict = Depends(get_token_payload),
    service: AuthService = Depends(get_auth_service),
):
    await service.change_password(int(token["sub"]), payload.current_password, payload.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["auth"])
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Issue a password reset token.
    The answer is identical whether or not the email is registered; the token is
    never returned in the response.
    """
    await service.request_password_reset(payload.email)
    return MessageResponse(message="If the email exists, a reset link will be sent")


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["auth"])
async def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Set a new password with a reset token. The token can only be used once.

    Raises:
        ValidationError: 400 if the token is invalid or expired
    """
    await service.reset_password(payload.token, payload.password)
    return MessageResponse(message="Password reset successfully")
