"""
Google Sign-In verification for the admin console.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from gallery_cms.config import settings
from gallery_cms.errors import ServiceError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class FederatedIdentity:
    subject: str
    email: str


def verify_google_credential(credential: str) -> FederatedIdentity:
    """
    Verify a Google ID token against GOOGLE_CLIENT_ID.
    Blocking: fetches Google's signing certificates, so call it from a thread pool.
    """
    if not settings.GOOGLE_CLIENT_ID:
        raise ServiceError("Google sign-in is not configured")

    try:
        payload = id_token.verify_oauth2_token(
            credential,
            google_requests.Request(),
            settings.GOOGLE_CLIENT_ID,
        )
    except ValueError as e:
        logger.warning(f"Rejected Google credential: {str(e)}")
        raise UnauthorizedError("Invalid Google token")

    if not payload.get("sub") or not payload.get("email"):
        raise ValidationError("Invalid Google token", {"credential": ["Token has no subject or email"]})
    if not payload.get("email_verified", False):
        raise UnauthorizedError("Google account email is not verified")

    return FederatedIdentity(subject=payload["sub"], email=payload["email"])


def get_google_verifier() -> Callable[[str], FederatedIdentity]:
    """FastAPI dependency returning the credential verifier (overridden in tests)."""
    return verify_google_credential
