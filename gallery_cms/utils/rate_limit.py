"""
Per-client rate limiting for the public auth endpoints (slowapi).
"""
from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from gallery_cms.config import settings

PROXY_HEADERS = ("X-Forwarded-For", "X-Real-IP")


def _first_hop(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    client = value.split(",")[0].strip()
    return client or None


def get_client_identifier(request: Request) -> str:
    """
    Identify the caller by IP address.

    Behind a reverse proxy the original client is the first address the
    proxy reports; direct connections use the socket peer.
    """
    for header in PROXY_HEADERS:
        client = _first_hop(request.headers.get(header))
        if client:
            return client
    return get_remote_address(request)


# In-memory counters are enough for a single API process
limiter = Limiter(
    key_func=get_client_identifier,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri="memory://",
)

RATE_LIMITS = {
    "auth": settings.AUTH_RATE_LIMIT,
}
