"""
Rate limiter infrastructure using slowapi.

Requests are keyed by the client address, preferring proxy headers so that
callers behind a load balancer are limited individually. The same address
is what the authorization dependencies record as the request origin.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from vaultgate_core.config import settings


def client_address(request: Request) -> str:
    """Client address: first X-Forwarded-For hop, then X-Real-IP, then the peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return get_remote_address(request)


# Use Redis in multi-worker deployments; memory storage is per process
limiter = Limiter(
    key_func=client_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)
