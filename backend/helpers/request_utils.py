"""
Request utilities for extracting client information.

The client address is only ever used as an in-memory throttling key. It is
never stored with a report and never written to logs.
"""

from fastapi import Request

from models.config import settings


def _forwarded_address(request: Request) -> str | None:
    # Standard proxy header (comma-separated, first is client)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return None


def get_client_ip(request: Request) -> str:
    """
    Extract the client's address from the request.

    The socket peer is the key. Proxy headers are read only when the peer
    is listed in TRUSTED_PROXIES, in order of precedence:
    1. X-Forwarded-For (standard proxy header, first IP)
    2. X-Real-IP (nginx)

    Args:
        request: FastAPI request object

    Returns:
        Client address, or "unknown" if not available
    """
    if not request.client:
        return "unknown"

    peer = request.client.host
    if peer in settings.TRUSTED_PROXIES:
        return _forwarded_address(request) or peer

    return peer
