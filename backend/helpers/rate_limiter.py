"""Rate limiter configuration module.

This module is separate from main.py to avoid circular imports when routers
need to access the limiter. Keys are held in slowapi's in-memory storage only.
"""

from slowapi import Limiter

from helpers.request_utils import get_client_ip
from models.config import settings

# Create rate limiter - imported by routers and main.py.
# Routes without their own limit fall back to the default, applied by SlowAPIMiddleware.
limiter = Limiter(key_func=get_client_ip, default_limits=[settings.API_RATE_LIMIT])
