"""
api/limiter.py -- The one slowapi Limiter every route module shares.

api/main.py mounts it (app.state.limiter + SlowAPIMiddleware); route modules
decorate credential-checking handlers with @limiter.limit(signin_rate_limit).
Counters live in process memory, keyed by client IP, so they reset on
restart and are not shared between worker processes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def signin_rate_limit() -> str:
    """Limit string for credential-checking routes, read from SIGNIN_RATE_LIMIT."""
    return get_settings().signin_rate_limit
