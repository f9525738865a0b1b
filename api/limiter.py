"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (to mount as middleware) and by the route modules (to
apply tighter per-route limits with @limiter.limit()).

A single shared instance means all routes share the same in-memory counter
store. default_limits applies RATE_LIMIT (100 requests per 15 minutes per IP)
to every route not explicitly exempted.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.rate_limit],
    storage_uri="memory://",
    enabled=_settings.rate_limit_enabled,
)
