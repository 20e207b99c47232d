# eventhub/core/limiter.py
"""
Rate limiter shared by the app and the endpoints that throttle per client.
Kept in its own module so endpoints can import it without importing main.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from eventhub.core.config import settings

# Keyed on client IP; counters live in RATE_LIMIT_STORAGE_URI
# (in-process memory unless a shared store is configured)
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)
