"""Cache: Redis service and cache key utilities.

Used by the agency repository to cache subdomain resolution (including
negative lookups). Key format lives in keys.py.
"""

from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import agency_subdomain_key
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheProtocol",
    "CacheService",
    "agency_subdomain_key",
]
