"""What AgencyRepository needs from a cache: JSON values under string keys with a TTL."""

from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Satisfied by CacheService (Redis) and by in-memory fakes in tests.

    Values are JSON-serializable dicts (agency snapshots or the miss marker).
    A cache that reports itself unavailable is skipped, never awaited.
    """

    def is_available(self) -> bool: ...

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool: ...

    async def delete(self, key: str) -> bool: ...
