"""Cache tier protocol."""

from typing import Any, Protocol


class CacheTier(Protocol):
    """Key/value store with per-entry TTL.

    Implementations may raise on any failure; callers treat that as a miss.
    """

    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None when absent or expired."""
        ...

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a JSON-compatible value for ttl_seconds."""
        ...
