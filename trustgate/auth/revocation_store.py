"""
Revocation Store
----------------
Append-only set of revoked token strings.

Entries expire after a fixed retention window. Expiry only bounds storage
growth: every refresh token has expired on its own by the time its entry is
purged, so nothing relies on the purge for correctness.
"""

import hashlib
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import redis.asyncio as aioredis
from loguru import logger


class RevocationStore(ABC):
    """Contract for the token blacklist."""

    @abstractmethod
    async def is_revoked(self, token: str) -> bool:
        """Return True if the token has been revoked."""

    @abstractmethod
    async def revoke(self, token: str) -> bool:
        """
        Revoke a token. Revoking an already revoked token is a no-op.

        Returns:
            True if this call created the entry, False if it already existed
        """


class RedisRevocationStore(RevocationStore):
    """
    Redis-backed revocation list.

    Each entry is a key `revoked_token:<sha256(token)>` holding the revoked-at
    timestamp, written with SET NX EX so insertion is atomic and the retention
    window is enforced by Redis itself.
    """

    KEY_PREFIX = "revoked_token:"

    def __init__(self, client: aioredis.Redis, retention_seconds: int):
        self._client = client
        self._retention_seconds = retention_seconds

    def _key(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self.KEY_PREFIX}{digest}"

    async def is_revoked(self, token: str) -> bool:
        return await self._client.exists(self._key(token)) > 0

    async def revoke(self, token: str) -> bool:
        revoked_at = datetime.now(timezone.utc).isoformat()
        created = await self._client.set(
            self._key(token), revoked_at, nx=True, ex=self._retention_seconds
        )
        if created:
            logger.debug("Token added to revocation list")
        else:
            logger.debug("Token already present in revocation list")
        return bool(created)
