# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Redis-backed expiry store."""

from __future__ import annotations

from typing import Any, cast

import structlog

from securestate.security.codec import Clock, IssuedToken, now_ms
from securestate.security.hashing import sha256_hex

_logger = structlog.get_logger("securestate.security.expiry")

DEFAULT_KEY_PREFIX = "securestate:expiry:"


class RedisExpiryStore:
    """Expiry store that delegates to a ``redis.asyncio.Redis``-like client.

    Use it when more than one worker serves the application: all workers
    see the record written by whichever one issued the token. Each key
    carries a Redis TTL equal to the token's remaining lifetime, so Redis
    drops it on its own and capacity follows the server's memory policy.
    """

    def __init__(
        self,
        client: Any,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Clock = now_ms,
    ) -> None:
        self._client = client
        self._key_prefix = key_prefix
        self._clock = clock

    def _key(self, token: str) -> str:
        return f"{self._key_prefix}{sha256_hex(token)}"

    async def record(self, issued: IssuedToken) -> None:
        """Store the expiry of *issued* with a matching TTL."""
        if issued.expires_at is None:
            return
        ttl_ms = issued.expires_at - self._clock()
        if ttl_ms <= 0:
            return
        await self._client.set(self._key(issued.value), str(issued.expires_at).encode(), px=ttl_ms)

    async def expires_at(self, token: str) -> int | None:
        """Expiry recorded for *token*, or ``None`` if unknown or already past."""
        raw = await self._client.get(self._key(token))
        if raw is None:
            return None
        try:
            expires_at = int(raw)
        except (TypeError, ValueError):
            _logger.warning("csrf_expiry_record_unreadable", key=self._key(token))
            return None
        if self._clock() > expires_at:
            return None
        return expires_at

    async def forget(self, token: str) -> bool:
        """Remove the record for *token*. Returns True if one existed."""
        count = await self._client.delete(self._key(token))
        return cast(bool, count > 0)

    async def start(self) -> None:
        """Validate connectivity by pinging Redis."""
        await self._client.ping()

    async def stop(self) -> None:
        """Close the underlying Redis connection."""
        await self._client.aclose()
