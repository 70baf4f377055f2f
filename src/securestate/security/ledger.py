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
"""ExpiryLedger — in-process expiry store, the default ExpiryStore.

Only the hash of a token's expiry travels on the wire. The issuer keeps
the plaintext instant here, keyed by a digest of the token value, and
hands it to :meth:`TokenValidator.validate`. A token with no record is
treated as expired.

The ledger lives inside one process. Deployments running several workers
must share a store instead (see
:class:`securestate.security.adapters.redis.RedisExpiryStore`), otherwise
a token issued by one worker is rejected as expired by the others.
"""

from __future__ import annotations

import threading
from collections import OrderedDict

import structlog

from securestate.security.codec import Clock, IssuedToken, now_ms
from securestate.security.hashing import sha256_hex

_logger = structlog.get_logger("securestate.security.expiry")


class ExpiryLedger:
    """Bounded, thread-safe mapping of issued token -> expiry (unix ms).

    Entries are dropped once their expiry has passed. Capacity is
    ``max_entries``: when the ledger is full the oldest record is evicted
    to make room, and the evicted token is then rejected as expired at
    its next unsafe request. Its next safe request reissues the cookie.
    Every token issued to a cookie-less request takes a slot, so size
    ``max_entries`` for the peak number of live tokens, or use a shared
    store with its own capacity policy. :attr:`evictions` counts the
    records lost this way and a warning is logged when eviction starts.
    """

    def __init__(self, max_entries: int = 100_000, clock: Clock = now_ms) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()
        self._evictions = 0
        self._saturated = False

    @property
    def evictions(self) -> int:
        """Number of live records evicted because the ledger was full."""
        return self._evictions

    async def record(self, issued: IssuedToken) -> None:
        """Remember the expiry of *issued*; tokens without one are ignored."""
        if issued.expires_at is None:
            return
        key = sha256_hex(issued.value)
        evicted = 0
        with self._lock:
            self._prune_locked()
            self._entries[key] = issued.expires_at
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                evicted += 1
            self._evictions += evicted
            warn = evicted > 0 and not self._saturated
            if evicted:
                self._saturated = True
            elif len(self._entries) < self._max_entries:
                self._saturated = False
        if warn:
            _logger.warning("csrf_expiry_ledger_full", max_entries=self._max_entries)

    async def expires_at(self, token: str) -> int | None:
        """Expiry recorded for *token*, or ``None`` if unknown or already past."""
        key = sha256_hex(token)
        with self._lock:
            expires_at = self._entries.get(key)
            if expires_at is not None and self._clock() > expires_at:
                del self._entries[key]
                return None
            return expires_at

    async def forget(self, token: str) -> bool:
        """Drop the record for *token*. Returns ``True`` if one existed."""
        with self._lock:
            return self._entries.pop(sha256_hex(token), None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _prune_locked(self) -> None:
        # Records are appended in issue order, so the oldest expire first.
        now = self._clock()
        while self._entries:
            key, expires_at = next(iter(self._entries.items()))
            if expires_at >= now:
                break
            del self._entries[key]
