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
"""RequestOrigin — the client fingerprint a token can be bound to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from securestate.security.hashing import sha256_hex


@dataclass(frozen=True)
class RequestOrigin:
    """Client IP address and User-Agent string of a request."""

    ip: str
    user_agent: str

    @property
    def is_complete(self) -> bool:
        return bool(self.ip) and bool(self.user_agent)

    def origin_hash(self) -> str:
        """SHA-256 hex digest of ``"{ip}:{user_agent}"``."""
        return sha256_hex(f"{self.ip}:{self.user_agent}")

    @classmethod
    def from_request(cls, request: Any) -> RequestOrigin | None:
        """Extract the origin facts from a Starlette-style request.

        Uses ``request.client.host`` and falls back to the first
        ``X-Forwarded-For`` hop only when the server knows no peer address.
        Returns ``None`` when either the IP or the User-Agent is missing.
        """
        headers = request.headers
        client = getattr(request, "client", None)
        ip: str = getattr(client, "host", "") or ""
        if not ip:
            forwarded = headers.get("x-forwarded-for", "")
            ip = forwarded.split(",")[0].strip()
        user_agent: str = headers.get("user-agent", "") or ""

        origin = cls(ip=ip, user_agent=user_agent)
        return origin if origin.is_complete else None
