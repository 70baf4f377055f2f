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
"""Expiry store protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from securestate.security.codec import IssuedToken


@runtime_checkable
class ExpiryStore(Protocol):
    """Issuance-side record of token expiry instants (unix ms).

    Issuance writes to the store and enforcement reads from it, so every
    worker that enforces a token must share the store the issuer wrote to.
    A token the store does not know is treated as expired.
    """

    async def record(self, issued: IssuedToken) -> None: ...

    async def expires_at(self, token: str) -> int | None: ...

    async def forget(self, token: str) -> bool: ...
