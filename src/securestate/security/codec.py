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
"""TokenCodec — the segmented wire format of a CSRF token.

A token is ``secret[:originHash][:expirationHash]``:

* ``secret`` — ``token_length`` random bytes, hex-encoded. Always present.
* ``originHash`` — SHA-256 of ``"{ip}:{user_agent}"`` when ``check_origin``.
* ``expirationHash`` — SHA-256 of the absolute expiry (unix ms, decimal)
  when ``token_expires``.

The segment count of a well-formed token is fully determined by the
active properties. Only the hash of the expiry travels on the wire; the
plaintext instant is returned to the issuer in :class:`IssuedToken`.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass

from securestate.core.properties import SecureStateProperties
from securestate.kernel.exceptions import (
    MalformedTokenException,
    SecurityException,
    TokenGenerationException,
)
from securestate.security.hashing import is_hex_digest, sha256_hex
from securestate.security.origin import RequestOrigin

SEPARATOR: str = ":"

Entropy = Callable[[int], bytes]
Clock = Callable[[], int]


def now_ms() -> int:
    """Current unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def expiration_hash(expires_at: int) -> str:
    """Hash an absolute expiry instant (unix ms) the way it appears on the wire."""
    return sha256_hex(str(expires_at))


@dataclass(frozen=True)
class IssuedToken:
    """A freshly generated token and the expiry instant it was issued with."""

    value: str
    expires_at: int | None = None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ParsedToken:
    """The segments of a well-formed token."""

    secret: str
    origin_hash: str | None = None
    expiration_hash: str | None = None


class MissingSegmentException(MalformedTokenException):
    """A token lacks one or more optional segments the properties require."""

    def __init__(self, message: str, partial: ParsedToken) -> None:
        super().__init__(message, code="MISSING_SEGMENT")
        self.partial = partial


class TokenCodec:
    """Produce and parse tokens for a given set of properties.

    Args:
        entropy: Secure random source returning ``n`` bytes.
        clock: Returns the current unix time in milliseconds.
    """

    def __init__(self, entropy: Entropy = secrets.token_bytes, clock: Clock = now_ms) -> None:
        self._entropy = entropy
        self._clock = clock

    def generate(
        self,
        properties: SecureStateProperties,
        origin: RequestOrigin | None = None,
    ) -> IssuedToken:
        """Generate a token shaped by *properties*.

        Raises:
            TokenGenerationException: If the random source fails.
            SecurityException: If origin binding is enabled but *origin* is
                missing or incomplete.
        """
        segments = [self._secret(properties.token_length)]

        if properties.check_origin:
            if origin is None or not origin.is_complete:
                raise SecurityException(
                    "Cannot bind token to origin: client IP and User-Agent are required",
                    code="ORIGIN_UNAVAILABLE",
                )
            segments.append(origin.origin_hash())

        expires_at: int | None = None
        if properties.token_expires:
            expires_at = self._clock() + properties.token_expiration * 1000
            segments.append(expiration_hash(expires_at))

        return IssuedToken(value=SEPARATOR.join(segments), expires_at=expires_at)

    def _secret(self, length: int) -> str:
        try:
            raw = self._entropy(length)
        except Exception as exc:
            raise TokenGenerationException(
                f"Secure random source failed: {exc}",
                code="ENTROPY_FAILURE",
            ) from exc
        if len(raw) != length:
            raise TokenGenerationException(
                f"Secure random source returned {len(raw)} bytes, expected {length}",
                code="ENTROPY_FAILURE",
            )
        return raw.hex()

    @staticmethod
    def parse(token: str, properties: SecureStateProperties) -> ParsedToken:
        """Split *token* into its segments under *properties*.

        Raises:
            MissingSegmentException: If trailing optional segments are
                absent. The exception carries the segments that were found.
            MalformedTokenException: On too many segments, an empty
                segment, or a hash segment that is not a 64-char lowercase
                hex digest.
        """
        if not isinstance(token, str) or not token:
            raise MalformedTokenException("Token is empty", code="MALFORMED_TOKEN")

        segments = token.split(SEPARATOR)
        expected = properties.segment_count
        if len(segments) > expected:
            raise MalformedTokenException(
                f"Token has {len(segments)} segments, expected {expected}",
                code="MALFORMED_TOKEN",
                context={"segments": len(segments), "expected": expected},
            )
        if any(not segment for segment in segments):
            raise MalformedTokenException("Token has an empty segment", code="MALFORMED_TOKEN")

        secret, *hashes = segments
        for digest in hashes:
            if not is_hex_digest(digest):
                raise MalformedTokenException(
                    "Token hash segment is not a SHA-256 hex digest",
                    code="MALFORMED_TOKEN",
                )

        # Optional segments fill in canonical order: origin, then expiration.
        origin_hash = hashes.pop(0) if properties.check_origin and hashes else None
        exp_hash = hashes.pop(0) if properties.token_expires and hashes else None
        parsed = ParsedToken(secret=secret, origin_hash=origin_hash, expiration_hash=exp_hash)

        if len(segments) < expected:
            raise MissingSegmentException(
                f"Token has {len(segments)} segments, expected {expected}",
                partial=parsed,
            )
        return parsed


_default_codec = TokenCodec()


def generate_token(
    properties: SecureStateProperties, origin: RequestOrigin | None = None
) -> IssuedToken:
    """Generate a token with the default secure random source."""
    return _default_codec.generate(properties, origin)


def parse_token(token: str, properties: SecureStateProperties) -> ParsedToken:
    """Parse *token* under *properties*."""
    return TokenCodec.parse(token, properties)
