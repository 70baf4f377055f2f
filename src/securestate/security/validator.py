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
"""TokenValidator — decides whether a presented token is acceptable.

Checks run in a fixed order and stop at the first failure::

    parse -> secret -> origin (if check_origin) -> expiry (if token_expires) -> accept

Every outcome is returned as a :class:`ValidationResult`; malformed input
never raises out of :meth:`TokenValidator.validate`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from securestate.core.properties import SecureStateProperties
from securestate.kernel.exceptions import MalformedTokenException
from securestate.security.codec import (
    Clock,
    MissingSegmentException,
    ParsedToken,
    TokenCodec,
    expiration_hash,
    now_ms,
)
from securestate.security.hashing import constant_time_equals
from securestate.security.origin import RequestOrigin


class RejectReason(str, enum.Enum):
    """Why a token was rejected."""

    MALFORMED = "malformed"
    SECRET_MISMATCH = "secret_mismatch"
    ORIGIN_HASH_MISSING = "origin_hash_missing"
    ORIGIN_UNAVAILABLE = "origin_unavailable"
    ORIGIN_MISMATCH = "origin_mismatch"
    EXPIRATION_HASH_MISSING = "expiration_hash_missing"
    EXPIRATION_MISMATCH = "expiration_mismatch"
    EXPIRED = "expired"


@dataclass(frozen=True)
class ValidationResult:
    """Accept, or reject with a :class:`RejectReason`."""

    accepted: bool
    reason: RejectReason | None = None

    @classmethod
    def accept(cls) -> ValidationResult:
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason) -> ValidationResult:
        return cls(accepted=False, reason=reason)

    def __bool__(self) -> bool:
        return self.accepted


def _parse(token: str | None, properties: SecureStateProperties) -> ParsedToken | None:
    """Parse leniently: missing optional segments yield a partial token."""
    if not token:
        return None
    try:
        return TokenCodec.parse(token, properties)
    except MissingSegmentException as exc:
        return exc.partial
    except MalformedTokenException:
        return None


class TokenValidator:
    """Stateless validator; safe to share between concurrent requests.

    Args:
        clock: Returns the current unix time in milliseconds.
    """

    def __init__(self, clock: Clock = now_ms) -> None:
        self._clock = clock

    def validate(
        self,
        presented: str | None,
        stored: str | None,
        origin: RequestOrigin | None,
        properties: SecureStateProperties,
        expires_at: int | None = None,
    ) -> ValidationResult:
        """Validate *presented* (header/body) against *stored* (cookie).

        Args:
            presented: Token echoed by the client.
            stored: Token read from the cookie; the trust anchor for origin
                binding.
            origin: Facts of the current request, required when
                ``check_origin`` is enabled.
            properties: The active configuration.
            expires_at: Expiry instant (unix ms) recorded when *stored* was
                issued. Without it an expiring token is treated as expired.
        """
        presented_token = _parse(presented, properties)
        stored_token = _parse(stored, properties)
        if presented_token is None or stored_token is None:
            return ValidationResult.reject(RejectReason.MALFORMED)

        if not constant_time_equals(presented_token.secret, stored_token.secret):
            return ValidationResult.reject(RejectReason.SECRET_MISMATCH)

        if properties.check_origin:
            reason = self._check_origin(presented_token, stored_token, origin)
            if reason is not None:
                return ValidationResult.reject(reason)

        if properties.token_expires:
            reason = self._check_expiry(presented_token, stored_token, expires_at)
            if reason is not None:
                return ValidationResult.reject(reason)

        return ValidationResult.accept()

    @staticmethod
    def _check_origin(
        presented: ParsedToken, stored: ParsedToken, origin: RequestOrigin | None
    ) -> RejectReason | None:
        if presented.origin_hash is None or stored.origin_hash is None:
            return RejectReason.ORIGIN_HASH_MISSING
        if origin is None or not origin.is_complete:
            return RejectReason.ORIGIN_UNAVAILABLE
        if not constant_time_equals(origin.origin_hash(), stored.origin_hash):
            return RejectReason.ORIGIN_MISMATCH
        return None

    def _check_expiry(
        self, presented: ParsedToken, stored: ParsedToken, expires_at: int | None
    ) -> RejectReason | None:
        if presented.expiration_hash is None or stored.expiration_hash is None:
            return RejectReason.EXPIRATION_HASH_MISSING
        if not constant_time_equals(presented.expiration_hash, stored.expiration_hash):
            return RejectReason.EXPIRATION_MISMATCH
        # The record must be the one this token was issued with.
        if expires_at is None or not constant_time_equals(
            expiration_hash(expires_at), stored.expiration_hash
        ):
            return RejectReason.EXPIRED
        if self._clock() > expires_at:
            return RejectReason.EXPIRED
        return None


_default_validator = TokenValidator()


def validate_token(
    presented: str | None,
    stored: str | None,
    origin: RequestOrigin | None,
    properties: SecureStateProperties,
    expires_at: int | None = None,
) -> ValidationResult:
    """Validate with the wall clock; see :meth:`TokenValidator.validate`."""
    return _default_validator.validate(presented, stored, origin, properties, expires_at)
