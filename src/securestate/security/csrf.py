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
"""CSRF token utilities — double-submit cookie pattern.

Thin entry points over :mod:`securestate.security.codec` and
:mod:`securestate.security.validator` for callers that do not need to
inject a clock or a random source.
"""

from __future__ import annotations

from securestate.core.properties import SecureStateProperties
from securestate.security.codec import IssuedToken, generate_token
from securestate.security.origin import RequestOrigin
from securestate.security.validator import ValidationResult, validate_token

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
CSRF_HEADER_NAME: str = "x-csrf-token"
"""Default request header that carries the echoed token."""

SAFE_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
"""HTTP methods that do not require CSRF validation."""

MISSING_MESSAGE: str = "CSRF token missing."
MISMATCH_MESSAGE: str = "CSRF token mismatch."


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------
def generate_csrf_token(
    properties: SecureStateProperties | None = None,
    origin: RequestOrigin | None = None,
) -> IssuedToken:
    """Generate a token using cryptographically-secure randomness.

    Args:
        properties: Active settings; defaults apply when omitted.
        origin: Client facts, required when ``check_origin`` is enabled.
    """
    return generate_token(properties or SecureStateProperties(), origin)


def validate_csrf_token(
    presented: str | None,
    stored: str | None,
    properties: SecureStateProperties | None = None,
    origin: RequestOrigin | None = None,
    expires_at: int | None = None,
) -> ValidationResult:
    """Validate a presented token against the cookie token.

    Returns:
        A truthy :class:`ValidationResult` on accept; falsy with a
        ``reason`` on reject.
    """
    return validate_token(presented, stored, origin, properties or SecureStateProperties(), expires_at)
