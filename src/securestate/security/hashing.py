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
"""Hashing and comparison helpers shared by the token codec and validator."""

from __future__ import annotations

import hashlib
import hmac
import string

SHA256_HEX_LENGTH: int = 64
"""Length of a SHA-256 digest rendered as lowercase hex."""

_LOWER_HEX = frozenset(string.hexdigits.lower())


def sha256_hex(data: str) -> str:
    """Return the lowercase hex SHA-256 digest of *data* (UTF-8 encoded)."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def constant_time_equals(left: str, right: str) -> bool:
    """Compare two strings without leaking the position of the first difference.

    Non-ASCII input is compared on its UTF-8 bytes, since
    :func:`hmac.compare_digest` only accepts ASCII ``str``.
    """
    return hmac.compare_digest(
        left.encode("utf-8", "surrogatepass"),
        right.encode("utf-8", "surrogatepass"),
    )


def is_hex(value: str) -> bool:
    """``True`` if *value* is a non-empty lowercase hex string."""
    return bool(value) and all(ch in _LOWER_HEX for ch in value)


def is_hex_digest(value: str, length: int = SHA256_HEX_LENGTH) -> bool:
    """``True`` if *value* looks like a lowercase hex digest of *length* characters."""
    return len(value) == length and is_hex(value)
