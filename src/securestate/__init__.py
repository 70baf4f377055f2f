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
"""SecureState — double-submit cookie CSRF protection.

Tokens carry a random secret and, optionally, an origin binding and an
expiry. Issue them with :class:`SecureStateMiddleware` (or
:func:`generate_csrf_token`) and check them with
:func:`validate_csrf_token`.
"""

from securestate.core import Config, CookieOptions, SecureStateProperties
from securestate.kernel import (
    ConfigurationException,
    MalformedTokenException,
    SecureStateException,
    SecurityException,
    TokenGenerationException,
)
from securestate.security import (
    ExpiryLedger,
    ExpiryStore,
    IssuedToken,
    ParsedToken,
    RedisExpiryStore,
    RejectReason,
    RequestOrigin,
    TokenCodec,
    TokenValidator,
    ValidationResult,
    generate_csrf_token,
    validate_csrf_token,
)
from securestate.security.cookies import delete_cookie, read_cookie, write_cookie
from securestate.web.adapters.starlette import SecureStateMiddleware, WebFilterChainMiddleware

__version__ = "1.0.0"

__all__ = [
    "Config",
    "ConfigurationException",
    "CookieOptions",
    "ExpiryLedger",
    "ExpiryStore",
    "IssuedToken",
    "MalformedTokenException",
    "ParsedToken",
    "RedisExpiryStore",
    "RejectReason",
    "RequestOrigin",
    "SecureStateException",
    "SecureStateMiddleware",
    "SecureStateProperties",
    "SecurityException",
    "TokenCodec",
    "TokenGenerationException",
    "TokenValidator",
    "ValidationResult",
    "WebFilterChainMiddleware",
    "delete_cookie",
    "generate_csrf_token",
    "read_cookie",
    "validate_csrf_token",
    "write_cookie",
]
