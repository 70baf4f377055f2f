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
"""SecureState Security — token codec, validator, and cookie transport."""

from securestate.security.adapters.redis import RedisExpiryStore
from securestate.security.codec import IssuedToken, ParsedToken, TokenCodec
from securestate.security.csrf import generate_csrf_token, validate_csrf_token
from securestate.security.ledger import ExpiryLedger
from securestate.security.origin import RequestOrigin
from securestate.security.ports.outbound import ExpiryStore
from securestate.security.validator import RejectReason, TokenValidator, ValidationResult

__all__ = [
    "ExpiryLedger",
    "ExpiryStore",
    "IssuedToken",
    "ParsedToken",
    "RedisExpiryStore",
    "RejectReason",
    "RequestOrigin",
    "TokenCodec",
    "TokenValidator",
    "ValidationResult",
    "generate_csrf_token",
    "validate_csrf_token",
]
