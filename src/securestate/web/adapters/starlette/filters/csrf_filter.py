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
"""CSRF filters — double-submit cookie issuance and enforcement.

* :class:`CsrfIssuanceFilter` makes sure every response carries a token
  cookie. An existing cookie is reused unless ``regenerate_token`` is set,
  it no longer parses under the active settings, its origin binding
  belongs to another client, or the expiry store no longer knows it.
* :class:`CsrfEnforcementFilter` guards unsafe methods (POST, PUT, DELETE,
  PATCH, ...). The echoed token is taken from the body field named after
  the cookie (form or JSON body) or from the ``x-csrf-token`` header and
  compared against the cookie. A missing side or any reject produces an
  HTTP 403 JSON response.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs

import structlog
from starlette.responses import JSONResponse

from securestate.core.properties import SecureStateProperties
from securestate.kernel.exceptions import MalformedTokenException
from securestate.logging.diagnostics import DebugLog
from securestate.security.codec import TokenCodec
from securestate.security.cookies import read_cookie, write_cookie
from securestate.security.csrf import MISMATCH_MESSAGE, MISSING_MESSAGE, SAFE_METHODS
from securestate.security.hashing import constant_time_equals
from securestate.security.ledger import ExpiryLedger
from securestate.security.origin import RequestOrigin
from securestate.security.ports.outbound import ExpiryStore
from securestate.security.validator import TokenValidator
from securestate.web.filters import OncePerRequestFilter
from securestate.web.ports.filter import CallNext

logger = structlog.get_logger("securestate.web.csrf")

_FORM_TYPE = "application/x-www-form-urlencoded"
_JSON_TYPE = "application/json"


class CsrfIssuanceFilter(OncePerRequestFilter):
    """Issue (or reuse) the token cookie and expose it as ``request.state.csrf_token``."""

    def __init__(
        self,
        properties: SecureStateProperties,
        expiry_store: ExpiryStore | None = None,
        codec: TokenCodec | None = None,
        debug_logger: Any = None,
        **patterns: Any,
    ) -> None:
        super().__init__(**patterns)
        self._properties = properties
        self._expiry_store = expiry_store if expiry_store is not None else ExpiryLedger()
        self._codec = codec if codec is not None else TokenCodec()
        self._debug = DebugLog(properties, logger=debug_logger)

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        props = self._properties
        token = read_cookie(request.headers.get("cookie"), props.cookie_name)

        origin = RequestOrigin.from_request(request)
        issued = None
        if props.regenerate_token or not await self._is_reusable(token, origin):
            if props.check_origin and origin is None:
                logger.warning("csrf_origin_unavailable", path=request.url.path)
                token = None
            else:
                issued = self._codec.generate(props, origin)
                await self._expiry_store.record(issued)
                token = issued.value
                self._debug.token_issued(token)

        request.state.csrf_token = token
        response = await call_next(request)

        if issued is not None:
            max_age = props.token_expiration if props.token_expires else None
            response.headers.append(
                "set-cookie",
                write_cookie(
                    props.cookie_name,
                    issued.value,
                    props.cookie_options,
                    production=props.is_production,
                    max_age=max_age,
                ),
            )
        return response

    async def _is_reusable(self, token: str | None, origin: RequestOrigin | None) -> bool:
        if not token:
            return False
        try:
            parsed = TokenCodec.parse(token, self._properties)
        except MalformedTokenException:
            return False
        if self._properties.check_origin:
            # A cookie bound to another client can never validate here.
            if origin is None or parsed.origin_hash is None:
                return False
            if not constant_time_equals(origin.origin_hash(), parsed.origin_hash):
                return False
        if self._properties.token_expires:
            return await self._expiry_store.expires_at(token) is not None
        return True


class CsrfEnforcementFilter(OncePerRequestFilter):
    """Reject unsafe requests whose echoed token does not match the cookie."""

    def __init__(
        self,
        properties: SecureStateProperties,
        expiry_store: ExpiryStore | None = None,
        validator: TokenValidator | None = None,
        debug_logger: Any = None,
        **patterns: Any,
    ) -> None:
        super().__init__(**patterns)
        self._properties = properties
        self._expiry_store = expiry_store if expiry_store is not None else ExpiryLedger()
        self._validator = validator if validator is not None else TokenValidator()
        self._debug = DebugLog(properties, logger=debug_logger)

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        if request.method in SAFE_METHODS:
            return await call_next(request)

        props = self._properties
        cookie_token = read_cookie(request.headers.get("cookie"), props.cookie_name)
        body_token = await self._body_token(request)
        header_token = request.headers.get(props.header_name) or None

        source, presented = ("body", body_token) if body_token else ("header", header_token)
        if not presented or not cookie_token:
            self._debug.token_missing(presented=bool(presented), stored=bool(cookie_token))
            return JSONResponse({"error": MISSING_MESSAGE}, status_code=403)

        expires_at = None
        if props.token_expires:
            expires_at = await self._expiry_store.expires_at(cookie_token)
        result = self._validator.validate(
            presented,
            cookie_token,
            RequestOrigin.from_request(request),
            props,
            expires_at=expires_at,
        )
        if not result.accepted:
            reason = result.reason.value if result.reason is not None else ""
            self._debug.token_rejected(reason, source, presented, cookie_token)
            return JSONResponse({"error": MISMATCH_MESSAGE}, status_code=403)

        self._debug.token_accepted(source)
        return await call_next(request)

    async def _body_token(self, request: Any) -> str | None:
        """Read the token field from a urlencoded or JSON body, if any."""
        content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type not in (_FORM_TYPE, _JSON_TYPE):
            return None

        body: bytes = await request.body()
        if not body:
            return None

        name = self._properties.cookie_name
        try:
            if content_type == _FORM_TYPE:
                values = parse_qs(body.decode("utf-8"), keep_blank_values=False).get(name)
                return values[0] if values else None
            payload = json.loads(body)
        except (ValueError, RecursionError):
            # Unreadable bodies fall back to the header token.
            return None

        if isinstance(payload, dict):
            value = payload.get(name)
            return value if isinstance(value, str) and value else None
        return None
