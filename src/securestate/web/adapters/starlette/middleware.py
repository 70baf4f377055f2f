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
"""SecureStateMiddleware — issuance and enforcement wired with a shared expiry store."""

from __future__ import annotations

from collections.abc import Sequence

from starlette.types import ASGIApp

from securestate.core.config import Config
from securestate.core.properties import SecureStateProperties
from securestate.logging.diagnostics import DEBUG_LOGGER_NAME
from securestate.logging.port import LoggingPort
from securestate.logging.structlog_adapter import StructlogAdapter
from securestate.security.codec import TokenCodec
from securestate.security.ledger import ExpiryLedger
from securestate.security.ports.outbound import ExpiryStore
from securestate.security.validator import TokenValidator
from securestate.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from securestate.web.adapters.starlette.filters.csrf_filter import (
    CsrfEnforcementFilter,
    CsrfIssuanceFilter,
)


class SecureStateMiddleware(WebFilterChainMiddleware):
    """Double-submit cookie CSRF protection for a Starlette/ASGI app.

    Enforcement runs first so an unsafe request is checked against the
    cookie it arrived with, then issuance sets or rotates the cookie on
    the way out.

    Passing ``config`` binds :class:`SecureStateProperties` from it (unless
    ``properties`` is given) and configures logging from its
    ``securestate.logging`` section through ``logging_port``, which
    defaults to :class:`StructlogAdapter`.

    The default expiry store is an in-process :class:`ExpiryLedger`. Apps
    served by several workers with ``token_expires`` on must pass a shared
    ``expiry_store`` such as
    :class:`~securestate.security.adapters.redis.RedisExpiryStore`.

    Every downstream response is buffered in full before the token cookie
    is added, streaming responses included. Exclude streaming routes with
    ``exclude_patterns`` when that matters.

    Usage::

        app = Starlette(
            routes=routes,
            middleware=[Middleware(SecureStateMiddleware, config=Config.from_file("app.yaml"))],
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        properties: SecureStateProperties | None = None,
        expiry_store: ExpiryStore | None = None,
        codec: TokenCodec | None = None,
        validator: TokenValidator | None = None,
        exclude_patterns: Sequence[str] = (),
        config: Config | None = None,
        logging_port: LoggingPort | None = None,
    ) -> None:
        if config is not None:
            if properties is None:
                properties = SecureStateProperties.from_config(config)
            if logging_port is None:
                logging_port = StructlogAdapter()
            logging_port.configure(config)

        self.properties = properties or SecureStateProperties()
        self.expiry_store = expiry_store if expiry_store is not None else ExpiryLedger()
        debug_logger = logging_port.get_logger(DEBUG_LOGGER_NAME) if logging_port is not None else None
        super().__init__(
            app,
            filters=[
                CsrfEnforcementFilter(
                    self.properties,
                    expiry_store=self.expiry_store,
                    validator=validator,
                    debug_logger=debug_logger,
                    exclude_patterns=exclude_patterns,
                ),
                CsrfIssuanceFilter(
                    self.properties,
                    expiry_store=self.expiry_store,
                    codec=codec,
                    debug_logger=debug_logger,
                    exclude_patterns=exclude_patterns,
                ),
            ],
        )
