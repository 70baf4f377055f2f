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
"""LoggingPort — how SecureState obtains and configures its loggers.

:class:`~securestate.web.adapters.starlette.middleware.SecureStateMiddleware`
accepts any implementation and hands the CSRF filters the logger it
returns for ``securestate.debug``. Loggers must take structlog-style
calls: ``logger.warning("csrf_token_mismatch", reason=...)``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from securestate.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Source of structured loggers for the CSRF filters and expiry stores."""

    def configure(self, config: Config) -> None:
        """Apply the ``securestate.logging`` section of *config*."""
        ...

    def get_logger(self, name: str) -> Any:
        """Return a structured logger named *name*."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Set the threshold of the logger *name*."""
        ...
