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
"""DebugLog — opt-in diagnostics for CSRF accept/reject decisions.

Output is produced only when ``debug`` is enabled and the environment is
not ``test``, so automated test runs never depend on log output.
"""

from __future__ import annotations

from typing import Any

import structlog

from securestate.core.properties import SecureStateProperties

DEBUG_LOGGER_NAME = "securestate.debug"

_logger = structlog.get_logger(DEBUG_LOGGER_NAME)


class DebugLog:
    """Gate structured debug events on the active properties."""

    def __init__(self, properties: SecureStateProperties, logger: Any = None) -> None:
        self._properties = properties
        self._logger = logger if logger is not None else _logger

    @property
    def enabled(self) -> bool:
        return self._properties.debug and not self._properties.is_test

    def token_issued(self, token: str) -> None:
        if self.enabled:
            self._logger.info("csrf_token_issued", token=token)

    def token_missing(self, *, presented: bool, stored: bool) -> None:
        if self.enabled:
            self._logger.warning("csrf_token_missing", presented=presented, stored=stored)

    def token_rejected(self, reason: str, source: str, presented: str, stored: str) -> None:
        if self.enabled:
            self._logger.warning(
                "csrf_token_mismatch",
                reason=reason,
                source=source,
                presented=presented,
                stored=stored,
            )

    def token_accepted(self, source: str) -> None:
        if self.enabled:
            self._logger.debug("csrf_token_accepted", source=source)
