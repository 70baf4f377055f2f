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
"""StructlogAdapter — the default LoggingPort, backed by structlog.

Renders the CSRF diagnostics emitted on ``securestate.debug`` and the
warnings from the filters and expiry stores. Settings are bound from
``securestate.logging`` into :class:`LoggingProperties`::

    securestate:
      logging:
        level: INFO
        format: json
        modules:
          securestate.debug: DEBUG
        redact_tokens: true
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, TextIO

import structlog

from securestate.core.config import Config
from securestate.core.properties import LoggingProperties

_TOKEN_FIELDS = ("token", "presented", "stored")
_VISIBLE_CHARS = 8


def redact_tokens(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor that cuts token values down to a short prefix."""
    for field in _TOKEN_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str) and len(value) > _VISIBLE_CHARS:
            event_dict[field] = value[:_VISIBLE_CHARS] + "..."
    return event_dict


class StructlogAdapter:
    """structlog over stdlib logging, configured from ``securestate.logging``.

    Args:
        stream: Where rendered lines are written. Defaults to stdout.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._properties = LoggingProperties()
        self._configured = False

    @property
    def properties(self) -> LoggingProperties:
        return self._properties

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(self, config: Config) -> None:
        """Bind ``securestate.logging`` from *config* and install structlog.

        Raises:
            ConfigurationException: If the logging section is invalid.
        """
        self._properties = LoggingProperties.from_config(config)
        self._install()
        for name, level in self._properties.modules.items():
            self.set_level(name, level)
        self._configured = True

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))

    def _processors(self) -> list[structlog.types.Processor]:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ]
        if self._properties.redact_tokens:
            processors.append(redact_tokens)
        if self._properties.format == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        return processors

    def _install(self) -> None:
        # Loggers are not cached: the middleware may configure logging after
        # module-level loggers were first used.
        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=self._stream if self._stream is not None else sys.stdout,
            level=getattr(logging, self._properties.level, logging.INFO),
            force=True,
        )
