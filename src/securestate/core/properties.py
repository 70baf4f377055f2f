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
"""SecureState configuration properties.

The properties object is an immutable value passed explicitly into token
generation and validation. Tests build scoped instances with
:meth:`SecureStateProperties.with_overrides` instead of mutating shared
state.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from securestate.core.config import Config, config_properties
from securestate.kernel.exceptions import ConfigurationException


class CookieOptions(BaseModel):
    """Attributes applied when the token cookie is written.

    ``secure`` only asks for the ``Secure`` attribute. It is emitted when the
    environment is ``production``, so by default production cookies are
    Secure and development cookies still work over plain HTTP. Set it to
    ``False`` to omit ``Secure`` everywhere.
    """

    model_config = ConfigDict(frozen=True)

    http_only: bool = True
    same_site: Literal["Strict", "Lax", "None"] = "Strict"
    secure: bool = True
    path: str = "/"
    domain: str = ""
    max_age: int | None = Field(default=None, ge=0)


@config_properties(prefix="securestate")
class SecureStateProperties(BaseModel):
    """Token issuance and validation settings (securestate.*)."""

    model_config = ConfigDict(frozen=True)

    token_length: int = Field(default=32, ge=1, le=1024)
    regenerate_token: bool = False
    check_origin: bool = False
    token_expires: bool = False
    token_expiration: int = Field(default=0, ge=0)
    cookie_name: str = Field(default="_csrfToken", min_length=1)
    header_name: str = Field(default="x-csrf-token", min_length=1)
    cookie_options: CookieOptions = Field(default_factory=CookieOptions)
    debug: bool = False
    environment: str = "development"

    @model_validator(mode="after")
    def _check_expiration_window(self) -> SecureStateProperties:
        if self.token_expires and self.token_expiration <= 0:
            raise ValueError("token_expiration must be positive when token_expires is enabled")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_test(self) -> bool:
        return self.environment.lower() == "test"

    @property
    def segment_count(self) -> int:
        """Number of ``:``-separated segments a well-formed token carries."""
        return 1 + int(self.check_origin) + int(self.token_expires)

    @classmethod
    def from_config(cls, config: Config) -> SecureStateProperties:
        """Bind ``securestate.*`` from *config* (env vars included)."""
        return config.bind(cls)

    def with_overrides(self, **changes: Any) -> SecureStateProperties:
        """Return a copy with *changes* applied.

        Nested option groups are merged rather than replaced::

            props.with_overrides(cookie_options={"path": "/app"})

        keeps every other cookie attribute.
        """
        merged = Config._deep_merge(self.model_dump(), changes)
        try:
            return type(self).model_validate(merged)
        except ValidationError as exc:
            raise ConfigurationException(
                f"Invalid SecureState overrides: {exc}",
                code="INVALID_CONFIGURATION",
                context={"keys": sorted(changes)},
            ) from exc


_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _check_level(value: str) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"unknown log level {value!r}")
    return level


@config_properties(prefix="securestate.logging")
class LoggingProperties(BaseModel):
    """Log output settings (securestate.logging.*).

    ``modules`` maps logger names to levels, e.g.
    ``{"securestate.debug": "DEBUG"}``. ``redact_tokens`` shortens token
    values in log events to their first characters.
    """

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    format: Literal["console", "json"] = "console"
    modules: dict[str, str] = Field(default_factory=dict)
    redact_tokens: bool = False

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return _check_level(value)

    @field_validator("modules")
    @classmethod
    def _normalize_module_levels(cls, value: dict[str, str]) -> dict[str, str]:
        return {name: _check_level(level) for name, level in value.items()}

    @classmethod
    def from_config(cls, config: Config) -> LoggingProperties:
        """Bind ``securestate.logging.*`` from *config* (env vars included)."""
        return config.bind(cls)
