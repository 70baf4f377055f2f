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
"""Layered configuration with YAML/TOML files, env vars, and pydantic binding."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from securestate.kernel.exceptions import ConfigurationException

T = TypeVar("T", bound=BaseModel)

ENV_PREFIX = "SECURESTATE_"

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")

_CONFIG_PROPERTIES_ATTR = "__securestate_config_prefix__"


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a pydantic model as bindable to a configuration prefix.

    Usage:
        @config_properties(prefix="securestate")
        class SecureStateProperties(BaseModel):
            token_length: int = Field(default=32, ge=1)
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


def env_key_for(key: str) -> str:
    """Map a dot-notation key to its environment variable name.

    ``securestate.cookie_options.same_site`` -> ``SECURESTATE_COOKIE_OPTIONS_SAME_SITE``
    """
    base = key.removeprefix("securestate.")
    return ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")


class Config:
    """Hierarchical configuration with dot-notation access and env var overrides.

    Priority (highest wins):
    1. Environment variables (SECURESTATE_SECTION_KEY format)
    2. Configuration dict / YAML / TOML file values
    3. Model defaults
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """List of config file paths that were loaded, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the raw configuration data."""
        return dict(self._data)

    @classmethod
    def from_file(cls, *paths: str | Path) -> Config:
        """Load and deep-merge configuration from YAML or TOML files.

        Later files win. Missing files are skipped so an optional local
        overlay can be listed after the base file.
        """
        data: dict[str, Any] = {}
        sources: list[str] = []
        for raw in paths:
            path = Path(raw)
            if not path.is_file():
                continue
            data = cls._deep_merge(data, cls._load_config_data(path))
            sources.append(str(path))

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @staticmethod
    def _load_config_data(path: Path) -> dict[str, Any]:
        """Load config data from a YAML or TOML file."""
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f) or {}
        with open(path) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, with override values winning."""
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def merge(self, overrides: dict[str, Any]) -> Config:
        """Return a new Config with *overrides* deep-merged over this one.

        Nested groups are merged key by key, so overriding
        ``cookie_options.path`` keeps the other cookie attributes.
        """
        instance = Config(self._deep_merge(self._data, overrides))
        instance._loaded_sources = list(self._loaded_sources)
        return instance

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, checking env vars first.

        String values containing ``${...}`` placeholders are resolved:
        - ``${ENV_VAR}`` — resolved from environment variables
        - ``${config.key}`` — resolved from other config values
        - ``${key:default}`` — uses default if key/env not found
        """
        env_val = os.environ.get(env_key_for(key))
        if env_val is not None:
            return env_val

        current = self._lookup(key)
        if current is None:
            return default

        if isinstance(current, str) and "${" in current:
            return self._resolve_placeholders(current)

        return current

    def _lookup(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if isinstance(current, dict):
                current = current.get(part)
                if current is None:
                    return None
            else:
                return None
        return current

    def _resolve_placeholders(self, value: str, _depth: int = 0) -> str:
        """Resolve ``${...}`` placeholders in a string value.

        Guards against circular references with a max recursion depth.
        """
        if _depth > 10:
            raise ConfigurationException(
                f"Max recursion depth exceeded resolving placeholders in '{value}'. Check for circular references.",
                code="CIRCULAR_PLACEHOLDER",
            )

        def _replace(match: re.Match[str]) -> str:
            inner = match.group(1)

            if ":" in inner:
                ref_key, default_val = inner.split(":", 1)
            else:
                ref_key, default_val = inner, None

            env_val = os.environ.get(ref_key)
            if env_val is not None:
                return env_val

            current = self._lookup(ref_key)
            if current is not None:
                resolved = str(current)
                if "${" in resolved:
                    resolved = self._resolve_placeholders(resolved, _depth + 1)
                return resolved

            if default_val is not None:
                return cast(str, default_val)

            raise ConfigurationException(
                f"Cannot resolve placeholder '${{{inner}}}': not found in environment or config",
                code="UNRESOLVED_PLACEHOLDER",
            )

        return _PLACEHOLDER_RE.sub(_replace, value)

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get all values under a prefix as a nested dict."""
        current = self._lookup(prefix)
        return current if isinstance(current, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Bind configuration to a @config_properties pydantic model.

        Environment variables override every declared field, including
        fields of nested models.

        Raises:
            ConfigurationException: If the class is undecorated or the
                section fails validation.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                code="NOT_BINDABLE",
            )

        section = self._resolve_section(prefix, self.get_section(prefix), config_cls)
        try:
            return config_cls.model_validate(section)
        except ValidationError as exc:
            raise ConfigurationException(
                f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                code="INVALID_CONFIGURATION",
                context={"prefix": prefix},
            ) from exc

    def _resolve_section(
        self, prefix: str, section: dict[str, Any], model_cls: type[BaseModel]
    ) -> dict[str, Any]:
        """Overlay env vars and resolve placeholders for every field of *model_cls*."""
        resolved = dict(section)
        for name, field in model_cls.model_fields.items():
            key = f"{prefix}.{name}"
            annotation = field.annotation
            if isinstance(annotation, type) and issubclass(annotation, BaseModel):
                nested = section.get(name)
                resolved[name] = self._resolve_section(
                    key, nested if isinstance(nested, dict) else {}, annotation
                )
                continue
            value = self.get(key)
            if value is not None:
                resolved[name] = value
        return resolved
