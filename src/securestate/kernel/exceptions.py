"""Exception hierarchy for SecureState.

All library exceptions inherit from SecureStateException so callers can
catch one base class.

Categories:
- ConfigurationException: invalid or inconsistent settings
- SecurityException: token issuance and parsing problems
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class SecureStateException(Exception):
    """Base exception for all SecureState errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "MALFORMED_TOKEN").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(SecureStateException):
    """Settings failed validation or cannot be resolved."""


# =============================================================================
# Security Exceptions
# =============================================================================


class SecurityException(SecureStateException):
    """Token issuance and token structure errors."""


class MalformedTokenException(SecurityException):
    """A token string does not match the segment layout of the active configuration."""


class TokenGenerationException(SecurityException):
    """The secure random source failed while issuing a token."""
