"""SecureState Logging — structlog adapter and decision diagnostics."""

from securestate.logging.diagnostics import DEBUG_LOGGER_NAME, DebugLog
from securestate.logging.port import LoggingPort
from securestate.logging.structlog_adapter import StructlogAdapter, redact_tokens

__all__ = ["DEBUG_LOGGER_NAME", "DebugLog", "LoggingPort", "StructlogAdapter", "redact_tokens"]
