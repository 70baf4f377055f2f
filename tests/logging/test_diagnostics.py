"""Tests for DebugLog — gated accept/reject diagnostics."""

from __future__ import annotations

from unittest.mock import MagicMock

from securestate.core.properties import SecureStateProperties
from securestate.logging.diagnostics import DebugLog


def _debug_log(**overrides) -> tuple[DebugLog, MagicMock]:
    logger = MagicMock()
    return DebugLog(SecureStateProperties(**overrides), logger=logger), logger


class TestDebugLogGate:
    def test_disabled_by_default(self) -> None:
        debug, logger = _debug_log()
        debug.token_rejected("secret_mismatch", "header", "a", "b")
        debug.token_missing(presented=False, stored=True)
        debug.token_issued("tok")
        assert not debug.enabled
        assert logger.method_calls == []

    def test_suppressed_in_test_environment(self) -> None:
        debug, logger = _debug_log(debug=True, environment="test")
        debug.token_rejected("secret_mismatch", "header", "a", "b")
        assert not debug.enabled
        assert logger.method_calls == []

    def test_enabled_outside_tests(self) -> None:
        debug, logger = _debug_log(debug=True, environment="development")
        assert debug.enabled


class TestDebugLogEvents:
    def test_rejection_logs_reason_and_tokens(self) -> None:
        debug, logger = _debug_log(debug=True)
        debug.token_rejected("origin_mismatch", "body", "presented-tok", "stored-tok")
        logger.warning.assert_called_once_with(
            "csrf_token_mismatch",
            reason="origin_mismatch",
            source="body",
            presented="presented-tok",
            stored="stored-tok",
        )

    def test_missing_token(self) -> None:
        debug, logger = _debug_log(debug=True)
        debug.token_missing(presented=True, stored=False)
        logger.warning.assert_called_once_with("csrf_token_missing", presented=True, stored=False)

    def test_issue_and_accept(self) -> None:
        debug, logger = _debug_log(debug=True)
        debug.token_issued("tok")
        debug.token_accepted("header")
        logger.info.assert_called_once_with("csrf_token_issued", token="tok")
        logger.debug.assert_called_once_with("csrf_token_accepted", source="header")
