"""Tests for TokenValidator — the accept/reject decision."""

from __future__ import annotations

import pytest

from securestate.core.properties import SecureStateProperties
from securestate.security.codec import TokenCodec, expiration_hash
from securestate.security.origin import RequestOrigin
from securestate.security.validator import (
    RejectReason,
    TokenValidator,
    ValidationResult,
    validate_token,
)

NOW = 1_700_000_000_000
ORIGIN = RequestOrigin(ip="10.0.0.5", user_agent="Agent/1")

PLAIN = SecureStateProperties(token_length=16)
ORIGIN_BOUND = SecureStateProperties(check_origin=True)
EXPIRING = SecureStateProperties(token_expires=True, token_expiration=60)
FULL = SecureStateProperties(check_origin=True, token_expires=True, token_expiration=60)


class _Clock:
    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


@pytest.fixture
def codec(clock: _Clock) -> TokenCodec:
    return TokenCodec(clock=clock)


@pytest.fixture
def validator(clock: _Clock) -> TokenValidator:
    return TokenValidator(clock=clock)


class TestValidationResult:
    def test_accept_is_truthy(self) -> None:
        result = ValidationResult.accept()
        assert result
        assert result.reason is None

    def test_reject_is_falsy(self) -> None:
        result = ValidationResult.reject(RejectReason.EXPIRED)
        assert not result
        assert result.reason is RejectReason.EXPIRED


class TestSecretCheck:
    def test_identical_tokens_accepted(self, codec: TokenCodec, validator: TokenValidator) -> None:
        token = codec.generate(PLAIN).value
        assert len(token) == 32
        assert validator.validate(token, token, None, PLAIN).accepted

    def test_different_tokens_rejected(self, codec: TokenCodec, validator: TokenValidator) -> None:
        x = codec.generate(PLAIN).value
        y = codec.generate(PLAIN).value
        result = validator.validate(x, y, None, PLAIN)
        assert result.reason is RejectReason.SECRET_MISMATCH

    def test_secret_checked_even_with_all_checks_enabled(
        self, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        stored = codec.generate(FULL, ORIGIN)
        other_secret = "f" * 64
        presented = ":".join([other_secret, *stored.value.split(":")[1:]])
        result = validator.validate(presented, stored.value, ORIGIN, FULL, stored.expires_at)
        assert result.reason is RejectReason.SECRET_MISMATCH

    def test_module_level_helper(self, codec: TokenCodec) -> None:
        token = codec.generate(PLAIN).value
        assert validate_token(token, token, None, PLAIN)


class TestMalformedInput:
    @pytest.mark.parametrize(
        "bad",
        [None, "", ":", "::::", "abc:def", "x" * 10_000, "\ud800", "abc\x00"],
    )
    @pytest.mark.parametrize("props", [PLAIN, ORIGIN_BOUND, EXPIRING, FULL])
    def test_never_raises(self, bad, props: SecureStateProperties, validator: TokenValidator) -> None:
        good = "a" * 32
        for presented, stored in ((bad, good), (good, bad)):
            result = validator.validate(presented, stored, ORIGIN, props)
            assert not result.accepted
        assert isinstance(validator.validate(bad, bad, ORIGIN, props), ValidationResult)

    def test_empty_tokens_are_malformed(self, validator: TokenValidator) -> None:
        assert validator.validate("", "", None, PLAIN).reason is RejectReason.MALFORMED
        assert validator.validate(None, "abc", None, PLAIN).reason is RejectReason.MALFORMED

    def test_extra_segment_is_malformed(self, codec: TokenCodec, validator: TokenValidator) -> None:
        token = codec.generate(PLAIN).value
        result = validator.validate(token, f"{token}:{'a' * 64}", None, PLAIN)
        assert result.reason is RejectReason.MALFORMED


class TestOriginCheck:
    def test_matching_origin_accepted(self, codec: TokenCodec, validator: TokenValidator) -> None:
        token = codec.generate(ORIGIN_BOUND, ORIGIN).value
        assert validator.validate(token, token, ORIGIN, ORIGIN_BOUND).accepted

    def test_different_user_agent_rejected(self, codec: TokenCodec, validator: TokenValidator) -> None:
        token = codec.generate(ORIGIN_BOUND, RequestOrigin("1.2.3.4", "UA-A")).value
        result = validator.validate(token, token, RequestOrigin("1.2.3.4", "UA-B"), ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_MISMATCH

    def test_different_ip_rejected(self, codec: TokenCodec, validator: TokenValidator) -> None:
        token = codec.generate(ORIGIN_BOUND, RequestOrigin("1.2.3.4", "UA-A")).value
        result = validator.validate(token, token, RequestOrigin("5.6.7.8", "UA-A"), ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_MISMATCH

    def test_tampered_origin_hash_rejected(self, codec: TokenCodec, validator: TokenValidator) -> None:
        secret, _ = codec.generate(ORIGIN_BOUND, ORIGIN).value.split(":")
        tampered = f"{secret}:{'0' * 64}"
        result = validator.validate(tampered, tampered, ORIGIN, ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_MISMATCH

    def test_stored_token_is_the_trust_anchor(
        self, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        stored = codec.generate(ORIGIN_BOUND, RequestOrigin("9.9.9.9", "Other")).value
        secret = stored.split(":")[0]
        presented = f"{secret}:{ORIGIN.origin_hash()}"
        result = validator.validate(presented, stored, ORIGIN, ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_MISMATCH

    def test_stored_token_without_origin_hash(self, codec: TokenCodec, validator: TokenValidator) -> None:
        presented = codec.generate(ORIGIN_BOUND, ORIGIN).value
        stored = presented.split(":")[0]
        result = validator.validate(presented, stored, ORIGIN, ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_HASH_MISSING

    def test_presented_token_without_origin_hash(
        self, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        stored = codec.generate(ORIGIN_BOUND, ORIGIN).value
        presented = stored.split(":")[0]
        result = validator.validate(presented, stored, ORIGIN, ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_HASH_MISSING

    @pytest.mark.parametrize("origin", [None, RequestOrigin("", "Agent/1"), RequestOrigin("1.1.1.1", "")])
    def test_request_origin_unavailable(
        self, origin, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        token = codec.generate(ORIGIN_BOUND, ORIGIN).value
        result = validator.validate(token, token, origin, ORIGIN_BOUND)
        assert result.reason is RejectReason.ORIGIN_UNAVAILABLE


class TestExpiryCheck:
    def test_fresh_token_accepted(self, codec: TokenCodec, validator: TokenValidator) -> None:
        issued = codec.generate(EXPIRING)
        result = validator.validate(issued.value, issued.value, None, EXPIRING, issued.expires_at)
        assert result.accepted

    def test_at_expiry_instant_still_accepted(
        self, clock: _Clock, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        issued = codec.generate(EXPIRING)
        clock.now = issued.expires_at
        assert validator.validate(issued.value, issued.value, None, EXPIRING, issued.expires_at)

    def test_past_expiry_rejected(
        self, clock: _Clock, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        issued = codec.generate(EXPIRING)
        clock.now = issued.expires_at + 1
        result = validator.validate(issued.value, issued.value, None, EXPIRING, issued.expires_at)
        assert result.reason is RejectReason.EXPIRED

    def test_missing_record_fails_closed(self, codec: TokenCodec, validator: TokenValidator) -> None:
        issued = codec.generate(EXPIRING)
        result = validator.validate(issued.value, issued.value, None, EXPIRING)
        assert result.reason is RejectReason.EXPIRED

    def test_record_must_match_token(self, codec: TokenCodec, validator: TokenValidator) -> None:
        issued = codec.generate(EXPIRING)
        forged_expiry = issued.expires_at + 3_600_000
        result = validator.validate(issued.value, issued.value, None, EXPIRING, forged_expiry)
        assert result.reason is RejectReason.EXPIRED

    def test_expiration_hashes_must_agree(self, codec: TokenCodec, validator: TokenValidator) -> None:
        issued = codec.generate(EXPIRING)
        secret = issued.value.split(":")[0]
        presented = f"{secret}:{expiration_hash(NOW + 10**9)}"
        result = validator.validate(presented, issued.value, None, EXPIRING, issued.expires_at)
        assert result.reason is RejectReason.EXPIRATION_MISMATCH

    def test_missing_expiration_hash(self, codec: TokenCodec, validator: TokenValidator) -> None:
        issued = codec.generate(EXPIRING)
        secret = issued.value.split(":")[0]
        result = validator.validate(secret, issued.value, None, EXPIRING, issued.expires_at)
        assert result.reason is RejectReason.EXPIRATION_HASH_MISSING

    def test_full_token_missing_expiration_segment(
        self, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        issued = codec.generate(FULL, ORIGIN)
        truncated = ":".join(issued.value.split(":")[:2])
        result = validator.validate(truncated, truncated, ORIGIN, FULL, issued.expires_at)
        assert result.reason is RejectReason.EXPIRATION_HASH_MISSING

    def test_full_token_accepted(self, codec: TokenCodec, validator: TokenValidator) -> None:
        issued = codec.generate(FULL, ORIGIN)
        assert validator.validate(issued.value, issued.value, ORIGIN, FULL, issued.expires_at)

    def test_origin_checked_before_expiry(
        self, clock: _Clock, codec: TokenCodec, validator: TokenValidator
    ) -> None:
        issued = codec.generate(FULL, ORIGIN)
        clock.now = issued.expires_at + 1
        other = RequestOrigin("10.0.0.5", "Agent/2")
        result = validator.validate(issued.value, issued.value, other, FULL, issued.expires_at)
        assert result.reason is RejectReason.ORIGIN_MISMATCH
