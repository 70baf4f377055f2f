"""Tests for ExpiryLedger — the in-process expiry store."""

from __future__ import annotations

import asyncio

import pytest

from securestate.security.codec import IssuedToken
from securestate.security.ledger import ExpiryLedger
from securestate.security.ports.outbound import ExpiryStore


class _Clock:
    def __init__(self, now: int = 1_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class TestExpiryLedger:
    def test_satisfies_expiry_store_protocol(self) -> None:
        assert isinstance(ExpiryLedger(), ExpiryStore)

    @pytest.mark.asyncio
    async def test_records_and_returns_expiry(self) -> None:
        ledger = ExpiryLedger(clock=_Clock())
        await ledger.record(IssuedToken("tok", expires_at=5_000))
        assert await ledger.expires_at("tok") == 5_000
        assert await ledger.expires_at("other") is None

    @pytest.mark.asyncio
    async def test_tokens_without_expiry_are_ignored(self) -> None:
        ledger = ExpiryLedger(clock=_Clock())
        await ledger.record(IssuedToken("tok"))
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_past_expiry_is_forgotten(self) -> None:
        clock = _Clock()
        ledger = ExpiryLedger(clock=clock)
        await ledger.record(IssuedToken("tok", expires_at=2_000))
        clock.now = 2_001
        assert await ledger.expires_at("tok") is None
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_record_prunes_expired_entries(self) -> None:
        clock = _Clock()
        ledger = ExpiryLedger(clock=clock)
        await ledger.record(IssuedToken("old", expires_at=1_500))
        clock.now = 2_000
        await ledger.record(IssuedToken("new", expires_at=3_000))
        assert len(ledger) == 1
        assert ledger.evictions == 0

    @pytest.mark.asyncio
    async def test_forget(self) -> None:
        ledger = ExpiryLedger(clock=_Clock())
        await ledger.record(IssuedToken("tok", expires_at=5_000))
        assert await ledger.forget("tok") is True
        assert await ledger.forget("tok") is False

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            ExpiryLedger(max_entries=0)

    @pytest.mark.asyncio
    async def test_concurrent_records(self) -> None:
        ledger = ExpiryLedger(clock=_Clock())
        await asyncio.gather(
            *(ledger.record(IssuedToken(f"tok-{i}", expires_at=10_000)) for i in range(1_600))
        )
        assert len(ledger) == 1_600


class TestExpiryLedgerCapacity:
    @pytest.mark.asyncio
    async def test_oldest_evicted_when_full(self) -> None:
        ledger = ExpiryLedger(max_entries=2, clock=_Clock())
        for name in ("a", "b", "c"):
            await ledger.record(IssuedToken(name, expires_at=10_000))
        assert await ledger.expires_at("a") is None
        assert await ledger.expires_at("c") == 10_000
        assert ledger.evictions == 1

    @pytest.mark.asyncio
    async def test_flood_of_new_tokens_evicts_live_records(self) -> None:
        ledger = ExpiryLedger(max_entries=100, clock=_Clock())
        await ledger.record(IssuedToken("victim", expires_at=10_000))
        for i in range(100):
            await ledger.record(IssuedToken(f"flood-{i}", expires_at=10_000))

        assert await ledger.expires_at("victim") is None
        assert len(ledger) == 100
        assert ledger.evictions == 1

    @pytest.mark.asyncio
    async def test_expired_records_make_room_before_eviction(self) -> None:
        clock = _Clock()
        ledger = ExpiryLedger(max_entries=2, clock=clock)
        await ledger.record(IssuedToken("a", expires_at=1_500))
        await ledger.record(IssuedToken("b", expires_at=1_600))
        clock.now = 2_000
        await ledger.record(IssuedToken("c", expires_at=5_000))
        assert ledger.evictions == 0
        assert await ledger.expires_at("c") == 5_000
