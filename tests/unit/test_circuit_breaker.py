"""
SummerEase - Circuit Breaker Unit Tests
=======================================
"""

import pytest

from summerease.utils.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def fail(breaker: CircuitBreaker) -> None:
    with pytest.raises(RuntimeError):
        async with breaker:
            raise RuntimeError("upstream down")


class TestCircuitBreaker:
    """Tests for CircuitBreaker state transitions."""

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self):
        breaker = CircuitBreaker("test", failure_threshold=3, clock=FakeClock())
        for _ in range(3):
            await fail(breaker)

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitOpenError):
            async with breaker:
                pass
        assert breaker.stats.rejected_calls == 1

    @pytest.mark.asyncio
    async def test_success_resets_failure_streak(self):
        breaker = CircuitBreaker("test", failure_threshold=2, clock=FakeClock())
        await fail(breaker)
        async with breaker:
            pass
        await fail(breaker)
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_probe_closes_on_success(self):
        clock = FakeClock()
        breaker = CircuitBreaker("test", failure_threshold=1, reset_timeout=30, clock=clock)
        await fail(breaker)
        assert breaker.state == CircuitState.OPEN

        clock.now = 30
        assert breaker.state == CircuitState.HALF_OPEN
        async with breaker:
            pass
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_probe_failure_reopens(self):
        clock = FakeClock()
        breaker = CircuitBreaker("test", failure_threshold=1, reset_timeout=30, clock=clock)
        await fail(breaker)
        clock.now = 31
        await fail(breaker)
        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_reset_and_snapshot(self):
        breaker = CircuitBreaker("test", failure_threshold=1, clock=FakeClock())
        await fail(breaker)
        assert breaker.snapshot()["healthy"] is False

        breaker.reset()
        snapshot = breaker.snapshot()
        assert snapshot["state"] == "closed"
        assert snapshot["failed"] == 0
        assert snapshot["healthy"] is True
