"""Tests for the circuit breaker."""

import asyncio
from datetime import timedelta

import pytest

from visconnect.services.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)
from visconnect.services.errors import CircuitOpenError, UpstreamError


def make_breaker(clock, threshold=3, cooldown=60):
    return CircuitBreaker(
        "test",
        CircuitBreakerConfig(
            failure_threshold=threshold,
            reset_timeout=timedelta(seconds=cooldown),
        ),
        clock=clock,
    )


async def fail():
    raise UpstreamError("boom", status_code=500)


async def succeed():
    return "ok"


class TestCircuitBreakerStates:
    """Test circuit breaker state transitions."""

    def test_initial_state_is_closed(self, clock):
        """Test circuit starts in CLOSED state."""
        cb = make_breaker(clock)
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0
        assert cb.can_request() is True

    def test_stays_closed_below_threshold(self, clock):
        """Test threshold - 1 failures keep the circuit closed."""
        cb = make_breaker(clock, threshold=3)

        cb.record_failure()
        cb.record_failure()

        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 2

    def test_opens_at_threshold(self, clock):
        """Test circuit opens once failure_threshold is reached."""
        cb = make_breaker(clock, threshold=3)

        for _ in range(3):
            cb.record_failure()

        assert cb.state == CircuitState.OPEN
        assert cb.can_request() is False

    def test_success_resets_failure_count(self, clock):
        """Test a success in CLOSED clears accumulated failures."""
        cb = make_breaker(clock, threshold=3)

        cb.record_failure()
        cb.record_failure()
        cb.record_success()

        assert cb.failure_count == 0
        cb.record_failure()
        assert cb.state == CircuitState.CLOSED

    def test_half_open_only_after_cooldown(self, clock):
        """Test OPEN becomes HALF_OPEN strictly after the cooldown."""
        cb = make_breaker(clock, threshold=1, cooldown=60)
        cb.record_failure()

        clock.advance(60)
        assert cb.state == CircuitState.OPEN

        clock.advance(0.001)
        assert cb.state == CircuitState.HALF_OPEN

    def test_time_until_reset(self, clock):
        """Test remaining cooldown is reported while open."""
        cb = make_breaker(clock, threshold=1, cooldown=60)
        assert cb.get_time_until_reset() is None

        cb.record_failure()
        clock.advance(20)

        assert cb.get_time_until_reset() == pytest.approx(40)

    def test_manual_reset(self, clock):
        """Test reset() closes the circuit and clears counters."""
        cb = make_breaker(clock, threshold=1)
        cb.record_failure()

        cb.reset()

        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0
        assert cb.last_failure_time is None

    def test_get_status(self, clock):
        """Test status dictionary."""
        cb = make_breaker(clock, threshold=1)
        cb.record_failure()

        status = cb.get_status()

        assert status["service_id"] == "test"
        assert status["state"] == "OPEN"
        assert status["failure_count"] == 1
        assert status["last_failure"] == clock.now().isoformat()


class TestCircuitBreakerExecute:
    """Test running operations through the breaker."""

    @pytest.mark.asyncio
    async def test_success_passes_through(self, clock):
        """Test result is returned unchanged."""
        cb = make_breaker(clock)
        assert await cb.execute(succeed) == "ok"

    @pytest.mark.asyncio
    async def test_failure_propagates_and_counts(self, clock):
        """Test the operation's error is re-raised and recorded."""
        cb = make_breaker(clock)

        with pytest.raises(UpstreamError):
            await cb.execute(fail)

        assert cb.failure_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_rejects_without_invoking(self, clock):
        """Test an open circuit fails fast and never calls the operation."""
        cb = make_breaker(clock, threshold=1)
        cb.record_failure()
        calls = []

        async def operation():
            calls.append(1)
            return "ok"

        with pytest.raises(CircuitOpenError) as exc_info:
            await cb.execute(operation)

        assert calls == []
        assert exc_info.value.status_code == 503
        assert exc_info.value.reset_after_seconds == pytest.approx(60)
        assert "temporarily unavailable" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_probe_success_closes(self, clock):
        """Test a successful half-open probe closes the circuit."""
        cb = make_breaker(clock, threshold=2, cooldown=60)
        cb.record_failure()
        cb.record_failure()
        clock.advance(61)

        assert await cb.execute(succeed) == "ok"
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0

    @pytest.mark.asyncio
    async def test_probe_failure_reopens(self, clock):
        """Test a failed half-open probe re-opens with a fresh cooldown."""
        cb = make_breaker(clock, threshold=2, cooldown=60)
        cb.record_failure()
        cb.record_failure()
        clock.advance(61)
        assert cb.state == CircuitState.HALF_OPEN

        with pytest.raises(UpstreamError):
            await cb.execute(fail)

        assert cb.state == CircuitState.OPEN
        assert cb.failure_count >= 2
        assert cb.get_time_until_reset() == pytest.approx(60)

    @pytest.mark.asyncio
    async def test_half_open_allows_single_probe(self, clock):
        """Test only one probe is admitted while half-open."""
        cb = make_breaker(clock, threshold=1, cooldown=60)
        cb.record_failure()
        clock.advance(61)

        release = asyncio.Event()

        async def slow_probe():
            await release.wait()
            return "ok"

        probe = asyncio.create_task(cb.execute(slow_probe))
        await asyncio.sleep(0)

        with pytest.raises(CircuitOpenError):
            await cb.execute(succeed)

        release.set()
        assert await probe == "ok"
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_cancelled_trial_call_frees_half_open_slot(self, clock):
        """Test a cancelled half-open call does not leave the breaker stuck."""
        cb = make_breaker(clock, threshold=1, cooldown=1)
        cb.record_failure()
        clock.advance(5)

        async def hang():
            await asyncio.Event().wait()

        trial = asyncio.create_task(cb.execute(hang))
        await asyncio.sleep(0)
        trial.cancel()
        with pytest.raises(asyncio.CancelledError):
            await trial

        clock.advance(3600)
        assert await cb.execute(succeed) == "ok"
        assert cb.state == CircuitState.CLOSED
