"""
Tests for retry_operation and its backoff schedule.
"""

import pytest

from app.domain.errors import AuthError, BackendError
from app.services import retry as retry_module
from app.services.retry import compute_delay, is_auth_error, retry_operation


@pytest.fixture
def sleeps(monkeypatch):
    """Record requested waits instead of sleeping"""
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return recorded


def flaky(failures: int, error: Exception = None):
    """Operation failing `failures` times before returning 'ok'"""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise error or BackendError("connection reset")
        return "ok"

    return operation, calls


class TestComputeDelay:

    @pytest.mark.parametrize("attempt,expected", [(1, 1.0), (2, 2.0), (3, 4.0), (4, 8.0)])
    def test_exponential(self, attempt, expected):
        assert compute_delay(attempt, 1.0, "exponential", 30.0) == expected

    @pytest.mark.parametrize("attempt,expected", [(1, 0.5), (2, 1.0), (3, 1.5)])
    def test_linear(self, attempt, expected):
        assert compute_delay(attempt, 0.5, "linear", 30.0) == expected

    def test_capped_at_max_delay(self):
        assert compute_delay(10, 1.0, "exponential", 30.0) == 30.0

    def test_unknown_backoff(self):
        with pytest.raises(ValueError):
            compute_delay(1, 1.0, "fibonacci", 30.0)


class TestIsAuthError:

    @pytest.mark.parametrize("error", [
        AuthError("session expired"),
        BackendError("JWT expired"),
        RuntimeError("auth session missing"),
        RuntimeError("unauthorized"),
    ])
    def test_auth_errors(self, error):
        assert is_auth_error(error)

    def test_other_errors(self):
        assert not is_auth_error(BackendError("timeout"))


class TestRetryOperation:

    @pytest.mark.asyncio
    async def test_success_without_retry(self, sleeps):
        operation, calls = flaky(0)
        assert await retry_operation(operation) == "ok"
        assert calls["count"] == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, sleeps):
        operation, calls = flaky(2)
        retries = []

        result = await retry_operation(operation, max_retries=3, delay=1.0,
                                       on_retry=lambda attempt, e: retries.append(attempt))

        assert result == "ok"
        assert calls["count"] == 3
        assert sleeps == [1.0, 2.0]
        assert retries == [1, 2]

    @pytest.mark.asyncio
    async def test_linear_backoff(self, sleeps):
        operation, _ = flaky(3)
        await retry_operation(operation, max_retries=3, delay=2.0, backoff="linear")
        assert sleeps == [2.0, 4.0, 6.0]

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self, sleeps):
        operation, calls = flaky(10)
        with pytest.raises(BackendError, match="connection reset"):
            await retry_operation(operation, max_retries=2)
        assert calls["count"] == 3
        assert len(sleeps) == 2

    @pytest.mark.asyncio
    async def test_auth_errors_are_not_retried(self, sleeps):
        operation, calls = flaky(10, AuthError("JWT expired"))
        with pytest.raises(AuthError):
            await retry_operation(operation, max_retries=3)
        assert calls["count"] == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_zero_retries(self, sleeps):
        operation, calls = flaky(1)
        with pytest.raises(BackendError):
            await retry_operation(operation, max_retries=0)
        assert calls["count"] == 1
