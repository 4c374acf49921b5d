"""Tests for retry with backoff and batch pacing."""

from unittest.mock import AsyncMock

import pytest

from src.utils.retry import FixedDelayPacer, RetryPolicy, retry_with_backoff


class FlakyError(Exception):
    pass


class TestRetryPolicy:
    def test_delay_grows_exponentially(self):
        policy = RetryPolicy(initial_delay=2.0, multiplier=2.0)
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_from_settings(self, settings):
        policy = RetryPolicy.from_settings(settings, retry_on=(FlakyError,))
        assert policy.max_attempts == settings.max_retries
        assert policy.initial_delay == settings.retry_delay
        assert policy.retry_on == (FlakyError,)


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        func = AsyncMock(side_effect=[FlakyError("1"), FlakyError("2"), "ok"])
        sleep = AsyncMock()
        policy = RetryPolicy(max_attempts=3, initial_delay=1.0, retry_on=(FlakyError,))

        result = await retry_with_backoff(func, policy, sleep=sleep)

        assert result == "ok"
        assert func.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_reraises_after_last_attempt(self):
        func = AsyncMock(side_effect=FlakyError("down"))
        policy = RetryPolicy(max_attempts=2, initial_delay=0, retry_on=(FlakyError,))

        with pytest.raises(FlakyError):
            await retry_with_backoff(func, policy, sleep=AsyncMock())
        assert func.await_count == 2

    @pytest.mark.asyncio
    async def test_other_errors_propagate_immediately(self):
        func = AsyncMock(side_effect=KeyError("fatal"))
        policy = RetryPolicy(max_attempts=5, retry_on=(FlakyError,))

        with pytest.raises(KeyError):
            await retry_with_backoff(func, policy, sleep=AsyncMock())
        assert func.await_count == 1


class TestFixedDelayPacer:
    @pytest.mark.asyncio
    async def test_waits_configured_delay(self):
        sleep = AsyncMock()
        await FixedDelayPacer(5.0, sleep=sleep).wait()
        sleep.assert_awaited_once_with(5.0)

    @pytest.mark.asyncio
    async def test_zero_delay_does_not_sleep(self):
        sleep = AsyncMock()
        await FixedDelayPacer(0, sleep=sleep).wait()
        sleep.assert_not_awaited()
