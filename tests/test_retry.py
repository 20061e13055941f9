from unittest.mock import AsyncMock, MagicMock

import pytest

from orderdesk.shared.retry import ExponentialBackoffRetry, FixedDelayRetry


@pytest.fixture
def no_sleep(monkeypatch):
    sleep = AsyncMock()
    monkeypatch.setattr("orderdesk.shared.retry.base.asyncio.sleep", sleep)
    return sleep


@pytest.mark.asyncio
async def test_fixed_delay_retries_until_success(no_sleep):
    func = AsyncMock(side_effect=[ConnectionError(), ConnectionError(), "ok"])
    policy = FixedDelayRetry(max_retries=3, delay=0.25, logger=MagicMock())

    assert await policy.execute(func) == "ok"
    assert func.await_count == 3
    assert [c.args[0] for c in no_sleep.await_args_list] == [0.25, 0.25]


@pytest.mark.asyncio
async def test_fixed_delay_reraises_last_error(no_sleep):
    logger = MagicMock()
    policy = FixedDelayRetry(max_retries=2, delay=0, logger=logger)

    with pytest.raises(ConnectionError):
        await policy.execute(AsyncMock(side_effect=ConnectionError("down")))
    logger.error.assert_called_once()


@pytest.mark.asyncio
async def test_errors_outside_retry_on_are_not_retried(no_sleep):
    func = AsyncMock(side_effect=ValueError("bad config"))
    policy = FixedDelayRetry(max_retries=5, delay=0, retry_on=(ConnectionError,), logger=MagicMock())

    with pytest.raises(ValueError):
        await policy.execute(func)
    assert func.await_count == 1
    no_sleep.assert_not_awaited()


def test_exponential_delays_double_and_cap():
    policy = ExponentialBackoffRetry(base_delay=0.5, max_delay=3.0, logger=MagicMock())
    assert [policy.delay_for(n) for n in range(1, 6)] == [0.5, 1.0, 2.0, 3.0, 3.0]


@pytest.mark.asyncio
async def test_exponential_passes_arguments_through(no_sleep):
    func = AsyncMock(side_effect=[TimeoutError(), 42])
    policy = ExponentialBackoffRetry(max_retries=2, logger=MagicMock())

    assert await policy.execute(func, "a", key="b") == 42
    func.assert_awaited_with("a", key="b")
    no_sleep.assert_awaited_once_with(0.5)
