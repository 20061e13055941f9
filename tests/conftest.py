from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from orderdesk.orders.order_service import OrderService
from orderdesk.orders.store import InMemoryOrderStore

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class StepClock:
    """Returns T0, T0+1h, T0+2h, ... on successive calls."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(hours=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def mock_logger():
    return MagicMock()


@pytest.fixture
def store(mock_logger):
    return InMemoryOrderStore(logger=mock_logger)


@pytest.fixture
def publisher():
    pub = MagicMock()
    pub.publish_order_created = AsyncMock()
    pub.publish_order_status_changed = AsyncMock()
    return pub


@pytest.fixture
def reader():
    r = MagicMock()
    r.read_last = AsyncMock(return_value=None)
    return r


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def service(store, publisher, reader, mock_logger, clock):
    return OrderService(
        store=store,
        publisher=publisher,
        reader=reader,
        logger=mock_logger,
        clock=clock,
    )
