from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from orderdesk.orders.models import Order, OrderStatus
from orderdesk.orders.publisher import OrderEventPublisher

CREATED_AT = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
CHANGED_AT = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def kafka_client():
    client = MagicMock()
    client.send = AsyncMock()
    return client


@pytest.fixture
def event_publisher(kafka_client):
    return OrderEventPublisher(kafka_client, logger=MagicMock(), clock=lambda: CHANGED_AT)


def sample_order() -> Order:
    return Order(id=8, created_at=CREATED_AT, status=OrderStatus.NEW, user_id=3, description="Keyboard")


@pytest.mark.asyncio
async def test_publish_order_created_sends_camel_case_snapshot(event_publisher, kafka_client):
    event = await event_publisher.publish_order_created(sample_order())

    kafka_client.send.assert_awaited_once()
    topic, message = kafka_client.send.await_args.args
    assert topic == "order.created"
    assert kafka_client.send.await_args.kwargs["key"] == "8"
    assert message == {
        "id": 8,
        "createdAt": "2024-06-01T09:00:00Z",
        "status": "NEW",
        "userId": 3,
        "description": "Keyboard",
    }
    assert event.id == 8


@pytest.mark.asyncio
async def test_publish_status_changed_carries_both_statuses(event_publisher, kafka_client):
    await event_publisher.publish_order_status_changed(8, OrderStatus.NEW, OrderStatus.PROCESSING)

    topic, message = kafka_client.send.await_args.args
    assert topic == "order.status.changed"
    assert message == {
        "orderId": 8,
        "oldStatus": "NEW",
        "newStatus": "PROCESSING",
        "timestamp": "2024-06-01T10:00:00Z",
    }


@pytest.mark.asyncio
async def test_topics_are_configurable(kafka_client):
    pub = OrderEventPublisher(
        kafka_client,
        order_created_topic="shop.orders.created",
        order_status_changed_topic="shop.orders.status",
        logger=MagicMock(),
    )
    await pub.publish_order_created(sample_order())
    await pub.publish_order_status_changed(8, OrderStatus.NEW, OrderStatus.CANCELLED)

    topics = [call.args[0] for call in kafka_client.send.await_args_list]
    assert topics == ["shop.orders.created", "shop.orders.status"]


@pytest.mark.asyncio
async def test_queueing_failure_propagates(event_publisher, kafka_client):
    kafka_client.send.side_effect = RuntimeError("producer closed")
    with pytest.raises(RuntimeError):
        await event_publisher.publish_order_created(sample_order())
