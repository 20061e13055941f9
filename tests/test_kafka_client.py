import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiokafka.errors import KafkaConnectionError, KafkaTimeoutError

from orderdesk.shared.clients.kafka_client import KafkaClient
from orderdesk.shared.metrics import KafkaMetrics
from orderdesk.shared.retry import FixedDelayRetry


def make_client() -> KafkaClient:
    logger = MagicMock()
    return KafkaClient(
        bootstrap_servers="localhost:9092",
        logger=logger,
        retry_policy=FixedDelayRetry(max_retries=1, delay=0, logger=logger),
    )


def running_client(delivery: asyncio.Future) -> KafkaClient:
    client = make_client()
    client._producer = MagicMock()
    client._producer.send = AsyncMock(return_value=delivery)
    client._running = True
    return client


@pytest.mark.asyncio
async def test_send_queues_json_and_returns_without_waiting_for_ack():
    delivery = asyncio.get_running_loop().create_future()
    client = running_client(delivery)

    result = await client.send("orders", {"id": 5, "status": "NEW"}, key="5")

    assert result is delivery
    assert not delivery.done()
    topic, payload = client._producer.send.await_args.args
    assert topic == "orders"
    assert json.loads(payload) == {"id": 5, "status": "NEW"}
    assert client._producer.send.await_args.kwargs["key"] == b"5"
    assert client.metrics.get(KafkaMetrics.SENT) == 1


@pytest.mark.asyncio
async def test_delivery_success_is_counted():
    delivery = asyncio.get_running_loop().create_future()
    client = running_client(delivery)
    await client.send("orders", {"id": 1})

    delivery.set_result(SimpleNamespace(partition=0, offset=12))
    await asyncio.sleep(0)

    assert client.metrics.get(KafkaMetrics.DELIVERED) == 1
    assert client.metrics.get(KafkaMetrics.FAILED_DELIVERY) == 0


@pytest.mark.asyncio
async def test_delivery_failure_is_logged_not_raised():
    delivery = asyncio.get_running_loop().create_future()
    client = running_client(delivery)
    await client.send("orders", {"id": 1}, key="1")

    delivery.set_exception(KafkaTimeoutError())
    await asyncio.sleep(0)

    assert client.metrics.get(KafkaMetrics.FAILED_DELIVERY) == 1
    client.logger.error.assert_called()


@pytest.mark.asyncio
async def test_queueing_error_propagates_to_caller():
    client = make_client()
    client._producer = MagicMock()
    client._producer.send = AsyncMock(side_effect=KafkaTimeoutError())
    client._running = True

    with pytest.raises(KafkaTimeoutError):
        await client.send("orders", {"id": 1})
    assert client.metrics.get(KafkaMetrics.SENT) == 0


@pytest.mark.asyncio
async def test_first_send_starts_producer_once():
    delivery = asyncio.get_running_loop().create_future()
    producer = MagicMock()
    producer.start = AsyncMock()
    producer.send = AsyncMock(return_value=delivery)

    with patch("orderdesk.shared.clients.kafka_client.AIOKafkaProducer", return_value=producer) as factory:
        client = make_client()
        await client.send("orders", {"id": 1})
        await client.send("orders", {"id": 2})

    factory.assert_called_once_with(bootstrap_servers="localhost:9092")
    producer.start.assert_awaited_once()
    assert producer.send.await_count == 2


@pytest.mark.asyncio
async def test_start_failure_stops_half_started_producer_and_raises():
    producer = MagicMock()
    producer.start = AsyncMock(side_effect=KafkaConnectionError())
    producer.stop = AsyncMock()

    with patch("orderdesk.shared.clients.kafka_client.AIOKafkaProducer", return_value=producer):
        client = make_client()
        with pytest.raises(KafkaConnectionError):
            await client.start()

    producer.stop.assert_awaited()
    assert client._running is False


@pytest.mark.asyncio
async def test_stop_stops_producer():
    client = make_client()
    producer = MagicMock()
    producer.stop = AsyncMock()
    client._producer = producer
    client._running = True

    await client.stop()

    producer.stop.assert_awaited_once()
    assert client._producer is None


@pytest.mark.asyncio
async def test_reader_session_uses_fresh_group_and_always_stops_consumer():
    client = make_client()
    consumers = []
    group_ids = []

    def fake_consumer(group_id):
        group_ids.append(group_id)
        consumer = MagicMock()
        consumer.start = AsyncMock()
        consumer.stop = AsyncMock()
        consumers.append(consumer)
        return consumer

    client._new_consumer = fake_consumer

    async with client.reader_session("peek") as consumer:
        assert consumer is consumers[0]

    with pytest.raises(RuntimeError):
        async with client.reader_session("peek"):
            raise RuntimeError("boom")

    assert len(set(group_ids)) == 2
    assert all(g.startswith("peek-") for g in group_ids)
    for consumer in consumers:
        consumer.stop.assert_awaited_once()
    assert client.metrics.get(KafkaMetrics.READER_SESSIONS) == 2


@pytest.mark.asyncio
async def test_reader_session_stops_consumer_when_start_fails():
    client = make_client()
    consumer = MagicMock()
    consumer.start = AsyncMock(side_effect=KafkaConnectionError())
    consumer.stop = AsyncMock()
    client._new_consumer = lambda group_id: consumer

    with pytest.raises(KafkaConnectionError):
        async with client.reader_session("peek"):
            pytest.fail("block must not run when the consumer fails to start")

    consumer.stop.assert_awaited_once()
    assert client.metrics.get(KafkaMetrics.READER_SESSIONS) == 0
