import asyncio
from typing import Dict, Optional, Tuple

from aiokafka import TopicPartition
from aiokafka.errors import KafkaError
from pydantic import ValidationError as PydanticValidationError

from orderdesk.orders.errors import BrokerUnavailableError
from orderdesk.orders.events import OrderCreatedEvent
from orderdesk.shared.clients import KafkaClient
from orderdesk.shared.logger import JohnWickLogger


class LastEventReader:
    """
    Peeks at the most recently written OrderCreatedEvent on a topic.

    Each call opens its own consumer under a throwaway group id and closes it
    before returning, so no offsets are committed or shared between calls.
    """

    def __init__(
        self,
        kafka_client: KafkaClient,
        group_prefix: str = "last-message-reader",
        poll_timeout_ms: int = 2000,
        raise_on_error: bool = False,
        logger: Optional[JohnWickLogger] = None,
    ):
        self.kafka_client = kafka_client
        self.group_prefix = group_prefix
        self.poll_timeout_ms = poll_timeout_ms
        self.raise_on_error = raise_on_error
        self.logger = logger or JohnWickLogger("LastEventReader")

    async def read_last(self, topic: str) -> Optional[OrderCreatedEvent]:
        """
        Return the record with the highest last-written offset across the
        topic's partitions, or None when the topic is empty, unknown, the poll
        window passes without a record, or the record cannot be parsed.

        Broker failures also give None unless raise_on_error is set, in which
        case they surface as BrokerUnavailableError.
        """
        try:
            async with self.kafka_client.reader_session(self.group_prefix) as consumer:
                return await self._read_tail(consumer, topic)
        except asyncio.CancelledError:
            raise
        except (KafkaError, OSError, asyncio.TimeoutError) as exc:
            self.logger.exception("Failed to read last event", extra={"topic": topic, "error": str(exc)})
            if self.raise_on_error:
                raise BrokerUnavailableError(f"Kafka unavailable while reading topic {topic}") from exc
            return None

    async def _read_tail(self, consumer, topic: str) -> Optional[OrderCreatedEvent]:
        # refresh cluster metadata so partitions_for_topic sees the topic
        await consumer.topics()
        partition_ids = consumer.partitions_for_topic(topic)
        if not partition_ids:
            self.logger.info("Topic has no partitions", extra={"topic": topic})
            return None

        partitions = [TopicPartition(topic, p) for p in sorted(partition_ids)]
        consumer.assign(partitions)
        end_offsets: Dict[TopicPartition, int] = await consumer.end_offsets(partitions)

        target = self.pick_latest_partition(end_offsets, partitions)
        if target is None:
            self.logger.info("Topic is empty", extra={"topic": topic})
            return None

        partition, offset = target
        consumer.seek(partition, offset)
        batches = await consumer.getmany(partition, timeout_ms=self.poll_timeout_ms, max_records=1)

        for records in batches.values():
            for record in records:
                return self._deserialize(record, topic)

        self.logger.info(
            "No record received within poll window",
            extra={"topic": topic, "partition": partition.partition, "offset": offset},
        )
        return None

    @staticmethod
    def pick_latest_partition(end_offsets: Dict[TopicPartition, int], partitions) -> Optional[Tuple[TopicPartition, int]]:
        """
        Partition whose last written offset (end - 1) is highest.
        Ties keep the first partition in the given order; empty partitions are skipped.
        """
        best: Optional[Tuple[TopicPartition, int]] = None
        for partition in partitions:
            last_written = end_offsets.get(partition, 0) - 1
            if last_written < 0:
                continue
            if best is None or last_written > best[1]:
                best = (partition, last_written)
        return best

    def _deserialize(self, record, topic: str) -> Optional[OrderCreatedEvent]:
        try:
            event = OrderCreatedEvent.model_validate_json(record.value)
        except (PydanticValidationError, TypeError, ValueError) as exc:
            self.logger.warning(
                "Last record is not an OrderCreatedEvent",
                extra={"topic": topic, "offset": record.offset, "error": str(exc)},
            )
            return None

        self.logger.info(
            "Last event read",
            extra={"topic": topic, "partition": record.partition, "offset": record.offset, "order_id": event.id},
        )
        return event
