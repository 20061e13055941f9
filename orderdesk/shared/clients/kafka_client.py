import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer
from aiokafka.admin import AIOKafkaAdminClient, NewTopic

from orderdesk.shared.logger import JohnWickLogger
from orderdesk.shared.metrics.metrics_collector import MetricsCollector
from orderdesk.shared.metrics.metrics_schema import KafkaMetrics
from orderdesk.shared.retry.base import RetryPolicy
from orderdesk.shared.retry.fixed_delay_retry import FixedDelayRetry


class KafkaClient:
    """
    Async Kafka client: a shared, lazily started producer for fire-and-forget
    sends, and disposable consumer sessions for one-off reads.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.logger = logger or JohnWickLogger("KafkaClient")
        self.metrics = metrics or MetricsCollector(self.logger)
        self.retry_policy: RetryPolicy = retry_policy or FixedDelayRetry(max_retries=3)

        self._producer: Optional[AIOKafkaProducer] = None
        self._running = False
        self._start_lock = asyncio.Lock()

    # --- Lifecycle ---
    async def start(self):
        """Start the producer, retrying connection failures."""
        # Prevents two concurrent first sends from starting two producers.
        async with self._start_lock:
            if self._running:
                return

            async def _start_producer():
                producer = AIOKafkaProducer(bootstrap_servers=self.bootstrap_servers)
                try:
                    await producer.start()
                except Exception:
                    await producer.stop()
                    raise
                self._producer = producer
                self.logger.info("Kafka Producer started", extra={"bootstrap_servers": self.bootstrap_servers})

            try:
                await self.retry_policy.execute(_start_producer)
                self._running = True
            except Exception as e:
                self.logger.error("Failed to start KafkaClient", extra={"error": str(e)})
                raise

    async def stop(self):
        """Flush pending sends and stop the producer."""
        if not self._running:
            return

        if self._producer:
            await self._producer.stop()
            self.logger.info("Kafka Producer stopped")

        self._producer = None
        self._running = False

    # --- Produce ---
    async def send(self, topic: str, value: dict, key: Optional[str] = None) -> asyncio.Future:
        """
        Queue a JSON message for delivery and return without waiting for the broker.

        Errors raised while queueing (producer cannot start, buffer full,
        oversized record) propagate to the caller. Failures reported later by
        the broker are logged and counted only.
        """
        if not self._running:
            await self.start()

        payload_bytes = json.dumps(value, default=str).encode("utf-8")
        key_bytes = key.encode("utf-8") if key is not None else None

        delivery = await self._producer.send(topic, payload_bytes, key=key_bytes)
        self.metrics.increment(KafkaMetrics.SENT)
        delivery.add_done_callback(lambda fut: self._on_delivery(fut, topic, key))
        self.logger.debug("Message queued", extra={"topic": topic, "key": key})
        return delivery

    def _on_delivery(self, fut: asyncio.Future, topic: str, key: Optional[str]):
        if fut.cancelled():
            self.metrics.increment(KafkaMetrics.FAILED_DELIVERY)
            self.logger.warning("Message delivery cancelled", extra={"topic": topic, "key": key})
            return

        error = fut.exception()
        if error is not None:
            self.metrics.increment(KafkaMetrics.FAILED_DELIVERY)
            self.logger.error(
                "Message delivery failed",
                extra={"topic": topic, "key": key, "error": str(error)},
            )
            return

        metadata = fut.result()
        self.metrics.increment(KafkaMetrics.DELIVERED)
        self.logger.info(
            "Message delivered",
            extra={
                "topic": topic,
                "key": key,
                "partition": getattr(metadata, "partition", None),
                "offset": getattr(metadata, "offset", None),
            },
        )

    # --- One-off reads ---
    def _new_consumer(self, group_id: str) -> AIOKafkaConsumer:
        return AIOKafkaConsumer(
            bootstrap_servers=self.bootstrap_servers,
            group_id=group_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
        )

    @asynccontextmanager
    async def reader_session(self, group_prefix: str = "reader") -> AsyncIterator[AIOKafkaConsumer]:
        """
        Yield a started consumer under a unique, throwaway group id.
        The consumer is stopped on exit, including when start() itself fails.
        """
        group_id = f"{group_prefix}-{uuid.uuid4()}"
        consumer = self._new_consumer(group_id)
        try:
            await consumer.start()
            self.metrics.increment(KafkaMetrics.READER_SESSIONS)
            self.logger.debug("Reader session opened", extra={"group_id": group_id})
            yield consumer
        finally:
            await consumer.stop()
            self.logger.debug("Reader session closed", extra={"group_id": group_id})

    # Dev/test convenience. In production, create topics on the broker with the
    # partition count and replication the deployment needs.
    async def create_topics(self, topics: List[str], num_partitions: int = 3, replication_factor: int = 1):
        """Create the given topics if they don't already exist."""
        admin = AIOKafkaAdminClient(bootstrap_servers=self.bootstrap_servers)
        await admin.start()
        try:
            existing = await admin.list_topics()
            new_topics = [
                NewTopic(name=t, num_partitions=num_partitions, replication_factor=replication_factor)
                for t in topics
                if t not in existing
            ]

            if not new_topics:
                self.logger.info("All topics already exist", extra={"topics": topics})
                return

            await admin.create_topics(new_topics)
            self.logger.info("Topics created successfully", extra={"topics": [t.name for t in new_topics]})
        except Exception as e:
            self.logger.error("Failed to create topics", extra={"error": str(e), "topics": topics})
            raise
        finally:
            await admin.close()
