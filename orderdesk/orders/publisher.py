from datetime import datetime
from typing import Callable, Optional

from orderdesk.orders.events import OrderCreatedEvent, OrderStatusChangedEvent
from orderdesk.orders.models import Order, OrderStatus, utcnow
from orderdesk.shared.clients import KafkaClient
from orderdesk.shared.logger import JohnWickLogger


class OrderEventPublisher:
    """
    Emits order events to their topics, fire-and-forget.

    Each call returns once the record is queued on the producer; broker
    acknowledgment is never awaited and delivery failures are only logged by
    the KafkaClient.
    """

    def __init__(
        self,
        kafka_client: KafkaClient,
        order_created_topic: str = "order.created",
        order_status_changed_topic: str = "order.status.changed",
        logger: Optional[JohnWickLogger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.kafka_client = kafka_client
        self.order_created_topic = order_created_topic
        self.order_status_changed_topic = order_status_changed_topic
        self.logger = logger or JohnWickLogger("OrderEventPublisher")
        self.clock = clock

    async def publish_order_created(self, order: Order) -> OrderCreatedEvent:
        event = OrderCreatedEvent.from_order(order)
        await self.kafka_client.send(self.order_created_topic, event.to_message(), key=str(order.id))
        self.logger.info(
            "OrderCreatedEvent published",
            extra={"topic": self.order_created_topic, "order_id": order.id},
        )
        return event

    async def publish_order_status_changed(
        self, order_id: int, old_status: OrderStatus, new_status: OrderStatus
    ) -> OrderStatusChangedEvent:
        event = OrderStatusChangedEvent(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            timestamp=self.clock(),
        )
        await self.kafka_client.send(self.order_status_changed_topic, event.to_message(), key=str(order_id))
        self.logger.info(
            "OrderStatusChangedEvent published",
            extra={
                "topic": self.order_status_changed_topic,
                "order_id": order_id,
                "old_status": old_status.value,
                "new_status": new_status.value,
            },
        )
        return event
