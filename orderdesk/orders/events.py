"""
Wire shapes of the order events published to Kafka.

Events are immutable snapshots serialized as JSON with camelCase field names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from orderdesk.orders.models import Order, OrderStatus


class OrderEventModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_message(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class OrderCreatedEvent(OrderEventModel):
    """An order as it was persisted at creation time."""

    id: int
    created_at: datetime
    status: OrderStatus
    user_id: int
    description: str

    @classmethod
    def from_order(cls, order: Order) -> "OrderCreatedEvent":
        return cls(
            id=order.id,
            created_at=order.created_at,
            status=order.status,
            user_id=order.user_id,
            description=order.description,
        )

    def to_order(self) -> Order:
        """Build a transient (never persisted) Order carrying the event's values."""
        return Order(
            id=self.id,
            created_at=self.created_at,
            status=self.status,
            user_id=self.user_id,
            description=self.description,
        )


class OrderStatusChangedEvent(OrderEventModel):
    order_id: int
    old_status: OrderStatus
    new_status: OrderStatus
    timestamp: datetime
