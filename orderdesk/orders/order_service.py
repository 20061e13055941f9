from datetime import datetime
from typing import Callable, Dict, List, Optional

from orderdesk.orders.errors import OrderNotFoundError, ValidationError
from orderdesk.orders.last_event_reader import LastEventReader
from orderdesk.orders.models import Order, OrderStatus, utcnow
from orderdesk.orders.publisher import OrderEventPublisher
from orderdesk.orders.query_builder import OrderFilter
from orderdesk.orders.store import OrderStore
from orderdesk.shared.annotations import LoggerBinding
from orderdesk.shared.logger import JohnWickLogger
from orderdesk.shared.metrics import MetricsCollector, OrderMetrics


@LoggerBinding()
class OrderService:
    """
    Order use cases: store writes first, then the matching event.

    There is no transaction spanning the store and the broker. A publish that
    fails after the write leaves the write in place.
    """

    def __init__(
        self,
        store: OrderStore,
        publisher: OrderEventPublisher,
        reader: LastEventReader,
        default_read_topic: str = "order.created",
        strict_delete: bool = False,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.publisher = publisher
        self.reader = reader
        self.default_read_topic = default_read_topic
        self.strict_delete = strict_delete
        self.logger = logger
        self.metrics = metrics or MetricsCollector(self.logger)
        self.clock = clock

    @staticmethod
    def validate_new_order(user_id: Optional[int], description: Optional[str]) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        if user_id is None:
            errors["userId"] = "User ID cannot be null"
        if description is None or not description.strip():
            errors["description"] = "Description cannot be empty"
        return errors

    async def create(self, user_id: Optional[int], description: Optional[str]) -> Order:
        errors = self.validate_new_order(user_id, description)
        if errors:
            raise ValidationError(errors)

        order = Order(
            created_at=self.clock(),
            status=OrderStatus.NEW,
            user_id=user_id,
            description=description,
        )
        saved = await self.store.add(order)
        self.metrics.increment(OrderMetrics.CREATED)
        self.logger.info("Order created", extra={"order_id": saved.id, "user_id": saved.user_id})

        await self.publisher.publish_order_created(saved)
        return saved

    async def get_by_id(self, order_id: int) -> Order:
        order = await self.store.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def list(self) -> List[Order]:
        return await self.store.list_all()

    async def search(self, order_filter: OrderFilter) -> List[Order]:
        orders = await self.store.find(order_filter)
        self.logger.debug(
            "Orders searched",
            extra={"filter": order_filter.model_dump(exclude_none=True), "matches": len(orders)},
        )
        return orders

    async def update_status(self, order_id: int, new_status: Optional[OrderStatus]) -> Order:
        if new_status is None:
            raise ValidationError("status", "Status cannot be null")

        order = await self.get_by_id(order_id)
        old_status = order.status
        order.status = new_status
        updated = await self.store.save(order)
        self.metrics.increment(OrderMetrics.STATUS_CHANGED)
        self.logger.info(
            "Order status changed",
            extra={"order_id": order_id, "old_status": old_status.value, "new_status": new_status.value},
        )

        await self.publisher.publish_order_status_changed(order_id, old_status, new_status)
        return updated

    async def delete(self, order_id: int) -> None:
        deleted = await self.store.delete(order_id)
        if deleted:
            self.metrics.increment(OrderMetrics.DELETED)
            self.logger.info("Order deleted", extra={"order_id": order_id})
            return

        self.logger.debug("Delete of unknown order", extra={"order_id": order_id})
        if self.strict_delete:
            raise OrderNotFoundError(order_id)

    async def read_last_from_topic(self, topic: Optional[str] = None) -> Order:
        topic = topic or self.default_read_topic
        self.metrics.increment(OrderMetrics.QUEUE_READS)

        event = await self.reader.read_last(topic)
        if event is None:
            self.metrics.increment(OrderMetrics.QUEUE_MISSES)
            raise OrderNotFoundError("No order found in Kafka queue")
        return event.to_order()
