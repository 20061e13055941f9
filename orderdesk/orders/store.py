import itertools
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from orderdesk.orders.models import Order
from orderdesk.orders.query_builder import OrderFilter, build_order_condition
from orderdesk.shared.logger import JohnWickLogger


class OrderStore(ABC):
    """Persistence port for orders."""

    @abstractmethod
    async def add(self, order: Order) -> Order:
        """Insert a new order and return it with its assigned id."""

    @abstractmethod
    async def get(self, order_id: int) -> Optional[Order]:
        ...

    @abstractmethod
    async def list_all(self) -> List[Order]:
        ...

    @abstractmethod
    async def find(self, order_filter: OrderFilter) -> List[Order]:
        ...

    @abstractmethod
    async def save(self, order: Order) -> Order:
        """Write back changes to an existing order."""

    @abstractmethod
    async def delete(self, order_id: int) -> bool:
        """Remove an order. Returns False when no row had that id."""


class SqlAlchemyOrderStore(OrderStore):
    """Order store on an async SQLAlchemy session factory. One session per call."""

    def __init__(self, session_factory: sessionmaker, logger: Optional[JohnWickLogger] = None):
        self.session_factory = session_factory
        self.logger = logger or JohnWickLogger("SqlAlchemyOrderStore")

    async def add(self, order: Order) -> Order:
        async with self.session_factory() as session:
            session.add(order)
            await session.commit()
            self.logger.debug("Order inserted", extra={"order_id": order.id})
            return order

    async def get(self, order_id: int) -> Optional[Order]:
        async with self.session_factory() as session:
            return await session.get(Order, order_id)

    async def list_all(self) -> List[Order]:
        async with self.session_factory() as session:
            result = await session.execute(select(Order))
            return list(result.scalars().all())

    async def find(self, order_filter: OrderFilter) -> List[Order]:
        stmt = select(Order).where(build_order_condition(order_filter))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            orders = list(result.scalars().all())
        self.logger.debug("Order search executed", extra={"matches": len(orders)})
        return orders

    async def save(self, order: Order) -> Order:
        async with self.session_factory() as session:
            merged = await session.merge(order)
            await session.commit()
            return merged

    async def delete(self, order_id: int) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(Order).where(Order.id == order_id))
            await session.commit()
            return result.rowcount > 0


class InMemoryOrderStore(OrderStore):
    """
    Dict-backed store for local runs and tests.
    Holds copies, so callers only change stored state through save().
    """

    def __init__(self, logger: Optional[JohnWickLogger] = None):
        self.logger = logger or JohnWickLogger("InMemoryOrderStore")
        self._orders: Dict[int, Order] = {}
        self._ids = itertools.count(1)

    @staticmethod
    def _copy(order: Order) -> Order:
        return Order(
            id=order.id,
            created_at=order.created_at,
            status=order.status,
            user_id=order.user_id,
            description=order.description,
        )

    async def add(self, order: Order) -> Order:
        order.id = next(self._ids)
        self._orders[order.id] = self._copy(order)
        self.logger.debug("Order inserted", extra={"order_id": order.id})
        return order

    async def get(self, order_id: int) -> Optional[Order]:
        stored = self._orders.get(order_id)
        return self._copy(stored) if stored is not None else None

    async def list_all(self) -> List[Order]:
        return [self._copy(o) for o in self._orders.values()]

    async def find(self, order_filter: OrderFilter) -> List[Order]:
        return [self._copy(o) for o in self._orders.values() if order_filter.matches(o)]

    async def save(self, order: Order) -> Order:
        if order.id not in self._orders:
            raise KeyError(order.id)
        self._orders[order.id] = self._copy(order)
        return order

    async def delete(self, order_id: int) -> bool:
        return self._orders.pop(order_id, None) is not None
