"""
Search filters for orders.

Every filter field is optional and independent; the fields that are present
are ANDed together. The same policy is available as a SQLAlchemy condition
(for the relational store) and as a Python predicate (for the in-memory one):

- id, status, userId: equality
- description: case-insensitive substring match (ignored when empty)
- startDate / endDate: inclusive range on createdAt; either bound alone is
  an open-ended range
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import field_validator
from sqlalchemy import and_, func, true
from sqlalchemy.sql.elements import ColumnElement

from orderdesk.orders.models import Order, OrderStatus
from orderdesk.orders.schemas import CamelModel


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OrderFilter(CamelModel):
    id: Optional[int] = None
    status: Optional[OrderStatus] = None
    user_id: Optional[int] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    def is_empty(self) -> bool:
        return not build_order_clauses(self)

    def matches(self, order: Order) -> bool:
        if self.id is not None and order.id != self.id:
            return False
        if self.status is not None and order.status != self.status:
            return False
        if self.user_id is not None and order.user_id != self.user_id:
            return False
        if self.description and self.description.lower() not in (order.description or "").lower():
            return False

        created_at = as_utc(order.created_at)
        if self.start_date is not None and created_at < self.start_date:
            return False
        if self.end_date is not None and created_at > self.end_date:
            return False
        return True


def build_order_clauses(order_filter: OrderFilter) -> List[ColumnElement]:
    clauses: List[ColumnElement] = []

    if order_filter.id is not None:
        clauses.append(Order.id == order_filter.id)

    if order_filter.status is not None:
        clauses.append(Order.status == order_filter.status)

    if order_filter.user_id is not None:
        clauses.append(Order.user_id == order_filter.user_id)

    if order_filter.description:
        clauses.append(
            func.lower(Order.description).contains(order_filter.description.lower(), autoescape=True)
        )

    start, end = order_filter.start_date, order_filter.end_date
    if start is not None and end is not None:
        clauses.append(Order.created_at.between(start, end))
    elif start is not None:
        clauses.append(Order.created_at >= start)
    elif end is not None:
        clauses.append(Order.created_at <= end)

    return clauses


def build_order_condition(order_filter: OrderFilter) -> ColumnElement:
    """AND of every present filter; an empty filter matches all rows."""
    return and_(true(), *build_order_clauses(order_filter))
