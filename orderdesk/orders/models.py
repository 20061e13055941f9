import enum
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Enum, Text

from orderdesk.config.db_session import Base


class OrderStatus(str, enum.Enum):
    NEW = "NEW"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    status = Column(
        Enum(OrderStatus, name="order_status", native_enum=False, length=32),
        nullable=False,
        default=OrderStatus.NEW,
        index=True,
    )
    user_id = Column(BigInteger, nullable=False, index=True)
    description = Column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"Order(id={self.id!r}, status={self.status!r}, user_id={self.user_id!r})"
