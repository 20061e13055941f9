from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from orderdesk.orders.models import OrderStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class OrderCreateRequest(CamelModel):
    # Optional on purpose: missing values are reported by OrderService as a field map.
    user_id: Optional[int] = None
    description: Optional[str] = None


class OrderStatusUpdateRequest(CamelModel):
    status: Optional[OrderStatus] = None


class OrderDto(CamelModel):
    id: int
    created_at: datetime
    status: OrderStatus
    user_id: int
    description: str


class ErrorResponse(CamelModel):
    timestamp: datetime
    status: int
    error: str
    message: str
    path: str
    validation_errors: Dict[str, str] = Field(default_factory=dict)
