from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from orderdesk.config.dependencies import get_order_service
from orderdesk.orders.models import Order
from orderdesk.orders.order_service import OrderService
from orderdesk.orders.query_builder import OrderFilter
from orderdesk.orders.schemas import OrderCreateRequest, OrderDto, OrderStatusUpdateRequest

router = APIRouter(prefix="/api/orders", tags=["orders"])


def to_dto(order: Order) -> OrderDto:
    return OrderDto.model_validate(order)


@router.post("", response_model=OrderDto, response_model_by_alias=True)
async def create_order(payload: OrderCreateRequest, service: OrderService = Depends(get_order_service)):
    order = await service.create(payload.user_id, payload.description)
    return to_dto(order)


@router.get("", response_model=List[OrderDto], response_model_by_alias=True)
async def list_orders(service: OrderService = Depends(get_order_service)):
    return [to_dto(o) for o in await service.list()]


# declared before /{order_id} so the literal path isn't parsed as an id
@router.get("/getFromKafka", response_model=OrderDto, response_model_by_alias=True)
async def get_from_kafka(topic: Optional[str] = None, service: OrderService = Depends(get_order_service)):
    order = await service.read_last_from_topic(topic)
    return to_dto(order)


@router.post("/search", response_model=List[OrderDto], response_model_by_alias=True)
async def search_orders(order_filter: OrderFilter, service: OrderService = Depends(get_order_service)):
    return [to_dto(o) for o in await service.search(order_filter)]


@router.get("/{order_id}", response_model=OrderDto, response_model_by_alias=True)
async def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return to_dto(await service.get_by_id(order_id))


@router.patch("/{order_id}/status", response_model=OrderDto, response_model_by_alias=True)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdateRequest,
    service: OrderService = Depends(get_order_service),
):
    order = await service.update_status(order_id, payload.status)
    return to_dto(order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: int, service: OrderService = Depends(get_order_service)):
    await service.delete(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
