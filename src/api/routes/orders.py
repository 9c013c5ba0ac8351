"""
Order endpoints
===============

POST   /api/v1/orders                       -- create an order (no destination)
GET    /api/v1/orders/{order_id}            -- full order state
GET    /api/v1/orders/{order_id}/info       -- one-line short info
PATCH  /api/v1/orders/{order_id}/destination
POST   /api/v1/orders/{order_id}/driver     -- assign driver by id
DELETE /api/v1/orders/{order_id}/driver     -- unassign driver
GET    /api/v1/orders/{order_id}/driver     -- driver full info
PATCH  /api/v1/orders/{order_id}/cancel | /start | /finish

Every mutation runs under the per-order lock.
"""

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies import get_lock_factory, get_order_store, get_taxi_api
from src.api.middleware import limiter
from src.api.schemas import (
    DestinationUpdateRequest,
    DriverAssignRequest,
    OrderCreateRequest,
    OrderInfoResponse,
    OrderResponse,
)
from src.config import settings
from src.domain.entities import TaxiOrder
from src.infrastructure.locks import LockFactory, order_lock_key
from src.infrastructure.order_store import InMemoryOrderStore
from src.services.taxi_api import TaxiApi

router = APIRouter(prefix="/orders", tags=["orders"])


async def _mutate(
    order_id: int,
    store: InMemoryOrderStore,
    lock_factory: LockFactory,
    action: Callable[[TaxiOrder], None],
) -> OrderResponse:
    async with lock_factory(order_lock_key(order_id)):
        order = store.get_or_raise(order_id)
        action(order)
        return OrderResponse.from_order(order)


@router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    summary="Create an order without destination",
)
@limiter.limit(settings.rate_limit)
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
):
    order = api.create_order_without_destination(
        body.first_name, body.last_name, body.street, body.building
    )
    store.add(order)
    return OrderResponse.from_order(order)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order")
@limiter.limit(settings.rate_limit)
async def get_order(
    request: Request,
    order_id: int,
    store: InMemoryOrderStore = Depends(get_order_store),
):
    return OrderResponse.from_order(store.get_or_raise(order_id))


@router.get(
    "/{order_id}/info",
    response_model=OrderInfoResponse,
    summary="Get short order info",
)
@limiter.limit(settings.rate_limit)
async def get_order_info(
    request: Request,
    order_id: int,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
):
    order = store.get_or_raise(order_id)
    return OrderInfoResponse(order_id=order.id, info=api.get_short_order_info(order))


@router.patch(
    "/{order_id}/destination",
    response_model=OrderResponse,
    summary="Set or change the destination",
)
@limiter.limit(settings.rate_limit)
async def update_destination(
    request: Request,
    order_id: int,
    body: DestinationUpdateRequest,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
    lock_factory: LockFactory = Depends(get_lock_factory),
):
    return await _mutate(
        order_id,
        store,
        lock_factory,
        lambda order: api.update_destination(order, body.street, body.building),
    )


@router.post(
    "/{order_id}/driver",
    response_model=OrderResponse,
    summary="Assign a driver",
    description="Looks the driver up by id; fails with 409 if one is already assigned.",
)
@limiter.limit(settings.rate_limit)
async def assign_driver(
    request: Request,
    order_id: int,
    body: DriverAssignRequest,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
    lock_factory: LockFactory = Depends(get_lock_factory),
):
    return await _mutate(
        order_id,
        store,
        lock_factory,
        lambda order: api.assign_driver(order, body.driver_id),
    )


@router.delete(
    "/{order_id}/driver",
    response_model=OrderResponse,
    summary="Unassign the current driver",
)
@limiter.limit(settings.rate_limit)
async def unassign_driver(
    request: Request,
    order_id: int,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
    lock_factory: LockFactory = Depends(get_lock_factory),
):
    return await _mutate(order_id, store, lock_factory, api.unassign_driver)


@router.get(
    "/{order_id}/driver",
    response_model=OrderInfoResponse,
    summary="Get full info about the assigned driver",
)
@limiter.limit(settings.rate_limit)
async def get_driver_info(
    request: Request,
    order_id: int,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
):
    order = store.get_or_raise(order_id)
    info = api.get_driver_full_info(order)
    if info is None:
        raise HTTPException(status_code=404, detail="No driver assigned")
    return OrderInfoResponse(order_id=order.id, info=info)


@router.patch("/{order_id}/cancel", response_model=OrderResponse, summary="Cancel an order")
@limiter.limit(settings.rate_limit)
async def cancel_order(
    request: Request,
    order_id: int,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
    lock_factory: LockFactory = Depends(get_lock_factory),
):
    return await _mutate(order_id, store, lock_factory, api.cancel)


@router.patch("/{order_id}/start", response_model=OrderResponse, summary="Start the ride")
@limiter.limit(settings.rate_limit)
async def start_ride(
    request: Request,
    order_id: int,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
    lock_factory: LockFactory = Depends(get_lock_factory),
):
    return await _mutate(order_id, store, lock_factory, api.start_ride)


@router.patch("/{order_id}/finish", response_model=OrderResponse, summary="Finish the ride")
@limiter.limit(settings.rate_limit)
async def finish_ride(
    request: Request,
    order_id: int,
    api: TaxiApi = Depends(get_taxi_api),
    store: InMemoryOrderStore = Depends(get_order_store),
    lock_factory: LockFactory = Depends(get_lock_factory),
):
    return await _mutate(order_id, store, lock_factory, api.finish_ride)
