"""
Admin / observability endpoints
===============================

GET /api/v1/admin/stale-orders -- open orders with no recent progress
GET /api/v1/admin/health       -- simple health check
"""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import get_clock, get_order_store
from src.api.middleware import limiter
from src.api.schemas import HealthResponse, OrderResponse
from src.config import settings
from src.domain.clock import Clock
from src.infrastructure.order_store import InMemoryOrderStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/stale-orders",
    response_model=list[OrderResponse],
    summary="List open orders whose last progress is older than N minutes",
)
@limiter.limit(settings.rate_limit)
async def get_stale_orders(
    request: Request,
    minutes: Optional[int] = Query(None, ge=0),
    store: InMemoryOrderStore = Depends(get_order_store),
    clock: Clock = Depends(get_clock),
):
    if minutes is None:
        minutes = settings.stale_order_minutes
    stale = store.stale_orders(clock(), timedelta(minutes=minutes))
    return [OrderResponse.from_order(o) for o in stale]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
