"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.domain.entities import TaxiOrder


# ── Requests ──────────────────────────────────────────────────────────


class OrderCreateRequest(BaseModel):
    first_name: str
    last_name: str
    street: str
    building: str


class DestinationUpdateRequest(BaseModel):
    street: str
    building: str


class DriverAssignRequest(BaseModel):
    driver_id: int = Field(..., description="Id resolved through the driver lookup.")


# ── Responses ─────────────────────────────────────────────────────────


class DriverResponse(BaseModel):
    id: int
    name: str
    car: str


class OrderResponse(BaseModel):
    id: int
    status: str
    client_name: str
    start: str
    destination: Optional[str] = None
    driver: Optional[DriverResponse] = None
    creation_time: datetime
    driver_assignment_time: Optional[datetime] = None
    cancel_time: Optional[datetime] = None
    start_ride_time: Optional[datetime] = None
    finish_ride_time: Optional[datetime] = None
    last_progress_time: datetime

    @classmethod
    def from_order(cls, order: TaxiOrder) -> "OrderResponse":
        driver = None
        if order.driver is not None:
            driver = DriverResponse(
                id=order.driver.id,
                name=order.driver.name.format(),
                car=str(order.driver.car),
            )
        return cls(
            id=order.id,
            status=order.status.value,
            client_name=order.client_name.format(),
            start=order.start.format(),
            destination=order.destination.format() if order.destination else None,
            driver=driver,
            creation_time=order.creation_time,
            driver_assignment_time=order.driver_assignment_time,
            cancel_time=order.cancel_time,
            start_ride_time=order.start_ride_time,
            finish_ride_time=order.finish_ride_time,
            last_progress_time=order.last_progress_time,
        )


class OrderInfoResponse(BaseModel):
    order_id: int
    info: str


class HealthResponse(BaseModel):
    status: str = "ok"

