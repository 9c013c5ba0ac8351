"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``TaxiOrder``: every operation is guarded by the
  current status (WaitingForDriver -> WaitingCarArrival -> InProgress ->
  Finished, with Canceled reachable before the ride starts).
- Entities compare by ``id`` through ``identity_eq`` / ``identity_hash``;
  their attributes may drift without changing who they are.
- Time is injected: the clock given to
  ``TaxiOrder.create_without_destination`` stamps every later transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .clock import Clock, format_timestamp
from .enums import ORDER_TRANSITIONS, OrderStatus
from .errors import InvalidArgument, InvalidState
from .identity import identity_eq, identity_hash
from .value_objects import Address, Car, PersonName


# ── Driver ────────────────────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Driver:
    id: int
    name: PersonName
    car: Car

    __eq__ = identity_eq
    __hash__ = identity_hash

    def full_info(self) -> str:
        return f"Id: {self.id} DriverName: {self.name.format()} {self.car}"


# ── Taxi order ────────────────────────────────────────────────────────


class TaxiOrder:
    """A single taxi order and its lifecycle.

    Every transition reads the clock before touching any field, so a
    rejected or failing call leaves the order exactly as it was.
    """

    __eq__ = identity_eq
    __hash__ = identity_hash

    def __init__(
        self,
        id: int,
        client_name: PersonName,
        start: Address,
        clock: Clock,
        creation_time: datetime,
    ):
        self._id = id
        self._client_name = client_name
        self._start = start
        self._clock = clock
        self._creation_time = creation_time

        self._destination: Optional[Address] = None
        self._driver: Optional[Driver] = None
        self._status = OrderStatus.WAITING_FOR_DRIVER

        self._driver_assignment_time: Optional[datetime] = None
        self._cancel_time: Optional[datetime] = None
        self._start_ride_time: Optional[datetime] = None
        self._finish_ride_time: Optional[datetime] = None
        self._last_progress_time = creation_time

    @classmethod
    def create_without_destination(
        cls,
        order_id: int,
        client_name: PersonName,
        start: Address,
        clock: Clock,
    ) -> "TaxiOrder":
        if client_name is None:
            raise InvalidArgument("client_name is required")
        if start is None:
            raise InvalidArgument("start address is required")
        if clock is None:
            raise InvalidArgument("clock is required")
        return cls(order_id, client_name, start, clock, clock())

    # ── read-only state ───────────────────────────────────────────

    @property
    def id(self) -> int:
        return self._id

    @property
    def client_name(self) -> PersonName:
        return self._client_name

    @property
    def start(self) -> Address:
        return self._start

    @property
    def destination(self) -> Optional[Address]:
        return self._destination

    @property
    def driver(self) -> Optional[Driver]:
        return self._driver

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def is_driver_assigned(self) -> bool:
        return self._driver is not None

    @property
    def creation_time(self) -> datetime:
        return self._creation_time

    @property
    def driver_assignment_time(self) -> Optional[datetime]:
        return self._driver_assignment_time

    @property
    def cancel_time(self) -> Optional[datetime]:
        return self._cancel_time

    @property
    def start_ride_time(self) -> Optional[datetime]:
        return self._start_ride_time

    @property
    def finish_ride_time(self) -> Optional[datetime]:
        return self._finish_ride_time

    @property
    def last_progress_time(self) -> datetime:
        """Timestamp of the most recent status change."""
        return self._last_progress_time

    # ── operations ────────────────────────────────────────────────

    def update_destination(self, destination: Address) -> None:
        if destination is None:
            raise InvalidArgument("destination is required")
        if self._status.is_terminal:
            raise InvalidState(
                f"Cannot change destination of an order in status {self._status}"
            )
        self._destination = destination

    def assign_driver(self, driver: Driver) -> None:
        if driver is None:
            raise InvalidArgument("driver is required")
        if self.is_driver_assigned:
            raise InvalidState(
                f"Order {self._id} already has driver {self._driver.id}"
            )
        self._ensure_can_move_to(OrderStatus.WAITING_CAR_ARRIVAL)

        now = self._clock()
        self._driver = driver
        self._driver_assignment_time = now
        self._move_to(OrderStatus.WAITING_CAR_ARRIVAL, now)

    def unassign_driver(self) -> None:
        if not self.is_driver_assigned:
            raise InvalidState(f"Order {self._id} has no driver to unassign")
        if self._status > OrderStatus.WAITING_CAR_ARRIVAL:
            raise InvalidState(
                f"Cannot unassign driver in status {self._status}"
            )

        now = self._clock()
        self._driver = None
        self._move_to(OrderStatus.WAITING_FOR_DRIVER, now)

    def cancel(self) -> None:
        if self._status > OrderStatus.WAITING_CAR_ARRIVAL:
            raise InvalidState(f"Cannot cancel order in status {self._status}")

        now = self._clock()
        # cancelling a matched order unassigns its driver first
        self._driver = None
        self._cancel_time = now
        self._move_to(OrderStatus.CANCELED, now)

    def start_ride(self) -> None:
        if self._status != OrderStatus.WAITING_CAR_ARRIVAL:
            raise InvalidState(f"Cannot start ride in status {self._status}")

        now = self._clock()
        self._start_ride_time = now
        self._move_to(OrderStatus.IN_PROGRESS, now)

    def finish_ride(self) -> None:
        if self._status != OrderStatus.IN_PROGRESS:
            raise InvalidState(f"Cannot finish ride in status {self._status}")

        now = self._clock()
        self._finish_ride_time = now
        self._move_to(OrderStatus.FINISHED, now)

    # ── queries ───────────────────────────────────────────────────

    def short_info(self) -> str:
        driver = self._driver.name.format() if self._driver else "not assigned"
        destination = (
            self._destination.format() if self._destination else "unspecified"
        )
        return " ".join(
            [
                f"OrderId: {self._id}",
                f"Status: {self._status.value}",
                f"Client: {self._client_name.format()}",
                f"Driver: {driver}",
                f"From: {self._start.format()}",
                f"To: {destination}",
                f"LastProgressTime: {format_timestamp(self._last_progress_time)}",
            ]
        )

    def driver_full_info(self) -> Optional[str]:
        if self._driver is None:
            return None
        return self._driver.full_info()

    def __repr__(self) -> str:
        return f"TaxiOrder(id={self._id}, status={self._status.value})"

    # ── internals ─────────────────────────────────────────────────

    def _ensure_can_move_to(self, new_status: OrderStatus) -> None:
        if new_status not in ORDER_TRANSITIONS.get(self._status, set()):
            raise InvalidState(
                f"Cannot transition from {self._status} to {new_status}"
            )

    def _move_to(self, new_status: OrderStatus, at: datetime) -> None:
        self._ensure_can_move_to(new_status)
        self._status = new_status
        self._last_progress_time = at
