"""
Shared test fixtures.

Orders get a ``TickingClock`` so every transition has a known,
strictly increasing timestamp; no test reads the wall clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities import TaxiOrder
from src.domain.value_objects import Address, PersonName
from src.infrastructure.drivers import InMemoryDriverRepository
from src.services.taxi_api import TaxiApi

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class TickingClock:
    """Returns ``start``, ``start + step``, ``start + 2*step`` ... on each call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        self.calls += 1
        return current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def drivers() -> InMemoryDriverRepository:
    return InMemoryDriverRepository()


@pytest.fixture
def driver(drivers):
    return drivers.get_driver_by_id(15)


@pytest.fixture
def order(clock) -> TaxiOrder:
    return TaxiOrder.create_without_destination(
        1, PersonName("Anna", "Smith"), Address("Baker St", "12"), clock
    )


@pytest.fixture
def api(drivers, clock) -> TaxiApi:
    return TaxiApi(drivers, clock)
