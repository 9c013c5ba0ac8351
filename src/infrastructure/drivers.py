"""
Driver lookup.

In a real deployment this would query the driver service / database by
id.  Here it is an in-memory stand-in that callers reach through the
``DriverLookup`` protocol only.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol

from src.domain.entities import Driver
from src.domain.errors import DriverNotFound
from src.domain.value_objects import Car, PersonName


class DriverLookup(Protocol):
    def get_driver_by_id(self, driver_id: int) -> Driver: ...


def default_drivers() -> dict[int, Driver]:
    return {
        15: Driver(
            15,
            PersonName("Drive", "Driverson"),
            Car("Baklazhan", "Lada sedan", "A123BT 66"),
        ),
    }


class InMemoryDriverRepository:
    def __init__(self, drivers: Optional[Mapping[int, Driver]] = None):
        self._drivers = dict(default_drivers() if drivers is None else drivers)

    def get_driver_by_id(self, driver_id: int) -> Driver:
        """Return the driver or raise ``DriverNotFound``; never retries."""
        try:
            return self._drivers[driver_id]
        except KeyError:
            raise DriverNotFound(driver_id) from None
