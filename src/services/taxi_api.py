"""
Taxi API facade
===============

Takes primitive inputs (names, street / building strings, driver ids),
builds the value objects and delegates to ``TaxiOrder``.  The facade
holds no order state of its own: orders are handed in by the caller and
ids come from the injected allocator.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Optional

from src.domain.clock import Clock, utc_now
from src.domain.entities import TaxiOrder
from src.domain.value_objects import Address, PersonName
from src.infrastructure.drivers import DriverLookup

logger = logging.getLogger(__name__)


class TaxiApi:
    def __init__(
        self,
        drivers_repo: DriverLookup,
        current_time: Clock = utc_now,
        id_allocator: Optional[Callable[[], int]] = None,
    ):
        self.drivers_repo = drivers_repo
        self.current_time = current_time
        self.id_allocator = id_allocator or itertools.count(1).__next__

    def create_order_without_destination(
        self, first_name: str, last_name: str, street: str, building: str
    ) -> TaxiOrder:
        order = TaxiOrder.create_without_destination(
            self.id_allocator(),
            PersonName(first_name, last_name),
            Address(street, building),
            self.current_time,
        )
        logger.info("Order %d created for %s", order.id, order.client_name.format())
        return order

    def update_destination(self, order: TaxiOrder, street: str, building: str) -> None:
        order.update_destination(Address(street, building))
        logger.info("Order %d destination set", order.id)

    def assign_driver(self, order: TaxiOrder, driver_id: int) -> None:
        driver = self.drivers_repo.get_driver_by_id(driver_id)
        order.assign_driver(driver)
        logger.info("Order %d assigned to driver %d", order.id, driver_id)

    def unassign_driver(self, order: TaxiOrder) -> None:
        order.unassign_driver()
        logger.info("Order %d driver unassigned", order.id)

    def get_driver_full_info(self, order: TaxiOrder) -> Optional[str]:
        return order.driver_full_info()

    def get_short_order_info(self, order: TaxiOrder) -> str:
        return order.short_info()

    def cancel(self, order: TaxiOrder) -> None:
        order.cancel()
        logger.info("Order %d cancelled", order.id)

    def start_ride(self, order: TaxiOrder) -> None:
        order.start_ride()
        logger.info("Order %d ride started", order.id)

    def finish_ride(self, order: TaxiOrder) -> None:
        order.finish_ride()
        logger.info("Order %d ride finished", order.id)
