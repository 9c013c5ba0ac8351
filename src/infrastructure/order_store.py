"""
In-memory order registry.

Owns order id allocation so that ids come from whoever stores the
orders, not from a hidden global counter.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta

from src.domain.entities import TaxiOrder


class OrderNotFound(LookupError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class InMemoryOrderStore:
    def __init__(self, first_id: int = 1):
        self._orders: dict[int, TaxiOrder] = {}
        self._ids = itertools.count(first_id)

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, order: TaxiOrder) -> TaxiOrder:
        self._orders[order.id] = order
        return order

    def get_or_raise(self, order_id: int) -> TaxiOrder:
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def __len__(self) -> int:
        return len(self._orders)

    def stale_orders(self, now: datetime, older_than: timedelta) -> list[TaxiOrder]:
        """Non-terminal orders whose last progress is older than *older_than*."""
        cutoff = now - older_than
        return sorted(
            (
                o
                for o in self._orders.values()
                if not o.status.is_terminal and o.last_progress_time < cutoff
            ),
            key=lambda o: o.last_progress_time,
        )
