"""Order status and the lifecycle transition rules."""

import enum


class OrderStatus(str, enum.Enum):
    """Lifecycle status of a taxi order.

    Statuses compare by lifecycle progress, not alphabetically:
    ``WaitingForDriver < WaitingCarArrival < InProgress``, with the
    terminal ``Finished`` and ``Canceled`` ranked after ``InProgress``.
    """

    WAITING_FOR_DRIVER = "WaitingForDriver"
    WAITING_CAR_ARRIVAL = "WaitingCarArrival"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"
    CANCELED = "Canceled"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other):
        if not isinstance(other, OrderStatus):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, OrderStatus):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, OrderStatus):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, OrderStatus):
            return NotImplemented
        return self.rank >= other.rank


_RANKS = {status: rank for rank, status in enumerate(OrderStatus)}

TERMINAL_STATUSES = frozenset({OrderStatus.FINISHED, OrderStatus.CANCELED})


# State machine: maps current status -> set of valid next statuses
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.WAITING_FOR_DRIVER: {
        OrderStatus.WAITING_CAR_ARRIVAL,
        OrderStatus.CANCELED,
    },
    OrderStatus.WAITING_CAR_ARRIVAL: {
        OrderStatus.WAITING_FOR_DRIVER,
        OrderStatus.IN_PROGRESS,
        OrderStatus.CANCELED,
    },
    OrderStatus.IN_PROGRESS: {OrderStatus.FINISHED},
    OrderStatus.FINISHED: set(),
    OrderStatus.CANCELED: set(),
}
