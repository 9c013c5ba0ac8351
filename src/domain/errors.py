"""Domain error hierarchy.

Every guard violation in the order lifecycle surfaces as one of these,
raised synchronously to the caller.
"""


class TaxiDomainError(Exception):
    """Base class for all order-lifecycle errors."""


class InvalidArgument(TaxiDomainError, ValueError):
    """A required input was missing (``None``)."""


class InvalidState(TaxiDomainError):
    """Raised when an order operation is not allowed in its current status."""


class DriverNotFound(TaxiDomainError, LookupError):
    """The driver lookup has no driver with the requested id."""

    def __init__(self, driver_id: int):
        super().__init__(f"Unknown driver id {driver_id}")
        self.driver_id = driver_id
