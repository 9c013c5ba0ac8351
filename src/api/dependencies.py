"""FastAPI dependency injection helpers.

The process-wide order store, driver lookup and clock live here so tests
can swap them through ``app.dependency_overrides``.
"""

from fastapi import Depends

from src.config import settings
from src.domain.clock import Clock, utc_now
from src.infrastructure.drivers import DriverLookup, InMemoryDriverRepository
from src.infrastructure.locks import DistributedLock, LocalLock, LockFactory
from src.infrastructure.order_store import InMemoryOrderStore
from src.infrastructure.redis_client import get_redis
from src.services.taxi_api import TaxiApi

_order_store = InMemoryOrderStore()
_driver_repo = InMemoryDriverRepository()


def get_order_store() -> InMemoryOrderStore:
    return _order_store


def get_driver_lookup() -> DriverLookup:
    return _driver_repo


def get_clock() -> Clock:
    return utc_now


def get_taxi_api(
    store: InMemoryOrderStore = Depends(get_order_store),
    drivers: DriverLookup = Depends(get_driver_lookup),
    clock: Clock = Depends(get_clock),
) -> TaxiApi:
    return TaxiApi(drivers, clock, store.next_id)


def get_lock_factory() -> LockFactory:
    """Build per-order locks for the configured backend."""
    if settings.lock_backend == "redis":
        client = get_redis()
        return lambda key: DistributedLock(
            client, key, ttl_seconds=settings.lock_ttl_seconds
        )
    return lambda key: LocalLock(key, timeout_seconds=settings.lock_ttl_seconds)
