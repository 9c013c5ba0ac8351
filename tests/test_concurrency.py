"""
Concurrency safety tests.

Demonstrates:
1. Distributed lock (Redis stand-in) waits for a busy order and only
   releases its own token.
2. Local lock serialises mutations of one order within a process.
3. The order store hands out unique ids and finds stale orders.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.domain.entities import TaxiOrder
from src.domain.value_objects import Address, PersonName
from src.infrastructure.locks import (
    DistributedLock,
    LocalLock,
    LockNotAcquired,
    order_lock_key,
)
from src.infrastructure.order_store import InMemoryOrderStore, OrderNotFound

from tests.conftest import T0, TickingClock


class _FakeRedis:
    """Just enough of Redis for the lock: ``SET NX`` and the release script."""

    def __init__(self):
        self.data: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    async def eval(self, script, numkeys, key, token):
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0


class TestDistributedLock:
    """Redis-backed order lock against an in-memory stand-in."""

    @pytest.mark.asyncio
    async def test_key_and_expiry_per_order(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, order_lock_key(7), ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "lock:order:7", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_waits_for_busy_order(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(side_effect=[False, True])

        lock = DistributedLock(
            mock_redis, order_lock_key(1), ttl_seconds=5, retry_interval=0.01
        )
        async with lock:
            pass
        assert mock_redis.set.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_ttl(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(
            mock_redis, order_lock_key(1), ttl_seconds=0.05, retry_interval=0.01
        )
        with pytest.raises(LockNotAcquired, match="lock:order:1"):
            async with lock:
                pass
        assert mock_redis.set.await_count > 1
        mock_redis.eval.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_process_blocked_until_release(self):
        redis = _FakeRedis()
        first = DistributedLock(redis, order_lock_key(4), ttl_seconds=5)
        second = DistributedLock(
            redis, order_lock_key(4), ttl_seconds=0.05, retry_interval=0.01
        )

        async with first:
            assert await second.acquire() is False
        assert await second.acquire() is True
        assert redis.data == {"lock:order:4": second.token}

    @pytest.mark.asyncio
    async def test_release_keeps_lock_taken_over_by_someone_else(self):
        redis = _FakeRedis()
        stale = DistributedLock(redis, order_lock_key(2), ttl_seconds=5)
        await stale.acquire()
        # the key expired and another process now owns it
        redis.data["lock:order:2"] = "other-token"

        await stale.release()
        assert redis.data == {"lock:order:2": "other-token"}


class TestLocalLock:
    @pytest.mark.asyncio
    async def test_second_holder_times_out(self):
        registry: dict = {}
        async with LocalLock("order:1", registry=registry):
            other = LocalLock("order:1", timeout_seconds=0.01, registry=registry)
            assert await other.acquire() is False

    @pytest.mark.asyncio
    async def test_different_orders_do_not_block(self):
        registry: dict = {}
        async with LocalLock("order:1", registry=registry):
            async with LocalLock("order:2", timeout_seconds=0.01, registry=registry):
                pass

    @pytest.mark.asyncio
    async def test_mutations_are_serialised(self):
        registry: dict = {}
        events: list[str] = []

        async def worker(name: str):
            async with LocalLock("order:1", registry=registry):
                events.append(f"{name}-in")
                await asyncio.sleep(0.01)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert events in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    @pytest.mark.asyncio
    async def test_release_without_acquire_is_noop(self):
        lock = LocalLock("order:9", registry={})
        await lock.release()
        assert await lock.acquire() is True

    @pytest.mark.asyncio
    async def test_registry_empty_after_release(self):
        registry: dict = {}
        for order_id in range(50):
            async with LocalLock(order_lock_key(order_id), registry=registry):
                assert len(registry) == 1
        assert registry == {}

    @pytest.mark.asyncio
    async def test_registry_kept_while_waiter_queued(self):
        registry: dict = {}
        holder = LocalLock("order:1", registry=registry)
        await holder.acquire()
        waiter = asyncio.ensure_future(
            LocalLock("order:1", registry=registry).acquire()
        )
        await asyncio.sleep(0)
        await holder.release()
        assert await waiter is True
        assert "lock:order:1" in registry

    @pytest.mark.asyncio
    async def test_timed_out_waiter_leaves_no_entry(self):
        registry: dict = {}
        holder = LocalLock("order:1", registry=registry)
        await holder.acquire()
        waiter = LocalLock("order:1", timeout_seconds=0.01, registry=registry)
        assert await waiter.acquire() is False
        await holder.release()
        assert registry == {}


class TestLockFactory:
    def test_redis_backend_builds_distributed_locks(self, monkeypatch):
        from src.api import dependencies

        client = AsyncMock()
        monkeypatch.setattr(dependencies.settings, "lock_backend", "redis")
        monkeypatch.setattr(dependencies, "get_redis", lambda: client)

        lock = dependencies.get_lock_factory()(order_lock_key(3))
        assert isinstance(lock, DistributedLock)
        assert lock.redis is client
        assert lock.key == "lock:order:3"
        assert lock.ttl == dependencies.settings.lock_ttl_seconds

    def test_local_backend_builds_local_locks(self, monkeypatch):
        from src.api import dependencies

        monkeypatch.setattr(dependencies.settings, "lock_backend", "local")
        assert isinstance(dependencies.get_lock_factory()("order:3"), LocalLock)


class TestOrderStore:
    def _order(self, store: InMemoryOrderStore, clock) -> TaxiOrder:
        return store.add(
            TaxiOrder.create_without_destination(
                store.next_id(), PersonName("A", "B"), Address("S", "1"), clock
            )
        )

    def test_ids_are_unique(self):
        store = InMemoryOrderStore()
        assert [store.next_id() for _ in range(3)] == [1, 2, 3]

    def test_get_missing_order(self):
        with pytest.raises(OrderNotFound):
            InMemoryOrderStore().get_or_raise(5)

    def test_stale_orders(self):
        store = InMemoryOrderStore()
        clock = TickingClock(step=timedelta(minutes=20))
        old = self._order(store, clock)              # T0
        recent = self._order(store, clock)           # T0 + 20m
        done = self._order(store, clock)             # T0 + 40m
        done.cancel()                                # T0 + 60m

        stale = store.stale_orders(T0 + timedelta(minutes=45), timedelta(minutes=30))
        assert stale == [old]
        assert recent not in stale
        assert len(store) == 3
