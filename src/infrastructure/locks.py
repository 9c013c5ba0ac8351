"""
Per-order locks.

Every mutation of an order runs inside a lock keyed ``order:<id>`` so
two transitions never interleave on the same order.

* ``DistributedLock``: Redis ``SET NX EX`` (retried until the TTL
  runs out) to acquire and a Lua script for atomic check-and-delete on
  release.  Use this when several API processes serve the same orders.
* ``LocalLock``: one ``asyncio.Lock`` per key, for a single process.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Optional, Union

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class LockNotAcquired(RuntimeError):
    """Raised by the context manager when the lock is held elsewhere."""


class _LockContext:
    key: str

    async def acquire(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    async def release(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def __aenter__(self):
        acquired = await self.acquire()
        if not acquired:
            logger.warning("Lock busy: %s", self.key)
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()


class DistributedLock(_LockContext):
    _RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(
        self,
        client: aioredis.Redis,
        key: str,
        ttl_seconds: int = 30,
        retry_interval: float = 0.05,
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.retry_interval = retry_interval
        self.token = str(uuid.uuid4())

    async def _try_set(self) -> bool:
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def acquire(self) -> bool:
        """Retry ``SET NX`` until it succeeds or ``ttl`` seconds pass."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.ttl
        while not await self._try_set():
            if loop.time() + self.retry_interval > deadline:
                return False
            await asyncio.sleep(self.retry_interval)
        return True

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        await self.redis.eval(self._RELEASE_SCRIPT, 1, self.key, self.token)


class _LocalEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


# key -> lock shared by everyone holding or waiting for that key; an
# entry is dropped once its last user leaves.
_local_locks: dict[str, _LocalEntry] = {}


class LocalLock(_LockContext):
    def __init__(
        self,
        key: str,
        timeout_seconds: float = 30,
        registry: Optional[dict[str, _LocalEntry]] = None,
    ):
        self.key = f"lock:{key}"
        self.timeout = timeout_seconds
        self._registry = _local_locks if registry is None else registry
        self._entry: Optional[_LocalEntry] = None

    async def acquire(self) -> bool:
        """Wait up to the timeout for the key. Returns True on success."""
        entry = self._registry.get(self.key)
        if entry is None:
            entry = self._registry[self.key] = _LocalEntry()
        entry.users += 1
        try:
            await asyncio.wait_for(entry.lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._leave(entry)
            return False
        except BaseException:
            self._leave(entry)
            raise
        self._entry = entry
        return True

    async def release(self) -> None:
        entry, self._entry = self._entry, None
        if entry is not None:
            entry.lock.release()
            self._leave(entry)

    def _leave(self, entry: _LocalEntry) -> None:
        entry.users -= 1
        if entry.users == 0 and self._registry.get(self.key) is entry:
            del self._registry[self.key]


OrderLock = Union[DistributedLock, LocalLock]
LockFactory = Callable[[str], OrderLock]


def order_lock_key(order_id: int) -> str:
    return f"order:{order_id}"
