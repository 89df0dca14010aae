"""
Keyed exclusion sections.

One asyncio.Lock per key (lot id or auction id). Waiting is always bounded:
a caller that cannot enter within the timeout gets Contention instead of
queueing forever.

Entries are created on first use and dropped once no task holds or waits
for them, so the table only tracks keys that are in use.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from ..core.errors import Contention

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Lazily created lock table indexed by resource id."""

    def __init__(self, resource: str, timeout: float):
        """
        Args:
            resource: Resource name used in Contention errors ("lot", "auction")
            timeout: Default maximum wait in seconds
        """
        self.resource = resource
        self.timeout = timeout
        self._locks: Dict[str, asyncio.Lock] = {}

        # Holders plus waiters per key
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def _checkout(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: str):
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            del self._locks[key]

    async def acquire(self, key: str, timeout: Optional[float] = None):
        """
        Enter the exclusion section for ``key``; pair with ``release(key)``.

        The release may happen in a different task than the acquire.

        Raises:
            Contention: the section could not be entered within the timeout
        """
        wait = self.timeout if timeout is None else timeout
        lock = self._checkout(key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=wait)
        except asyncio.TimeoutError:
            self._checkin(key)
            logger.debug(f"[KeyedLocks] Timed out after {wait}s waiting for {self.resource} {key}")
            raise Contention(self.resource, key, timeout=wait)
        except BaseException:
            self._checkin(key)
            raise

    def release(self, key: str):
        self._locks[key].release()
        self._checkin(key)

    @asynccontextmanager
    async def hold(self, key: str, timeout: Optional[float] = None) -> AsyncIterator[None]:
        """
        Enter the exclusion section for ``key`` for the duration of the block.

        Raises:
            Contention: the section could not be entered within the timeout
        """
        await self.acquire(key, timeout)
        try:
            yield
        finally:
            self.release(key)
