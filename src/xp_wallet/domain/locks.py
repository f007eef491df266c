"""In-process per-wallet / per-offer locks.

Keys are always acquired in sorted order so two units of work touching the
same wallets can never deadlock each other. A bounded wait turns contention
into ConcurrencyConflictError instead of an unbounded queue.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from config.settings import settings
from src.xp_common.errors import ConcurrencyConflictError


def wallet_key(user_id: str, program: str) -> str:
    return f"wallet:{user_id}:{program}"


def offer_key(offer_id: str) -> str:
    return f"offer:{offer_id}"


def user_stats_key(user_id: str) -> str:
    return f"stats:{user_id}"


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0  # holders plus waiters


class WalletLockManager:
    """Entries exist only while someone holds or waits on the key, so offer
    keys do not accumulate over the life of the process."""

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.WALLET_LOCK_TIMEOUT_SECONDS
        )
        self._entries: dict[str, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        joined: list[tuple[str, _LockEntry]] = []
        acquired: list[_LockEntry] = []
        try:
            for key in sorted(set(keys)):
                entry = self._entries.get(key)
                if entry is None:
                    entry = self._entries[key] = _LockEntry()
                entry.users += 1
                joined.append((key, entry))
                try:
                    await asyncio.wait_for(entry.lock.acquire(), timeout=self._timeout)
                except asyncio.TimeoutError:
                    raise ConcurrencyConflictError() from None
                acquired.append(entry)
            yield
        finally:
            for entry in reversed(acquired):
                entry.lock.release()
            for key, entry in joined:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]


# Shared by every service that moves points; one instance per process.
wallet_locks = WalletLockManager()
