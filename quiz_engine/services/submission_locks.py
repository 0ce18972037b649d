import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Hashable, Tuple


class SubmissionLocks:
    """
    Keyed asyncio locks, one per (session id, participant identity).

    Only the holder of a key may run the duplicate check and insert for that
    pair. Keys are dropped again once nobody holds or waits for them.
    Locks are process-local; the database unique constraint covers
    submissions arriving through other worker processes.
    """

    def __init__(self):
        self._locks: Dict[Tuple[Hashable, ...], asyncio.Lock] = {}
        self._holders: Dict[Tuple[Hashable, ...], int] = {}

    @asynccontextmanager
    async def hold(self, *key: Hashable):
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._holders[key] = self._holders.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
