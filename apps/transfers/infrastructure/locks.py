"""
Process-local locks keyed by record id.
Entries are dropped once nobody holds or waits for them.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, List


class KeyedLocks:

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[Hashable, List] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.RLock(), 0])
            entry[1] += 1
        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)
