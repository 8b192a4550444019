"""
Collapses concurrent calls for the same key into one in-flight call.
Callers arriving while a call is running wait for its outcome instead of
starting their own.
"""

import threading
from concurrent.futures import Future
from typing import Callable, Dict, Hashable, Optional, TypeVar

T = TypeVar("T")


class SingleFlight:

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: Dict[Hashable, Future] = {}

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._calls

    def do(self, key: Hashable, fn: Callable[[], T], timeout: Optional[float] = None) -> T:
        """
        Run fn for key, or join the call already running for key.

        Waiters raise concurrent.futures.TimeoutError after `timeout` seconds;
        the leader always runs fn to completion. Exceptions raised by fn are
        re-raised in every caller.
        """
        with self._lock:
            future = self._calls.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._calls[key] = future

        if not leader:
            return future.result(timeout=timeout)

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._calls.pop(key, None)
