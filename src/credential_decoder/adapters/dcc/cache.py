from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlightCache(Generic[T]):
    """
    Thread-safe TTL cache with in-flight de-duplication.

    - one loader call per key at a time; concurrent callers wait on the
      same Future
    - failed loads are not cached, the next caller retries
    - at most `max_entries` values are kept (oldest evicted first)
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock

        self._lock = threading.Lock()
        self._values: "OrderedDict[Hashable, Tuple[float, T]]" = OrderedDict()
        self._in_flight: Dict[Hashable, Future] = {}

    def __len__(self) -> int:
        with self._lock:
            self._prune()
            return len(self._values)

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        with self._lock:
            cached = self._get_fresh(key)
            if cached is not None:
                return cached[1]

            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[key] = future

        if not owner:
            return future.result()

        try:
            value = loader()
        except BaseException as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._values[key] = (self._clock() + self._ttl, value)
            self._values.move_to_end(key)
            while len(self._values) > self._max_entries:
                evicted, _ = self._values.popitem(last=False)
                log.debug("Evicted cache entry %r", evicted)
            self._in_flight.pop(key, None)
        future.set_result(value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    # ------------------------------------------------------------------ #
    # Internal helpers (lock held)
    # ------------------------------------------------------------------ #

    def _get_fresh(self, key: Hashable) -> Optional[Tuple[float, T]]:
        entry = self._values.get(key)
        if entry is None:
            return None
        if self._clock() >= entry[0]:
            del self._values[key]
            return None
        return entry

    def _prune(self) -> None:
        now = self._clock()
        for key in [k for k, (exp, _) in self._values.items() if now >= exp]:
            del self._values[key]
