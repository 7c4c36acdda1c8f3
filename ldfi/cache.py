from concurrent.futures import Future
import copy
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict
import enum
import logging
import time

logger = logging.getLogger("[Cache]")


class CacheState(str, enum.Enum):
    EMPTY = "empty"
    COMPUTING = "computing"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    computed_at: float
    expires_at: float


class SingleFlightCache:
    """
    Time bounded memoization with request coalescing.

    A key that is missing or expired is recomputed by the first reader only.
    Readers arriving while that computation runs wait for it and get the same
    value, or their own copy of its exception chained to the original. Failed
    computations never touch the stored entry, so an expired entry stays
    expired and the next read tries again.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.ttl_seconds = ttl_seconds
        self.clock = clock

        self.lock = Lock()
        self.entries: Dict[str, CacheEntry] = {}
        self.in_flight: Dict[str, Future] = {}

    def get(self, key: str, compute_fn: Callable[[], Any]) -> Any:
        with self.lock:
            entry = self.entries.get(key)
            if entry is not None and self.clock() < entry.expires_at:
                return entry.value

            flight = self.in_flight.get(key)
            leader = flight is None
            if leader:
                flight = Future()
                self.in_flight[key] = flight

        if not leader:
            logger.debug(f"Waiting for in flight computation of {key}")
            try:
                return flight.result()
            except BaseException as e:
                # Each waiter raises its own copy, chained to the leader's exception
                raise copy.copy(e) from e

        logger.debug(f"Computing {key}")

        try:
            value = compute_fn()
        except BaseException as e:
            with self.lock:
                del self.in_flight[key]
            flight.set_exception(e)
            logger.warning(f"Computation of {key} failed: {e}")
            raise

        now = self.clock()
        with self.lock:
            self.entries[key] = CacheEntry(value=value, computed_at=now, expires_at=now + self.ttl_seconds)
            del self.in_flight[key]
        flight.set_result(value)

        return value

    def state(self, key: str) -> CacheState:
        with self.lock:
            if key in self.in_flight:
                return CacheState.COMPUTING

            entry = self.entries.get(key)
            if entry is None:
                return CacheState.EMPTY

            if self.clock() < entry.expires_at:
                return CacheState.FRESH

            return CacheState.STALE

    def entry(self, key: str) -> CacheEntry | None:
        with self.lock:
            return self.entries.get(key)
