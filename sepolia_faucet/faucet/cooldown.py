"""
Per-address cooldown tracking.

Process-local map from normalized address to the time of its last successful
disbursement, read from a monotonic clock so wall-clock steps never shorten
or stretch a window. A restart clears every cooldown. Entries older than
the window are swept whenever a disbursement is recorded, so the map only
holds addresses still inside their window.

Concurrent requests share one tracker: reserve() is the atomic
check-and-set that lets exactly one request per address proceed to the
chain; the winner later calls record_disbursement() or release().
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from sepolia_faucet.faucet_logging import get_logger
from sepolia_faucet.utils.address_utils import normalize_address

logger = get_logger(__name__)

DEFAULT_COOLDOWN_SEC = 3600.0


class CooldownTracker:
    def __init__(
        self,
        window_sec: float = DEFAULT_COOLDOWN_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_sec = float(window_sec)
        self.clock = clock
        self._last: dict[str, float] = {}
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)

    def _eligible_locked(self, key: str, now: float) -> bool:
        if key in self._in_flight:
            return False
        last = self._last.get(key)
        return last is None or now - last >= self.window_sec

    def is_eligible(self, address: str, now: float | None = None) -> bool:
        """True if address has no entry, nothing in flight, and its window has fully elapsed."""
        now = self.clock() if now is None else now
        with self._lock:
            return self._eligible_locked(normalize_address(address), now)

    def reserve(self, address: str, now: float | None = None) -> bool:
        """
        Atomically check eligibility and mark address as in flight.

        Returns False (and changes nothing) if the address is cooling down or
        another request already holds it.
        """
        now = self.clock() if now is None else now
        key = normalize_address(address)
        with self._lock:
            if not self._eligible_locked(key, now):
                return False
            self._in_flight.add(key)
            return True

    def release(self, address: str) -> None:
        """Drop an in-flight reservation without consuming the window."""
        with self._lock:
            self._in_flight.discard(normalize_address(address))

    def record_disbursement(self, address: str, timestamp: float | None = None) -> None:
        """Insert or overwrite the entry for address and clear its reservation."""
        timestamp = self.clock() if timestamp is None else timestamp
        key = normalize_address(address)
        with self._lock:
            self._in_flight.discard(key)
            self._last[key] = timestamp
            self._sweep_locked(timestamp)

    def last_disbursement(self, address: str) -> float | None:
        with self._lock:
            return self._last.get(normalize_address(address))

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, ts in self._last.items() if now - ts >= self.window_sec]
        for k in expired:
            del self._last[k]
        return len(expired)

    def sweep(self, now: float | None = None) -> int:
        """Evict entries whose window has elapsed. Returns number removed."""
        now = self.clock() if now is None else now
        with self._lock:
            removed = self._sweep_locked(now)
        if removed:
            logger.debug("cooldown_sweep", removed=removed)
        return removed


def describe_window(seconds: float) -> str:
    """Human text for a cooldown window: 3600 -> "1 hour", 90 -> "90 seconds"."""
    seconds = int(seconds)
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size and seconds % size == 0:
            count = seconds // size
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return "1 second" if seconds == 1 else f"{seconds} seconds"
