"""
Response cache gate.

Successful captures are stored under a fingerprint of the normalized
request so repeated requests inside the freshness window never touch the
backend. Failures and region-not-found fallbacks are never stored, so an
outage or a late-rendering region heals on the next request.

The store only needs atomic get/put; concurrent writers for the same
fingerprint are last-writer-wins, which is fine because they hold
equivalent images.
"""

import hashlib
import json
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from .capture.request import CaptureRequest
from .capture.result import CaptureResult


def fingerprint(request: CaptureRequest) -> str:
    """
    Cache key for a request.

    Covers address, mode, width, height and debug flag. Selectors are left
    out because they come from configuration, not from the caller.
    """
    key = json.dumps(
        [request.url, request.mode.value, request.width, request.height, request.debug],
        separators=(",", ":"),
    )
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


@dataclass
class _Entry:
    value: CaptureResult
    expires_at: float


class MemoryCacheStore:
    """In-process TTL store with a replaceable clock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_entries: int = 256):
        self.clock = clock
        self.max_entries = max_entries
        self._entries: dict[str, _Entry] = {}

    def get(self, key: str) -> CaptureResult | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def remaining(self, key: str) -> float:
        """Seconds until `key` expires; 0 when absent or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return 0.0
        return max(0.0, entry.expires_at - self.clock())

    def put(self, key: str, value: CaptureResult, ttl: float):
        if len(self._entries) >= self.max_entries and key not in self._entries:
            self._evict()
        self._entries[key] = _Entry(value=value, expires_at=self.clock() + ttl)

    def _evict(self):
        now = self.clock()
        for key in [k for k, e in self._entries.items() if now >= e.expires_at]:
            del self._entries[key]
        if len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k].expires_at)
            del self._entries[oldest]

    def __len__(self) -> int:
        return len(self._entries)


class CaptureCache:
    """Look up before capturing, store after a clean success."""

    def __init__(self, store: MemoryCacheStore | None = None, ttl: float = 300.0):
        self.store = store if store is not None else MemoryCacheStore()
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def lookup(self, request: CaptureRequest) -> CaptureResult | None:
        """Fresh cached result flagged as a hit, with its remaining lifetime."""
        if not self.enabled:
            return None
        key = fingerprint(request)
        cached = self.store.get(key)
        if cached is None:
            return None
        return cached.as_cached(max_age=self.store.remaining(key))

    def store_result(self, request: CaptureRequest, result: CaptureResult) -> bool:
        """Store `result` if it is cacheable. Returns True when stored."""
        if not self.enabled or not result.ok or result.soft_failure:
            return False
        self.store.put(fingerprint(request), result, self.ttl)
        return True

    async def get_or_capture(
        self,
        request: CaptureRequest,
        produce: Callable[[], Awaitable[CaptureResult]],
    ) -> CaptureResult:
        """Return a fresh cached result, or call `produce` and cache what it returns."""
        cached = self.lookup(request)
        if cached is not None:
            print(f"[Cache] Hit {request.describe()}", flush=True)
            return cached

        result = await produce()
        if self.store_result(request, result):
            print(f"[Cache] Stored {request.describe()} for {self.ttl}s", flush=True)
        return result
