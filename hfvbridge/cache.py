import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional
from dataclasses import dataclass


@dataclass
class CacheEntry:
    value: Any
    expires_at: float
    created_at: float


class TTLCache:
    """Simple in-memory TTL cache with LRU eviction.

    Instances are owned by the component that populates them; there is no
    module-level cache.
    """

    def __init__(
        self,
        default_ttl: float = 60,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._clock = clock
        self._cache: Dict[Hashable, CacheEntry] = {}
        self._access_order: List[Hashable] = []
        self._lock = asyncio.Lock()

    async def get(self, key: Hashable) -> Optional[Any]:
        async with self._lock:
            now = self._clock()

            if key not in self._cache:
                return None

            entry = self._cache[key]
            if now > entry.expires_at:
                del self._cache[key]
                if key in self._access_order:
                    self._access_order.remove(key)
                return None

            # Update access order for LRU
            if key in self._access_order:
                self._access_order.remove(key)
            self._access_order.append(key)

            return entry.value

    async def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        async with self._lock:
            ttl = ttl or self.default_ttl
            now = self._clock()

            self._cache[key] = CacheEntry(value=value, expires_at=now + ttl, created_at=now)

            if key in self._access_order:
                self._access_order.remove(key)
            self._access_order.append(key)

            # Evict oldest if over max size
            while len(self._cache) > self.max_size:
                oldest_key = self._access_order.pop(0)
                if oldest_key in self._cache:
                    del self._cache[oldest_key]

    async def delete(self, key: Hashable) -> None:
        async with self._lock:
            self._cache.pop(key, None)
            if key in self._access_order:
                self._access_order.remove(key)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()
            self._access_order.clear()

    def size(self) -> int:
        return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        return {
            "size": len(self._cache),
            "entries": [
                {"key": str(key), "age_s": round(now - entry.created_at, 3)}
                for key, entry in self._cache.items()
            ],
        }


class RequestCoalescer:
    """Collapse concurrent identical lookups onto one in-flight task.

    The first caller for a key starts the loader; callers arriving while it is
    pending await the same task. The key is released once the task settles, so
    failures are not remembered.
    """

    def __init__(self) -> None:
        self._inflight: Dict[Hashable, "asyncio.Task[Any]"] = {}

    async def run(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(loader())
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._release(k, _t))
        return await asyncio.shield(task)

    def _release(self, key: Hashable, task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the exception retrieved; awaiting callers still receive it.
        if not task.cancelled():
            task.exception()

    @property
    def pending(self) -> int:
        return len(self._inflight)
