"""Time-windowed cache of provider results on top of a key-value store."""

import json
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar

from daybrief.core.entities import CacheEntry
from daybrief.core.interfaces import KeyValueStore
from daybrief.core.windows import CacheWindow, to_epoch_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

SELECT_ENTRY = "SELECT key, value, expires_at, created_at FROM cache WHERE key = ?"
UPSERT_ENTRY = (
    "INSERT OR REPLACE INTO cache (key, value, expires_at, created_at) "
    "VALUES (?, ?, ?, ?)"
)


def local_now() -> datetime:
    return datetime.now().astimezone()


class TimeWindowedCacheStore:
    """Serve results persisted earlier in the same cache window.

    Entries are never deleted. An entry past its ``expires_at`` is ignored
    and overwritten by the next successful fetch under the same key. Storage
    failures are logged and degrade to a cache miss.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.store = store
        self.clock = clock

    def now_ms(self) -> int:
        return to_epoch_ms(self.clock())

    async def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the fresh entry for ``key`` or None on miss, expiry or error."""
        try:
            rows = await self.store.query(SELECT_ENTRY, [key])
            if not rows:
                return None

            row = rows[0]
            entry = CacheEntry(
                key=key,
                payload=json.loads(row["value"]),
                expires_at=int(row["expires_at"]),
                created_at=int(row.get("created_at") or 0),
            )
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        if not entry.is_fresh(self.now_ms()):
            logger.debug("Cache entry %s expired", key)
            return None
        return entry

    async def get(self, key: str) -> Any:
        """Return the cached payload or None."""
        entry = await self.get_entry(key)
        return entry.payload if entry else None

    async def put(self, key: str, payload: Any, expires_at: int) -> None:
        """Persist ``payload`` under ``key`` until ``expires_at`` (epoch ms)."""
        try:
            value = json.dumps(payload, ensure_ascii=False)
            await self.store.execute(UPSERT_ENTRY, [key, value, expires_at, self.now_ms()])
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    async def fetch_through(
        self,
        key: str,
        window: CacheWindow,
        loader: Callable[[], Awaitable[T]],
        encode: Callable[[T], Any],
        decode: Callable[[Any], T],
        skip_cache: bool = False,
    ) -> T:
        """Read ``key`` unless skipped, otherwise load and write back.

        Loader errors propagate; nothing is written for a failed load.
        """
        if not skip_cache:
            payload = await self.get(key)
            if payload is not None:
                try:
                    result = decode(payload)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Discarding undecodable cache entry %s: %s", key, e)
                else:
                    logger.info("Cache hit for %s", key)
                    return result
        else:
            logger.info("Skipping cache for %s", key)

        result = await loader()
        await self.put(key, encode(result), window.expires_at_ms)
        return result
