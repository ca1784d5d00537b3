"""Lazily fetched, shared category catalogs per provider."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from daybrief.core.entities import CategoryDescriptor

logger = logging.getLogger(__name__)

CATALOG_TTL = 24 * 60 * 60

CatalogLoader = Callable[[], Awaitable[list[CategoryDescriptor]]]


@dataclass
class _CatalogSlot:
    loader: CatalogLoader
    fallback: list[CategoryDescriptor]
    categories: Optional[list[CategoryDescriptor]] = None
    fetched_at: float = 0.0
    pending: Optional["asyncio.Future[list[CategoryDescriptor]]"] = field(default=None, repr=False)


class CatalogCache:
    """In-memory catalog per provider with one in-flight fetch at a time.

    Callers arriving while a fetch is outstanding await that same fetch. A
    failed or empty fetch yields the provider's static fallback list and
    leaves the slot empty so the next caller retries.
    """

    def __init__(
        self,
        ttl: float = CATALOG_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.clock = clock
        self._slots: dict[str, _CatalogSlot] = {}

    def register(
        self,
        provider: str,
        loader: CatalogLoader,
        fallback: list[CategoryDescriptor],
    ) -> None:
        """Attach a catalog loader and its static fallback to a provider name."""
        self._slots[provider] = _CatalogSlot(loader=loader, fallback=list(fallback))

    def is_fresh(self, provider: str) -> bool:
        slot = self._slots.get(provider)
        return bool(
            slot
            and slot.categories is not None
            and self.clock() - slot.fetched_at < self.ttl
        )

    async def get_categories(self, provider: str) -> list[CategoryDescriptor]:
        """Return the provider's catalog, fetching it at most once concurrently."""
        slot = self._slots.get(provider)
        if slot is None:
            raise KeyError(f"No catalog registered for provider {provider!r}")

        if self.is_fresh(provider):
            return list(slot.categories or [])

        if slot.pending is None:
            slot.pending = asyncio.ensure_future(self._load(provider, slot))

        return list(await asyncio.shield(slot.pending))

    async def _load(self, provider: str, slot: _CatalogSlot) -> list[CategoryDescriptor]:
        try:
            categories = await slot.loader()
        except Exception as e:
            logger.warning("Catalog fetch for %s failed, using built-in list: %s", provider, e)
            return list(slot.fallback)
        finally:
            slot.pending = None

        if not categories:
            logger.warning("Catalog for %s came back empty, using built-in list", provider)
            return list(slot.fallback)

        slot.categories = categories
        slot.fetched_at = self.clock()
        logger.info("Catalog for %s updated: %d categories", provider, len(categories))
        return list(categories)
