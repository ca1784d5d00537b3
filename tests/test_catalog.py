"""Tests for the category catalog cache."""

import asyncio

import pytest

from daybrief.core import CatalogCache, CategoryDescriptor

FALLBACK = [CategoryDescriptor("guonei", "国内新闻"), CategoryDescriptor("keji", "科技新闻", 13)]
LIVE = [
    CategoryDescriptor("guonei", "国内"),
    CategoryDescriptor("keji", "科技", 13),
    CategoryDescriptor("junshi", "军事", 27),
]


class CountingLoader:
    """Catalog loader that yields once and counts invocations."""

    def __init__(self, result=None, error: Exception = None) -> None:
        self.result = LIVE if result is None else result
        self.error = error
        self.calls = 0

    async def __call__(self) -> list[CategoryDescriptor]:
        self.calls += 1
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return list(self.result)


class Ticker:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def ticker() -> Ticker:
    return Ticker()


@pytest.fixture
def catalog(ticker: Ticker) -> CatalogCache:
    return CatalogCache(ttl=3600, clock=ticker)


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch(catalog: CatalogCache) -> None:
    """Test callers arriving during a fetch await the same request."""
    loader = CountingLoader()
    catalog.register("TianAPI", loader, FALLBACK)

    results = await asyncio.gather(*(catalog.get_categories("TianAPI") for _ in range(5)))

    assert loader.calls == 1
    assert all(result == LIVE for result in results)


@pytest.mark.asyncio
async def test_fresh_catalog_is_served_from_memory(catalog: CatalogCache, ticker: Ticker) -> None:
    """Test no refetch happens within the TTL."""
    loader = CountingLoader()
    catalog.register("TianAPI", loader, FALLBACK)

    await catalog.get_categories("TianAPI")
    ticker.now = 3599
    await catalog.get_categories("TianAPI")

    assert loader.calls == 1
    assert catalog.is_fresh("TianAPI")


@pytest.mark.asyncio
async def test_stale_catalog_is_refetched(catalog: CatalogCache, ticker: Ticker) -> None:
    """Test the catalog is reloaded once the TTL has passed."""
    loader = CountingLoader()
    catalog.register("TianAPI", loader, FALLBACK)

    await catalog.get_categories("TianAPI")
    ticker.now = 3601
    assert not catalog.is_fresh("TianAPI")
    await catalog.get_categories("TianAPI")

    assert loader.calls == 2


@pytest.mark.asyncio
async def test_failed_fetch_uses_fallback_and_retries(catalog: CatalogCache) -> None:
    """Test a failing loader yields the static list and is retried next time."""
    loader = CountingLoader(error=RuntimeError("catalog down"))
    catalog.register("TianAPI", loader, FALLBACK)

    first = await catalog.get_categories("TianAPI")
    second = await catalog.get_categories("TianAPI")

    assert first == FALLBACK
    assert second == FALLBACK
    assert loader.calls == 2
    assert not catalog.is_fresh("TianAPI")


@pytest.mark.asyncio
async def test_empty_fetch_uses_fallback(catalog: CatalogCache) -> None:
    """Test an empty catalog is treated like a failure."""
    catalog.register("TianAPI", CountingLoader(result=[]), FALLBACK)

    assert await catalog.get_categories("TianAPI") == FALLBACK


@pytest.mark.asyncio
async def test_unknown_provider(catalog: CatalogCache) -> None:
    """Test asking for an unregistered provider."""
    with pytest.raises(KeyError):
        await catalog.get_categories("Nobody")


@pytest.mark.asyncio
async def test_callers_get_independent_copies(catalog: CatalogCache) -> None:
    """Test mutating a returned list does not touch the cache."""
    catalog.register("TianAPI", CountingLoader(), FALLBACK)

    result = await catalog.get_categories("TianAPI")
    result.clear()

    assert await catalog.get_categories("TianAPI") == LIVE
