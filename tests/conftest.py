"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

import pytest

from daybrief.adapters.storage import MemorySettingsStore, SqliteKeyValueStore
from daybrief.config import ConfigResolver
from daybrief.core import Article, NewsProvider, ProviderFamily, TimeWindowedCacheStore

BEIJING = timezone(timedelta(hours=8))

Outcome = Union[list[Article], Exception]


class FakeClock:
    """Settable wall clock for cache windows."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeNewsProvider(NewsProvider):
    """Scriptable news provider that records every call."""

    def __init__(
        self,
        name: str,
        family: ProviderFamily,
        configured: bool = True,
        default: Optional[Outcome] = None,
        by_category: Optional[dict[str, Outcome]] = None,
        search_results: Optional[Outcome] = None,
    ) -> None:
        self.name = name
        self.family = family
        self.configured = configured
        self.default = default if default is not None else []
        self.by_category = by_category or {}
        self.search_results = search_results
        self.supports_search = search_results is not None
        self.calls: list[tuple] = []

    def is_configured(self) -> bool:
        return self.configured

    def _resolve(self, outcome: Outcome) -> list[Article]:
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)

    async def fetch_headlines(
        self, category: str = "general", page_size: int = 20, country: str = "cn"
    ) -> list[Article]:
        self.calls.append(("headlines", category, page_size, country))
        return self._resolve(self.by_category.get(category, self.default))

    async def search(self, query: str, page_size: int = 20, language: str = "zh") -> list[Article]:
        self.calls.append(("search", query, page_size, language))
        if self.search_results is None:
            return []
        return self._resolve(self.search_results)


def make_articles(count: int, prefix: str = "Story", source: str = "test") -> list[Article]:
    return [
        Article(
            title=f"{prefix} {i}",
            url=f"https://news.example.com/{prefix.lower()}/{i}",
            source=source,
            published_at="2026-10-19T08:00:00+08:00",
        )
        for i in range(count)
    ]


@pytest.fixture
def articles():
    """Factory for lists of valid articles."""
    return make_articles


@pytest.fixture
def provider_factory():
    """Factory for scriptable news providers."""
    return FakeNewsProvider


@pytest.fixture
def clock() -> FakeClock:
    """Clock pinned to a weekday morning in UTC+8."""
    return FakeClock(datetime(2026, 10, 19, 8, 30, tzinfo=BEIJING))


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "daybrief.db"


@pytest.fixture
def cache(db_path: Path, clock: FakeClock) -> TimeWindowedCacheStore:
    """Windowed cache over a throwaway SQLite file."""
    return TimeWindowedCacheStore(SqliteKeyValueStore(db_path), clock=clock)


@pytest.fixture
def resolver_factory():
    """Build a resolver from stored settings with an empty environment."""

    def build(**keys: str) -> ConfigResolver:
        return ConfigResolver(MemorySettingsStore(keys), environ={})

    return build
