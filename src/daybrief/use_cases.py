"""Business logic use cases."""

import asyncio
import logging
from typing import Any, Optional, Sequence

from daybrief.adapters.news.newsapi_source import CATEGORIES as INTERNATIONAL_CATEGORIES
from daybrief.adapters.news.tianapi_source import TianApiSource
from daybrief.config import ReportConfig
from daybrief.core import (
    Article,
    CategoryBatch,
    CategoryDescriptor,
    City,
    DaybriefError,
    FallbackOrchestrator,
    ForecastEntry,
    NotConfiguredError,
    ProviderFamily,
    Report,
    ReportType,
    RequestKind,
    TimeWindowedCacheStore,
    WeatherProvider,
    WeatherSnapshot,
)
from daybrief.core.windows import day_window, fingerprint, news_window, weather_fingerprint

logger = logging.getLogger(__name__)


def _encode_articles(articles: list[Article]) -> list[dict[str, Any]]:
    return [article.to_dict() for article in articles]


def _decode_articles(payload: Any) -> list[Article]:
    if not isinstance(payload, list):
        raise ValueError("cached articles payload is not a list")
    return [Article.from_dict(item) for item in payload]


class NewsService:
    """News requests: windowed cache in front of the provider fallback chain."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        cache: TimeWindowedCacheStore,
        catalog_source: Optional[TianApiSource] = None,
        default_locale: str = "cn",
    ) -> None:
        self.orchestrator = orchestrator
        self.cache = cache
        self.catalog_source = catalog_source
        self.default_locale = default_locale

    def is_domestic_configured(self) -> bool:
        return self.orchestrator.family_configured(ProviderFamily.DOMESTIC)

    def is_international_configured(self) -> bool:
        return self.orchestrator.family_configured(ProviderFamily.INTERNATIONAL)

    def is_configured(self) -> bool:
        return self.is_domestic_configured() or self.is_international_configured()

    async def _windowed(self, kind: str, params: dict[str, Any], loader, skip_cache: bool) -> list[Article]:
        window = news_window(self.cache.clock())
        key = fingerprint(f"news_{kind}", params, window)
        return await self.cache.fetch_through(
            key, window, loader, _encode_articles, _decode_articles, skip_cache=skip_cache
        )

    async def headlines(
        self,
        locale: Optional[str] = None,
        category: str = "general",
        page_size: int = 20,
        family: Optional[ProviderFamily] = None,
        skip_cache: bool = False,
    ) -> list[Article]:
        """Top headlines for a locale, falling back across providers."""
        locale = locale or self.default_locale
        params = {
            "locale": locale,
            "category": category,
            "page_size": page_size,
            "family": family.value if family else None,
        }

        async def load() -> list[Article]:
            return await self.orchestrator.run(
                RequestKind.HEADLINES,
                lambda provider: provider.fetch_headlines(category, page_size, locale),
                locale=locale,
                family=family,
            )

        return await self._windowed(RequestKind.HEADLINES.value, params, load, skip_cache)

    async def by_category(
        self,
        category: str,
        locale: Optional[str] = None,
        page_size: int = 10,
        family: Optional[ProviderFamily] = None,
        skip_cache: bool = False,
    ) -> list[Article]:
        """News for one generic category such as ``technology``."""
        locale = locale or self.default_locale
        params = {
            "locale": locale,
            "category": category,
            "page_size": page_size,
            "family": family.value if family else None,
        }

        async def load() -> list[Article]:
            return await self.orchestrator.run(
                RequestKind.CATEGORY,
                lambda provider: provider.fetch_headlines(category, page_size, locale),
                locale=locale,
                family=family,
            )

        return await self._windowed(RequestKind.CATEGORY.value, params, load, skip_cache)

    async def search(
        self,
        query: str,
        language: str = "zh",
        page_size: int = 20,
        skip_cache: bool = False,
    ) -> list[Article]:
        """Search articles; a blank query returns nothing without any request."""
        if not query or not query.strip():
            return []
        query = query.strip()
        params = {"query": query, "language": language, "page_size": page_size}

        async def load() -> list[Article]:
            return await self.orchestrator.run(
                RequestKind.SEARCH,
                lambda provider: provider.search(query, page_size, language),
                locale=language,
            )

        return await self._windowed(RequestKind.SEARCH.value, params, load, skip_cache)

    async def catalog_news(
        self, category_id: str, page_size: int = 20, skip_cache: bool = False
    ) -> list[Article]:
        """Domestic news for a catalog id from ``categories()``; no fallback."""
        source = self.catalog_source
        if source is None or not source.is_configured():
            raise NotConfiguredError("Domestic news API is not configured. Configure a TianAPI key in settings.")

        params = {"category_id": category_id, "page_size": page_size}
        return await self._windowed(
            "catalog",
            params,
            lambda: source.fetch_by_category_id(category_id, page_size),
            skip_cache,
        )

    async def categories(self) -> list[CategoryDescriptor]:
        """Domestic category catalog, discovered from the provider when possible."""
        if self.catalog_source is None:
            return []
        return await self.catalog_source.list_categories()

    def international_categories(self) -> list[CategoryDescriptor]:
        return list(INTERNATIONAL_CATEGORIES)

    async def fetch_many(
        self,
        categories: Sequence[str],
        locale: Optional[str] = None,
        per_category: int = 3,
    ) -> CategoryBatch:
        """Fetch several categories concurrently, reporting failures per category."""
        if not self.is_configured():
            raise NotConfiguredError(
                "No news API key is configured. Configure a domestic or international news provider in settings."
            )

        results = await asyncio.gather(
            *(self.by_category(category, locale, per_category) for category in categories),
            return_exceptions=True,
        )

        batch = CategoryBatch()
        for category, result in zip(categories, results):
            if isinstance(result, DaybriefError):
                logger.warning("Category %s failed: %s", category, result)
                batch.failures[category] = str(result)
            elif isinstance(result, BaseException):
                raise result
            elif result:
                batch.articles[category] = result
        return batch


class WeatherService:
    """Weather requests cached per city per calendar day."""

    def __init__(
        self,
        provider: WeatherProvider,
        cache: TimeWindowedCacheStore,
        default_city: City,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.default_city = default_city

    def is_configured(self) -> bool:
        return self.provider.is_configured()

    def _require_key(self) -> None:
        if not self.provider.is_configured():
            raise NotConfiguredError("Weather API key is not configured. Please configure it in settings.")

    async def current(self, city: Optional[City] = None, skip_cache: bool = False) -> WeatherSnapshot:
        """Current weather; the same city is fetched at most once per day."""
        self._require_key()
        target = city or self.default_city
        window = day_window(self.cache.clock())
        key = weather_fingerprint("current", target.lat, target.lon, window)

        return await self.cache.fetch_through(
            key,
            window,
            lambda: self.provider.current_by_coords(target.lat, target.lon),
            lambda snapshot: snapshot.to_dict(),
            WeatherSnapshot.from_dict,
            skip_cache=skip_cache,
        )

    async def forecast(self, city: Optional[City] = None, skip_cache: bool = False) -> list[ForecastEntry]:
        """Five day forecast, cached like ``current``."""
        self._require_key()
        target = city or self.default_city
        window = day_window(self.cache.clock())
        key = weather_fingerprint("forecast", target.lat, target.lon, window)

        return await self.cache.fetch_through(
            key,
            window,
            lambda: self.provider.forecast(target.lat, target.lon),
            lambda entries: [entry.to_dict() for entry in entries],
            lambda payload: [ForecastEntry.from_dict(item) for item in payload],
            skip_cache=skip_cache,
        )

    async def current_by_name(self, city_name: str) -> WeatherSnapshot:
        self._require_key()
        return await self.provider.current_by_name(city_name)

    async def search_cities(self, query: str) -> list[City]:
        """City lookup is always live."""
        if not query or not query.strip():
            return []
        self._require_key()
        return await self.provider.search_cities(query)


class ReportService:
    """Morning and evening digests, generated once per calendar day."""

    def __init__(
        self,
        news: NewsService,
        cache: TimeWindowedCacheStore,
        config: Optional[ReportConfig] = None,
    ) -> None:
        self.news = news
        self.cache = cache
        self.config = config or ReportConfig()

    async def _cached_report(self, report_type: ReportType, skip_cache: bool) -> tuple[str, Optional[Report]]:
        window = day_window(self.cache.clock())
        key = f"report_{report_type.value}_{window.label}"
        if skip_cache:
            return key, None

        payload = await self.cache.get(key)
        if payload is None:
            return key, None
        try:
            return key, Report.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding undecodable report %s: %s", key, e)
            return key, None

    async def _store(self, key: str, report: Report) -> None:
        # A report where every fetch failed is not cached so the next call retries
        if report.failures and report.total_news == 0:
            logger.warning("Not caching %s report: every fetch failed", report.type.value)
            return
        if report.failures:
            logger.warning(
                "Caching partial %s report; failed: %s",
                report.type.value, ", ".join(sorted(report.failures)),
            )
        window = day_window(self.cache.clock())
        await self.cache.put(key, report.to_dict(), window.expires_at_ms)

    def morning_categories(self, interests: Sequence[str] = ()) -> list[str]:
        categories = list(self.config.morning_categories)
        if "sports" in interests and "sports" not in categories:
            categories.insert(1, "sports")
        return categories

    async def morning(self, interests: Sequence[str] = (), skip_cache: bool = False) -> Report:
        """Today's morning report: a few articles per category."""
        key, cached = await self._cached_report(ReportType.MORNING, skip_cache)
        if cached is not None:
            return cached

        batch = await self.news.fetch_many(
            self.morning_categories(interests),
            locale=self.news.default_locale,
            per_category=self.config.per_category,
        )
        now = self.cache.clock()
        report = Report(
            type=ReportType.MORNING,
            date=now.date().isoformat(),
            generated_at=self.cache.now_ms(),
            categories=batch.articles,
            failures=batch.failures,
        )
        await self._store(key, report)
        return report

    async def evening(self, skip_cache: bool = False) -> Report:
        """Today's evening report: the top domestic headlines."""
        key, cached = await self._cached_report(ReportType.EVENING, skip_cache)
        if cached is not None:
            return cached

        failures: dict[str, str] = {}
        try:
            headlines = await self.news.headlines(
                locale=self.news.default_locale,
                page_size=self.config.evening_page_size,
                family=ProviderFamily.DOMESTIC,
            )
        except NotConfiguredError:
            raise
        except DaybriefError as e:
            logger.warning("Evening report headlines failed: %s", e)
            headlines = []
            failures["headlines"] = str(e)

        now = self.cache.clock()
        report = Report(
            type=ReportType.EVENING,
            date=now.date().isoformat(),
            generated_at=self.cache.now_ms(),
            headlines=headlines[: self.config.evening_limit],
            failures=failures,
        )
        await self._store(key, report)
        return report
