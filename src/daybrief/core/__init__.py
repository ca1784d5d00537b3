"""Core domain layer."""

from daybrief.core.cache_store import TimeWindowedCacheStore
from daybrief.core.catalog import CatalogCache
from daybrief.core.entities import (
    Article,
    CacheEntry,
    CategoryBatch,
    CategoryDescriptor,
    City,
    ForecastEntry,
    ProviderFamily,
    Report,
    ReportType,
    RequestKind,
    WeatherSnapshot,
)
from daybrief.core.errors import (
    AggregateFailureError,
    AuthError,
    DaybriefError,
    MalformedResponseError,
    NotConfiguredError,
    ProviderAPIError,
    ProviderError,
    TransportError,
)
from daybrief.core.fallback import FallbackOrchestrator
from daybrief.core.interfaces import (
    KeyValueStore,
    NewsProvider,
    SettingsStore,
    Transport,
    TransportResponse,
    WeatherProvider,
)
from daybrief.core.rate_limit import RateLimitedGateway, RateLimitWatermark

__all__ = [
    "Article",
    "CacheEntry",
    "CategoryBatch",
    "CategoryDescriptor",
    "City",
    "ForecastEntry",
    "ProviderFamily",
    "Report",
    "ReportType",
    "RequestKind",
    "WeatherSnapshot",
    "AggregateFailureError",
    "AuthError",
    "DaybriefError",
    "MalformedResponseError",
    "NotConfiguredError",
    "ProviderAPIError",
    "ProviderError",
    "TransportError",
    "KeyValueStore",
    "NewsProvider",
    "SettingsStore",
    "Transport",
    "TransportResponse",
    "WeatherProvider",
    "TimeWindowedCacheStore",
    "CatalogCache",
    "FallbackOrchestrator",
    "RateLimitedGateway",
    "RateLimitWatermark",
]
