"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from daybrief.core.entities import (
    Article,
    CategoryDescriptor,
    City,
    ForecastEntry,
    ProviderFamily,
    RequestKind,
    WeatherSnapshot,
)


@dataclass
class TransportResponse:
    """Outcome of a single HTTP exchange.

    ``data`` holds the decoded JSON body when ``success`` is true; otherwise
    ``status`` and ``error_body`` describe the failure.
    """

    success: bool
    data: Any = None
    status: Optional[int] = None
    error_body: str = ""


class Transport(ABC):
    """Interface for the host-specific HTTP fetcher."""

    @abstractmethod
    async def fetch_url(self, url: str) -> TransportResponse:
        """GET a URL and decode its JSON body."""
        pass

    @abstractmethod
    async def post_json(self, url: str, payload: dict[str, Any]) -> TransportResponse:
        """POST a JSON payload and decode the JSON response."""
        pass


class KeyValueStore(ABC):
    """Interface for the SQL-flavoured persistent store backing the cache."""

    @abstractmethod
    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a selector and return rows as dicts."""
        pass

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        """Run a mutation."""
        pass


class SettingsStore(ABC):
    """Interface for mutable per-installation settings."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return a stored value or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: Optional[str]) -> None:
        """Store a value; None removes it."""
        pass


class NewsProvider(ABC):
    """Interface for news provider adapters."""

    name: str = ""
    family: ProviderFamily = ProviderFamily.INTERNATIONAL
    max_page_size: int = 50
    supports_search: bool = False

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether an API key is available."""
        pass

    @abstractmethod
    async def fetch_headlines(
        self, category: str = "general", page_size: int = 20, country: str = "cn"
    ) -> list[Article]:
        """Fetch headlines for a generic category."""
        pass

    async def search(self, query: str, page_size: int = 20, language: str = "zh") -> list[Article]:
        """Search articles; providers without search return an empty list."""
        return []

    async def list_categories(self) -> list[CategoryDescriptor]:
        """Category catalog offered by this provider."""
        return []

    def supports(self, kind: RequestKind) -> bool:
        if kind == RequestKind.SEARCH:
            return self.supports_search
        return True

    def clamp_page_size(self, page_size: int) -> int:
        return max(1, min(page_size, self.max_page_size))


class WeatherProvider(ABC):
    """Interface for weather provider adapters."""

    name: str = ""

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether an API key is available."""
        pass

    @abstractmethod
    async def current_by_coords(self, lat: float, lon: float) -> WeatherSnapshot:
        """Current conditions at coordinates."""
        pass

    @abstractmethod
    async def current_by_name(self, city_name: str) -> WeatherSnapshot:
        """Current conditions for a city name."""
        pass

    @abstractmethod
    async def forecast(self, lat: float, lon: float) -> list[ForecastEntry]:
        """Five day forecast at coordinates."""
        pass

    @abstractmethod
    async def search_cities(self, query: str) -> list[City]:
        """Geocode a free-text city query."""
        pass
