"""Core domain entities."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class ProviderFamily(str, Enum):
    """Group of providers that can stand in for each other."""

    DOMESTIC = "domestic"
    INTERNATIONAL = "international"
    WEATHER = "weather"


class RequestKind(str, Enum):
    """Kind of logical news request routed through a fallback chain."""

    HEADLINES = "headlines"
    CATEGORY = "category"
    SEARCH = "search"


class ReportType(str, Enum):
    """Daily digest flavour."""

    MORNING = "morning"
    EVENING = "evening"


@dataclass(frozen=True)
class Article:
    """Normalized news article."""

    title: str
    url: str
    description: str = ""
    image_url: Optional[str] = None
    published_at: str = ""
    source: str = "unknown"
    category: str = ""

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.url:
            raise ValueError("URL cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Article":
        return cls(
            title=data["title"],
            url=data["url"],
            description=data.get("description", ""),
            image_url=data.get("image_url"),
            published_at=data.get("published_at", ""),
            source=data.get("source", "unknown"),
            category=data.get("category", ""),
        )


@dataclass(frozen=True)
class City:
    """Geographic identity of a weather location."""

    name: str
    country: str
    lat: float
    lon: float
    state: str = ""

    @property
    def display_name(self) -> str:
        if self.state:
            return f"{self.name}, {self.state}, {self.country}"
        return f"{self.name}, {self.country}"


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current weather conditions for one city."""

    name: str
    country: str
    lat: float
    lon: float
    temp_c: int
    feels_like_c: int
    humidity_pct: int
    pressure_hpa: int
    description: str
    icon_code: str
    wind_speed: float
    wind_degrees: int
    visibility_km: Optional[float]
    sunrise_ms: int
    sunset_ms: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeatherSnapshot":
        return cls(**data)


@dataclass(frozen=True)
class ForecastEntry:
    """One 3-hour step of the 5-day forecast."""

    timestamp_ms: int
    temp_c: int
    feels_like_c: int
    description: str
    icon_code: str
    humidity_pct: int
    wind_speed: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ForecastEntry":
        return cls(**data)


@dataclass(frozen=True)
class CategoryDescriptor:
    """Entry in a provider's category catalog.

    A ``provider_category_ref`` of None means the provider's default
    headline endpoint serves this category.
    """

    id: str
    label: str
    provider_category_ref: Optional[Union[int, str]] = None


@dataclass
class CacheEntry:
    """Persisted cache row."""

    key: str
    payload: Any
    expires_at: int
    created_at: int

    def is_fresh(self, now_ms: int) -> bool:
        return self.expires_at > now_ms


@dataclass
class CategoryBatch:
    """Result of fetching several categories at once."""

    articles: dict[str, list[Article]] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def total_failure(self) -> bool:
        """True when every requested category failed."""
        return bool(self.failures) and not self.articles

    @property
    def total_articles(self) -> int:
        return sum(len(items) for items in self.articles.values())


@dataclass
class Report:
    """Morning or evening digest."""

    type: ReportType
    date: str
    generated_at: int
    categories: Optional[dict[str, list[Article]]] = None
    headlines: Optional[list[Article]] = None
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def total_news(self) -> int:
        if self.type == ReportType.MORNING:
            return sum(len(items) for items in (self.categories or {}).values())
        return len(self.headlines or [])

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "date": self.date,
            "generated_at": self.generated_at,
            "failures": dict(self.failures),
        }
        if self.categories is not None:
            data["categories"] = {
                name: [article.to_dict() for article in items]
                for name, items in self.categories.items()
            }
        if self.headlines is not None:
            data["headlines"] = [article.to_dict() for article in self.headlines]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Report":
        categories = data.get("categories")
        headlines = data.get("headlines")
        return cls(
            type=ReportType(data["type"]),
            date=data["date"],
            generated_at=data["generated_at"],
            categories=(
                {
                    name: [Article.from_dict(item) for item in items]
                    for name, items in categories.items()
                }
                if categories is not None
                else None
            ),
            headlines=(
                [Article.from_dict(item) for item in headlines]
                if headlines is not None
                else None
            ),
            failures=data.get("failures", {}),
        )
