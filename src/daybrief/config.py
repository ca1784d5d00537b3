"""Configuration management."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml

from daybrief.core.interfaces import SettingsStore

logger = logging.getLogger(__name__)


class ProviderKey(str, Enum):
    """Settings keys holding provider API keys."""

    TIANAPI = "tianapi_key"
    JISUAPI = "jisuapi_key"
    NEWS_API = "news_api_key"
    WEATHER = "weather_api_key"


# Static defaults come from the environment
ENV_DEFAULTS = {
    ProviderKey.TIANAPI: "TIANAPI_KEY",
    ProviderKey.JISUAPI: "JISUAPI_KEY",
    ProviderKey.NEWS_API: "NEWS_API_KEY",
    ProviderKey.WEATHER: "WEATHER_API_KEY",
}


@dataclass
class NetworkConfig:
    """Transport settings."""
    platform: str = "desktop"
    timeout: float = 30.0


@dataclass
class NewsConfig:
    """News provider settings."""
    default_locale: str = "cn"
    page_size: int = 20
    tianapi_min_gap: float = 0.38
    catalog_ttl_hours: float = 24.0
    domestic_locales: list[str] = field(default_factory=lambda: ["cn", "zh"])


@dataclass
class WeatherConfig:
    """Weather provider settings."""
    default_city: dict = field(default_factory=lambda: {
        "name": "Beijing",
        "country": "CN",
        "lat": 39.9042,
        "lon": 116.4074,
    })
    lang: str = "zh_cn"


@dataclass
class ReportConfig:
    """Morning/evening report settings."""
    morning_categories: list[str] = field(default_factory=lambda: ["general", "technology", "business"])
    per_category: int = 3
    evening_page_size: int = 10
    evening_limit: int = 5


@dataclass
class PathsConfig:
    """Path settings."""
    cache_db: Path = Path.home() / ".daybrief" / "cache.db"
    settings_file: Path = Path.home() / ".daybrief" / "settings.yaml"


@dataclass
class Settings:
    """Application settings."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    news: NewsConfig = field(default_factory=NewsConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def platform(self) -> str:
        return self.network.platform

    @property
    def cache_db(self) -> Path:
        return self.paths.cache_db

    @property
    def settings_file(self) -> Path:
        return self.paths.settings_file


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config."""
    config = load_config(config_path)
    settings = Settings()

    if "network" in config:
        for key, value in config["network"].items():
            setattr(settings.network, key, value)

    if "news" in config:
        for key, value in config["news"].items():
            setattr(settings.news, key, value)

    if "weather" in config:
        for key, value in config["weather"].items():
            setattr(settings.weather, key, value)

    if "report" in config:
        for key, value in config["report"].items():
            setattr(settings.report, key, value)

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value).expanduser())

    return settings


class ConfigResolver:
    """Resolve provider API keys: settings store first, environment second.

    Never raises. A None result means the provider is unconfigured.
    """

    def __init__(
        self,
        store: Optional[SettingsStore] = None,
        environ: Optional[dict[str, str]] = None,
    ) -> None:
        self.store = store
        self.environ = environ if environ is not None else os.environ

    def resolve(self, key: ProviderKey) -> Optional[str]:
        if self.store is not None:
            try:
                value = self.store.get(key.value)
            except Exception as e:
                logger.warning("Could not read setting %s: %s", key.value, e)
                value = None
            if value is not None and str(value).strip():
                return str(value).strip()

        env_name = ENV_DEFAULTS.get(key)
        if env_name:
            value = self.environ.get(env_name)
            if value is not None and value.strip():
                return value.strip()
        return None

    def is_configured(self, key: ProviderKey) -> bool:
        return bool(self.resolve(key))
