"""CLI entry point for daybrief."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from daybrief.adapters.http import JsonClient, Platform, create_transport
from daybrief.adapters.news import JisuApiSource, NewsApiSource, TianApiSource
from daybrief.adapters.storage import SqliteKeyValueStore, YamlSettingsStore
from daybrief.adapters.weather import OpenWeatherSource
from daybrief.config import ConfigResolver, ProviderKey, Settings, get_settings
from daybrief.core import (
    Article,
    CatalogCache,
    City,
    DaybriefError,
    FallbackOrchestrator,
    NotConfiguredError,
    ProviderFamily,
    RateLimitedGateway,
    RateLimitWatermark,
    Report,
    ReportType,
    TimeWindowedCacheStore,
)
from daybrief.core.interfaces import Transport
from daybrief.use_cases import NewsService, ReportService, WeatherService

app = typer.Typer(help="Daily news and weather from configured providers.")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", help="Path to config.yaml")


@dataclass
class Services:
    """Wired application services."""

    news: NewsService
    weather: WeatherService
    reports: ReportService
    resolver: ConfigResolver


def build_services(
    settings: Settings,
    resolver: Optional[ConfigResolver] = None,
    transport: Optional[Transport] = None,
) -> Services:
    """Wire providers, gateway, catalog and cache from settings."""
    if resolver is None:
        resolver = ConfigResolver(YamlSettingsStore(settings.settings_file))
    if transport is None:
        transport = create_transport(Platform(settings.platform), settings.network.timeout)

    cache = TimeWindowedCacheStore(SqliteKeyValueStore(settings.cache_db))
    catalog = CatalogCache(ttl=settings.news.catalog_ttl_hours * 3600)

    tian_client = JsonClient(transport, provider=TianApiSource.name)
    tian_gateway = RateLimitedGateway(
        tian_client.get_json, RateLimitWatermark(settings.news.tianapi_min_gap)
    )
    tianapi = TianApiSource(resolver, tian_gateway, catalog)
    jisuapi = JisuApiSource(resolver, JsonClient(transport, provider=JisuApiSource.name))
    newsapi = NewsApiSource(resolver, JsonClient(transport, provider=NewsApiSource.name))

    orchestrator = FallbackOrchestrator(
        [tianapi, jisuapi, newsapi], domestic_locales=settings.news.domestic_locales
    )
    news = NewsService(orchestrator, cache, catalog_source=tianapi, default_locale=settings.news.default_locale)

    weather_provider = OpenWeatherSource(
        resolver,
        JsonClient(transport, provider=OpenWeatherSource.name),
        lang=settings.weather.lang,
    )
    default_city = City(**settings.weather.default_city)
    weather = WeatherService(weather_provider, cache, default_city)

    reports = ReportService(news, cache, settings.report)
    return Services(news=news, weather=weather, reports=reports, resolver=resolver)


def _setup(config: Path, debug: bool) -> Services:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return build_services(get_settings(config))


def _run(coro):
    """Run a coroutine, mapping package errors to exit codes."""
    try:
        return asyncio.run(coro)
    except NotConfiguredError as e:
        typer.echo(f"⚙️  {e}", err=True)
        raise typer.Exit(code=2)
    except DaybriefError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)


def _print_articles(articles: list[Article]) -> None:
    if not articles:
        print("  (no articles)")
        return
    for i, article in enumerate(articles, 1):
        print(f"  {i:2d}. {article.title}")
        print(f"      └─ {article.source} · {article.published_at}")
        print(f"      └─ {article.url}")


def _print_report(report: Report) -> None:
    emoji = "🌅" if report.type == ReportType.MORNING else "🌙"
    print(f"\n{emoji} {report.type.value.capitalize()} report: {report.date}")
    print("=" * 70)

    if report.type == ReportType.MORNING:
        for category, articles in (report.categories or {}).items():
            print(f"\n📂 {category}")
            _print_articles(articles)
    else:
        _print_articles(report.headlines or [])

    if report.failures:
        print("\n⚠️  Failed:")
        for name, reason in report.failures.items():
            print(f"  • {name}: {reason}")
    print(f"\nTotal: {report.total_news}")


def _family(source: Optional[str]) -> Optional[ProviderFamily]:
    return ProviderFamily(source) if source else None


@app.command()
def headlines(
    locale: str = typer.Option("cn", help="Target locale, e.g. cn or us"),
    category: str = "general",
    page_size: int = 20,
    source: Optional[str] = typer.Option(None, help="Restrict to 'domestic' or 'international'"),
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Show top headlines."""
    services = _setup(config, debug)
    articles = _run(services.news.headlines(
        locale=locale, category=category, page_size=page_size,
        family=_family(source), skip_cache=refresh,
    ))
    print(f"\n📰 Headlines ({locale}/{category})")
    _print_articles(articles)


@app.command()
def category(
    name: str,
    locale: str = typer.Option("cn", help="Target locale"),
    page_size: int = 10,
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Show news for a generic category (technology, business, ...)."""
    services = _setup(config, debug)
    articles = _run(services.news.by_category(name, locale=locale, page_size=page_size, skip_cache=refresh))
    print(f"\n📂 {name}")
    _print_articles(articles)


@app.command()
def catalog(
    category_id: str,
    page_size: int = 20,
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Show domestic news for a catalog id listed by `categories`."""
    services = _setup(config, debug)
    articles = _run(services.news.catalog_news(category_id, page_size=page_size, skip_cache=refresh))
    print(f"\n📂 {category_id}")
    _print_articles(articles)


@app.command()
def categories(
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """List domestic and international categories."""
    services = _setup(config, debug)
    domestic = _run(services.news.categories())

    print("\n🇨🇳 Domestic:")
    for descriptor in domestic:
        print(f"  • {descriptor.id:<12} {descriptor.label}")
    print("\n🌍 International:")
    for descriptor in services.news.international_categories():
        print(f"  • {descriptor.id:<12} {descriptor.label}")


@app.command()
def search(
    query: str,
    language: str = "zh",
    page_size: int = 20,
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Search news."""
    services = _setup(config, debug)
    articles = _run(services.news.search(query, language=language, page_size=page_size, skip_cache=refresh))
    print(f"\n🔍 {query}")
    _print_articles(articles)


def _city(lat: Optional[float], lon: Optional[float], name: str) -> Optional[City]:
    if lat is None or lon is None:
        return None
    return City(name=name, country="", lat=lat, lon=lon)


@app.command()
def weather(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    city: Optional[str] = typer.Option(None, help="Look up by city name (uncached)"),
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Show current weather."""
    services = _setup(config, debug)
    if city:
        snapshot = _run(services.weather.current_by_name(city))
    else:
        snapshot = _run(services.weather.current(_city(lat, lon, "custom"), skip_cache=refresh))

    sunrise = datetime.fromtimestamp(snapshot.sunrise_ms / 1000).strftime("%H:%M")
    sunset = datetime.fromtimestamp(snapshot.sunset_ms / 1000).strftime("%H:%M")
    print(f"\n🌤️  {snapshot.name}, {snapshot.country}: {snapshot.description}")
    print(f"  • Temperature: {snapshot.temp_c}°C (feels like {snapshot.feels_like_c}°C)")
    print(f"  • Humidity: {snapshot.humidity_pct}%  Pressure: {snapshot.pressure_hpa} hPa")
    print(f"  • Wind: {snapshot.wind_speed} m/s, {snapshot.wind_degrees}°")
    if snapshot.visibility_km is not None:
        print(f"  • Visibility: {snapshot.visibility_km} km")
    print(f"  • Sunrise {sunrise}  Sunset {sunset}")


@app.command()
def forecast(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Show the 5-day forecast."""
    services = _setup(config, debug)
    entries = _run(services.weather.forecast(_city(lat, lon, "custom"), skip_cache=refresh))
    for entry in entries:
        moment = datetime.fromtimestamp(entry.timestamp_ms / 1000).strftime("%m-%d %H:%M")
        print(f"  {moment}  {entry.temp_c:>3}°C  {entry.description}")


@app.command()
def cities(
    query: str,
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Search cities by name."""
    services = _setup(config, debug)
    for found in _run(services.weather.search_cities(query)):
        print(f"  • {found.display_name}  ({found.lat}, {found.lon})")


@app.command()
def report(
    kind: ReportType = typer.Argument(ReportType.MORNING),
    interest: list[str] = typer.Option([], "--interest", help="User interests, e.g. sports"),
    refresh: bool = typer.Option(False, "--refresh", help="Regenerate today's report"),
    debug: bool = False,
    config: Path = CONFIG_OPTION,
) -> None:
    """Show today's morning or evening report."""
    services = _setup(config, debug)
    if kind == ReportType.MORNING:
        result = _run(services.reports.morning(interests=interest, skip_cache=refresh))
    else:
        result = _run(services.reports.evening(skip_cache=refresh))
    _print_report(result)


@app.command("config-set")
def config_set(
    key: ProviderKey,
    value: str = typer.Argument("", help="Empty value removes the setting"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Store a provider API key in the settings file."""
    settings = get_settings(config)
    YamlSettingsStore(settings.settings_file).set(key.value, value or None)
    print(f"✓ {key.value} {'saved' if value else 'removed'} ({settings.settings_file})")


@app.command()
def status(config: Path = CONFIG_OPTION) -> None:
    """Show which provider families are configured."""
    settings = get_settings(config)
    services = build_services(settings)
    stored = YamlSettingsStore(settings.settings_file).all()

    print("\n🔑 Keys:")
    for key in ProviderKey:
        if not services.resolver.is_configured(key):
            print(f"  ✗ {key.value}")
            continue
        origin = "settings" if str(stored.get(key.value) or "").strip() else "env"
        print(f"  ✓ {key.value} ({origin})")

    print("\n📡 Providers:")
    print(f"  {'✓' if services.news.is_domestic_configured() else '✗'} Domestic news")
    print(f"  {'✓' if services.news.is_international_configured() else '✗'} International news")
    print(f"  {'✓' if services.weather.is_configured() else '✗'} Weather")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
