"""OpenWeatherMap weather source."""

import logging
import math
from typing import Any
from urllib.parse import urlencode

from daybrief.adapters.http import JsonClient
from daybrief.config import ConfigResolver, ProviderKey
from daybrief.core.entities import City, ForecastEntry, WeatherSnapshot
from daybrief.core.errors import (
    MalformedResponseError,
    NotConfiguredError,
    ProviderAPIError,
    TransportError,
)
from daybrief.core.interfaces import WeatherProvider

logger = logging.getLogger(__name__)

OPENWEATHER_BASE = "https://api.openweathermap.org"


def _round(value: Any) -> int:
    """Round half up, so 2.5 becomes 3 and -2.5 becomes -2."""
    return math.floor(float(value) + 0.5)


class OpenWeatherSource(WeatherProvider):
    """Current weather, forecast and geocoding from OpenWeatherMap."""

    name = "OpenWeatherMap"

    def __init__(
        self,
        resolver: ConfigResolver,
        client: JsonClient,
        lang: str = "zh_cn",
        base_url: str = OPENWEATHER_BASE,
    ) -> None:
        self.resolver = resolver
        self.client = client
        self.lang = lang
        self.base_url = base_url

    def is_configured(self) -> bool:
        return self.resolver.is_configured(ProviderKey.WEATHER)

    def _url(self, path: str, **params: Any) -> str:
        key = self.resolver.resolve(ProviderKey.WEATHER)
        if not key:
            raise NotConfiguredError("Weather API key is not configured. Please configure it in settings.")
        params.update({"appid": key, "lang": self.lang})
        return f"{self.base_url}{path}?{urlencode(params)}"

    async def current_by_coords(self, lat: float, lon: float) -> WeatherSnapshot:
        url = self._url("/data/2.5/weather", lat=lat, lon=lon, units="metric")
        data = await self.client.get_json(url)
        return self._to_snapshot(data)

    async def current_by_name(self, city_name: str) -> WeatherSnapshot:
        url = self._url("/data/2.5/weather", q=city_name, units="metric")
        try:
            data = await self.client.get_json(url)
        except TransportError as e:
            if e.status == 404:
                raise ProviderAPIError(
                    f"City not found: {city_name}", code=404, status=404, provider=self.name
                ) from e
            raise
        return self._to_snapshot(data)

    async def forecast(self, lat: float, lon: float) -> list[ForecastEntry]:
        url = self._url("/data/2.5/forecast", lat=lat, lon=lon, units="metric")
        data = await self.client.get_json(url)

        items = data.get("list") if isinstance(data, dict) else None
        if not isinstance(items, list):
            logger.warning("OpenWeatherMap forecast payload has no list")
            return []

        entries = []
        for item in items:
            try:
                weather = item["weather"][0]
                entries.append(ForecastEntry(
                    timestamp_ms=int(item["dt"]) * 1000,
                    temp_c=_round(item["main"]["temp"]),
                    feels_like_c=_round(item["main"]["feels_like"]),
                    description=weather.get("description", ""),
                    icon_code=weather.get("icon", ""),
                    humidity_pct=int(item["main"].get("humidity", 0)),
                    wind_speed=float((item.get("wind") or {}).get("speed") or 0),
                ))
            except (KeyError, IndexError, TypeError, ValueError):
                continue
        return entries

    async def search_cities(self, query: str) -> list[City]:
        if not query or not query.strip():
            return []

        url = self._url("/geo/1.0/direct", q=query.strip(), limit=5)
        data = await self.client.get_json(url)
        if not isinstance(data, list):
            return []

        cities = []
        for item in data:
            if not isinstance(item, dict) or item.get("lat") is None or item.get("lon") is None:
                continue
            cities.append(City(
                name=item.get("name", ""),
                country=item.get("country", ""),
                lat=float(item["lat"]),
                lon=float(item["lon"]),
                state=item.get("state") or "",
            ))
        return cities

    def _to_snapshot(self, data: Any) -> WeatherSnapshot:
        if not isinstance(data, dict):
            raise MalformedResponseError("Weather payload is not an object", provider=self.name)

        cod = data.get("cod")
        if cod is not None and str(cod) != "200":
            raise ProviderAPIError(
                f"OpenWeatherMap error: {data.get('message') or cod}", code=cod, provider=self.name
            )

        try:
            main = data["main"]
            sys_info = data["sys"]
            weather = data["weather"][0]
            coord = data["coord"]
            wind = data.get("wind") or {}
            visibility = data.get("visibility")

            return WeatherSnapshot(
                name=data.get("name", ""),
                country=sys_info.get("country", ""),
                lat=float(coord["lat"]),
                lon=float(coord["lon"]),
                temp_c=_round(main["temp"]),
                feels_like_c=_round(main["feels_like"]),
                humidity_pct=int(main.get("humidity", 0)),
                pressure_hpa=int(main.get("pressure", 0)),
                description=weather.get("description", ""),
                icon_code=weather.get("icon", ""),
                wind_speed=float(wind.get("speed") or 0),
                wind_degrees=int(wind.get("deg") or 0),
                visibility_km=round(visibility / 1000, 1) if visibility else None,
                sunrise_ms=int(sys_info["sunrise"]) * 1000,
                sunset_ms=int(sys_info["sunset"]) * 1000,
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"Unexpected weather payload: {e}", provider=self.name
            ) from e
