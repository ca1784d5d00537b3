"""Tests for the OpenWeatherMap adapter."""

from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import pytest

from daybrief.adapters.weather import OpenWeatherSource
from daybrief.core import (
    MalformedResponseError,
    NotConfiguredError,
    ProviderAPIError,
    TransportError,
)

CURRENT = {
    "coord": {"lon": 116.4074, "lat": 39.9042},
    "weather": [{"id": 800, "main": "Clear", "description": "晴", "icon": "01d"}],
    "main": {"temp": 21.6, "feels_like": 20.4, "temp_min": 19.0, "temp_max": 23.0, "pressure": 1016, "humidity": 38},
    "visibility": 10000,
    "wind": {"speed": 3.6, "deg": 340},
    "dt": 1760839200,
    "sys": {"country": "CN", "sunrise": 1760825640, "sunset": 1760865780},
    "name": "Beijing",
    "cod": 200,
}


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def source(resolver_factory, client: AsyncMock) -> OpenWeatherSource:
    return OpenWeatherSource(resolver_factory(weather_api_key="wk"), client)


@pytest.mark.asyncio
async def test_current_by_coords(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test current weather normalization."""
    client.get_json.return_value = CURRENT

    snapshot = await source.current_by_coords(39.9042, 116.4074)

    assert snapshot.name == "Beijing"
    assert snapshot.country == "CN"
    assert snapshot.temp_c == 22
    assert snapshot.feels_like_c == 20
    assert snapshot.humidity_pct == 38
    assert snapshot.pressure_hpa == 1016
    assert snapshot.description == "晴"
    assert snapshot.icon_code == "01d"
    assert snapshot.wind_speed == 3.6
    assert snapshot.wind_degrees == 340
    assert snapshot.visibility_km == 10.0
    assert snapshot.sunrise_ms == 1760825640000
    assert snapshot.sunset_ms == 1760865780000

    url = client.get_json.call_args[0][0]
    params = {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}
    assert urlparse(url).path == "/data/2.5/weather"
    assert params == {"lat": "39.9042", "lon": "116.4074", "units": "metric", "appid": "wk", "lang": "zh_cn"}


@pytest.mark.asyncio
async def test_half_degrees_round_up(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test .5 temperatures round up in snapshots and forecasts."""
    client.get_json.return_value = {**CURRENT, "main": {**CURRENT["main"], "temp": 2.5, "feels_like": 0.5}}

    snapshot = await source.current_by_coords(39.9, 116.4)

    assert (snapshot.temp_c, snapshot.feels_like_c) == (3, 1)

    client.get_json.return_value = {
        "list": [
            {
                "dt": 1760842800,
                "main": {"temp": -2.5, "feels_like": 4.5, "humidity": 60},
                "weather": [{"description": "小雪", "icon": "13n"}],
            },
        ],
    }

    entries = await source.forecast(39.9, 116.4)

    assert (entries[0].temp_c, entries[0].feels_like_c) == (-2, 5)


@pytest.mark.asyncio
async def test_missing_visibility(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test visibility is optional."""
    client.get_json.return_value = {k: v for k, v in CURRENT.items() if k != "visibility"}

    snapshot = await source.current_by_coords(39.9, 116.4)

    assert snapshot.visibility_km is None


@pytest.mark.asyncio
async def test_malformed_current_payload(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test a payload without main readings is rejected."""
    client.get_json.return_value = {k: v for k, v in CURRENT.items() if k != "main"}

    with pytest.raises(MalformedResponseError):
        await source.current_by_coords(39.9, 116.4)


@pytest.mark.asyncio
async def test_error_cod(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test an error code in the body."""
    client.get_json.return_value = {"cod": "429", "message": "quota exceeded"}

    with pytest.raises(ProviderAPIError, match="quota exceeded"):
        await source.current_by_coords(39.9, 116.4)


@pytest.mark.asyncio
async def test_current_by_name_not_found(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test an unknown city name."""
    client.get_json.side_effect = TransportError("OpenWeatherMap HTTP 404: city not found", status=404)

    with pytest.raises(ProviderAPIError, match="City not found: Atlantis"):
        await source.current_by_name("Atlantis")


@pytest.mark.asyncio
async def test_forecast_skips_bad_entries(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test forecast parsing keeps only complete entries."""
    client.get_json.return_value = {
        "cod": "200",
        "list": [
            {
                "dt": 1760842800,
                "main": {"temp": 18.4, "feels_like": 17.5, "humidity": 50},
                "weather": [{"description": "多云", "icon": "03d"}],
                "wind": {"speed": 2.1},
            },
            {"dt": 1760853600, "main": {}, "weather": []},
        ],
    }

    entries = await source.forecast(39.9, 116.4)

    assert len(entries) == 1
    assert entries[0].timestamp_ms == 1760842800000
    assert entries[0].temp_c == 18
    assert entries[0].description == "多云"
    assert entries[0].wind_speed == 2.1


@pytest.mark.asyncio
async def test_search_cities(source: OpenWeatherSource, client: AsyncMock) -> None:
    """Test geocoding results become cities."""
    client.get_json.return_value = [
        {"name": "Suzhou", "lat": 31.3, "lon": 120.6, "country": "CN", "state": "Jiangsu"},
        {"name": "Nowhere", "country": "CN"},
    ]

    cities = await source.search_cities("Suzhou")

    assert len(cities) == 1
    assert cities[0].display_name == "Suzhou, Jiangsu, CN"
    url = client.get_json.call_args[0][0]
    assert urlparse(url).path == "/geo/1.0/direct"
    assert "limit=5" in url


@pytest.mark.asyncio
async def test_not_configured(resolver_factory, client: AsyncMock) -> None:
    """Test a missing key fails before any request."""
    source = OpenWeatherSource(resolver_factory(), client)

    assert not source.is_configured()
    with pytest.raises(NotConfiguredError):
        await source.current_by_coords(39.9, 116.4)
    client.get_json.assert_not_called()
