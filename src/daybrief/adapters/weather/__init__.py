"""Weather provider adapters."""

from daybrief.adapters.weather.openweather_source import OpenWeatherSource

__all__ = ["OpenWeatherSource"]
