"""News and weather acquisition with provider fallback, throttling and windowed caching."""

__version__ = "0.1.0"
