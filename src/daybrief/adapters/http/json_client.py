"""JSON request helper that turns failed exchanges into typed errors."""

import json
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from daybrief.core.errors import AuthError, TransportError
from daybrief.core.interfaces import Transport, TransportResponse

logger = logging.getLogger(__name__)

SECRET_PARAMS = {"key", "appkey", "apikey", "appid"}


def redact_url(url: str) -> str:
    """Mask API keys in a URL before it is logged."""
    parts = urlparse(url)
    query = [
        (name, "***" if name.lower() in SECRET_PARAMS else value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunparse(parts._replace(query=urlencode(query, safe="*")))


def _error_detail(body: str) -> str:
    """Prefer the provider's ``message`` field over the raw body."""
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        for field_name in ("message", "msg", "error"):
            if data.get(field_name):
                return str(data[field_name])
    return body


class JsonClient:
    """GET/POST JSON through a transport, one instance per provider."""

    def __init__(self, transport: Transport, provider: Optional[str] = None) -> None:
        self.transport = transport
        self.provider = provider

    async def get_json(self, url: str) -> Any:
        logger.debug("%s GET %s", self.provider or "http", redact_url(url))
        result = await self.transport.fetch_url(url)
        return self._unwrap(result)

    async def post_json(self, url: str, payload: dict[str, Any]) -> Any:
        logger.debug("%s POST %s", self.provider or "http", redact_url(url))
        result = await self.transport.post_json(url, payload)
        return self._unwrap(result)

    def _unwrap(self, result: TransportResponse) -> Any:
        if result.success:
            return result.data

        detail = _error_detail(result.error_body)
        if result.status == 401:
            raise AuthError(detail or "Unauthorized", status=401, provider=self.provider)

        prefix = f"{self.provider} " if self.provider else ""
        raise TransportError(
            f"{prefix}HTTP {result.status}: {detail or 'empty response'}",
            status=result.status,
            provider=self.provider,
        )
