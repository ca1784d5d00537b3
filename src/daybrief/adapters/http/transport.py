"""Host-specific HTTP transports, selected once at startup."""

from enum import Enum
from typing import Any

import httpx

from daybrief.core.errors import MalformedResponseError, TransportError
from daybrief.core.interfaces import Transport, TransportResponse


class Platform(str, Enum):
    """Host environment the application runs in."""

    DESKTOP = "desktop"
    MOBILE = "mobile"
    WEB = "web"


class HttpxTransport(Transport):
    """Transport over ``httpx.AsyncClient``."""

    def __init__(self, timeout: float = 30.0, trust_env: bool = True) -> None:
        self.timeout = timeout
        self.trust_env = trust_env

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            trust_env=self.trust_env,
        )

    async def fetch_url(self, url: str) -> TransportResponse:
        async with self._client() as client:
            try:
                response = await client.get(url)
            except httpx.RequestError as e:
                raise TransportError(f"Network error: {e}") from e
        return self._to_result(response)

    async def post_json(self, url: str, payload: dict[str, Any]) -> TransportResponse:
        async with self._client() as client:
            try:
                response = await client.post(url, json=payload)
            except httpx.RequestError as e:
                raise TransportError(f"Network error: {e}") from e
        return self._to_result(response)

    def _to_result(self, response: httpx.Response) -> TransportResponse:
        if response.status_code < 200 or response.status_code >= 300:
            return TransportResponse(
                success=False,
                status=response.status_code,
                error_body=response.text[:300],
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
        return TransportResponse(success=True, data=data, status=response.status_code)


def create_transport(platform: Platform, timeout: float = 30.0) -> Transport:
    """Build the transport for a host platform.

    Desktop goes straight to the network and ignores proxy variables from
    the environment. Mobile networks get a longer timeout.
    """
    if platform == Platform.DESKTOP:
        return HttpxTransport(timeout=timeout, trust_env=False)
    if platform == Platform.MOBILE:
        return HttpxTransport(timeout=timeout * 2, trust_env=True)
    return HttpxTransport(timeout=timeout, trust_env=True)
