"""HTTP transport and JSON client adapters."""

from daybrief.adapters.http.json_client import JsonClient, redact_url
from daybrief.adapters.http.transport import HttpxTransport, Platform, create_transport

__all__ = ["JsonClient", "redact_url", "HttpxTransport", "Platform", "create_transport"]
