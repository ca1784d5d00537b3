"""Error taxonomy shared by adapters, orchestrator and callers."""

from typing import Optional


AUTH_HINT = (
    "Please check: 1) the API key is correct "
    "2) the key has been activated (new keys can take minutes to hours) "
    "3) the free quota has not been exceeded"
)


class DaybriefError(Exception):
    """Base class for all errors raised by this package."""


class NotConfiguredError(DaybriefError):
    """No usable API key for any provider able to serve the request."""


class ProviderError(DaybriefError):
    """Failure attributed to a single provider."""

    def __init__(self, message: str, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider = provider


class TransportError(ProviderError):
    """Network or HTTP-layer failure, or an explicit provider error status."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        provider: Optional[str] = None,
    ) -> None:
        super().__init__(message, provider)
        self.status = status


class AuthError(TransportError):
    """Provider rejected the API key (HTTP 401 or a provider auth code)."""

    def __init__(
        self,
        detail: str = "",
        status: Optional[int] = 401,
        provider: Optional[str] = None,
    ) -> None:
        prefix = f"{provider} API key is invalid" if provider else "API key is invalid"
        message = f"{prefix}. {AUTH_HINT}."
        if detail:
            message = f"{message} Details: {detail}"
        super().__init__(message, status=status, provider=provider)
        self.detail = detail


class ProviderAPIError(TransportError):
    """Provider answered but reported an error code in its payload."""

    def __init__(
        self,
        message: str,
        code: Optional[object] = None,
        status: Optional[int] = None,
        provider: Optional[str] = None,
    ) -> None:
        super().__init__(message, status=status, provider=provider)
        self.code = code


class MalformedResponseError(ProviderError):
    """Provider returned a body that does not match the expected shape."""


class AggregateFailureError(DaybriefError):
    """Every configured provider in a fallback chain failed."""

    def __init__(self, failures: list[tuple[str, Exception]], what: str = "request") -> None:
        self.failures = failures
        reasons = "; ".join(f"{name}: {error}" for name, error in failures)
        super().__init__(f"All providers failed for {what}. {reasons}")
