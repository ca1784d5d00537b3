"""Provider fallback chains for news requests."""

import logging
from typing import Awaitable, Callable, Optional, Sequence

from daybrief.core.entities import Article, ProviderFamily, RequestKind
from daybrief.core.errors import AggregateFailureError, NotConfiguredError, ProviderError
from daybrief.core.interfaces import NewsProvider

logger = logging.getLogger(__name__)

DOMESTIC_LOCALES = ("cn", "zh")

ProviderCall = Callable[[NewsProvider], Awaitable[list[Article]]]


class FallbackOrchestrator:
    """Try providers in order until one answers.

    A provider that raises is recorded and the next one is tried. A
    successful empty result is returned as-is, unless the provider does not
    support the request kind, in which case the empty result only means
    "not supported" and the chain continues.
    """

    def __init__(
        self,
        providers: Sequence[NewsProvider],
        domestic_locales: Sequence[str] = DOMESTIC_LOCALES,
    ) -> None:
        self.providers = list(providers)
        self.domestic_locales = tuple(loc.lower() for loc in domestic_locales)

    def family_configured(self, family: ProviderFamily) -> bool:
        return any(p.family == family and p.is_configured() for p in self.providers)

    def chain_for(
        self, locale: str, family: Optional[ProviderFamily] = None
    ) -> list[NewsProvider]:
        """Ordered providers for a locale, or for one family when given."""
        if family is not None:
            return [p for p in self.providers if p.family == family]

        domestic = [p for p in self.providers if p.family == ProviderFamily.DOMESTIC]
        international = [p for p in self.providers if p.family == ProviderFamily.INTERNATIONAL]

        if locale.lower() in self.domestic_locales and self.family_configured(ProviderFamily.DOMESTIC):
            return domestic + international
        return international

    async def run(
        self,
        kind: RequestKind,
        call: ProviderCall,
        locale: str = "cn",
        family: Optional[ProviderFamily] = None,
    ) -> list[Article]:
        """Execute ``call`` against the chain for ``kind`` and ``locale``."""
        chain = self.chain_for(locale, family)
        configured = [p for p in chain if p.is_configured()]

        if not configured:
            raise NotConfiguredError(
                "No news API key is configured. Configure a domestic or international news provider in settings."
            )
        if not any(p.supports(kind) for p in configured):
            names = ", ".join(p.name for p in configured)
            raise NotConfiguredError(
                f"{kind.value.capitalize()} is not supported by the configured providers ({names}). "
                "Configure an international news API key."
            )

        failures: list[tuple[str, Exception]] = []

        for provider in configured:
            if not provider.supports(kind):
                logger.debug("%s does not support %s, skipping", provider.name, kind.value)
                continue

            logger.info("Requesting %s from %s", kind.value, provider.name)
            try:
                articles = await call(provider)
            except ProviderError as e:
                logger.warning("%s failed for %s: %s", provider.name, kind.value, e)
                failures.append((provider.name, e))
                continue

            if not articles and not provider.supports(kind):
                logger.info("%s does not support %s, trying next provider", provider.name, kind.value)
                continue

            logger.info("%s returned %d articles for %s", provider.name, len(articles), kind.value)
            return articles

        if failures:
            raise AggregateFailureError(failures, what=f"news {kind.value}")
        return []
