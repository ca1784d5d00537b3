"""Shared helpers for news provider adapters."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from daybrief.config import ConfigResolver, ProviderKey
from daybrief.core.entities import Article
from daybrief.core.errors import NotConfiguredError
from daybrief.core.interfaces import NewsProvider

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def text(value: Any) -> str:
    """Coerce a raw field to a stripped string, treating None as empty."""
    if value is None:
        return ""
    return str(value).strip()


def make_article(
    title: Any,
    url: Any,
    description: Any = "",
    image_url: Any = None,
    published_at: Any = None,
    source: Any = None,
    category: str = "",
) -> Optional[Article]:
    """Build an Article, or None when title or URL is missing."""
    title = text(title)
    url = text(url)
    if not title or not url:
        return None

    return Article(
        title=title,
        url=url,
        description=text(description),
        image_url=text(image_url) or None,
        published_at=text(published_at) or now_iso(),
        source=text(source) or "unknown",
        category=category,
    )


def normalize_articles(
    raw_items: Any,
    convert: Callable[[dict], Optional[Article]],
    provider: str = "",
) -> list[Article]:
    """Convert raw provider items, discarding anything without title or URL."""
    if not isinstance(raw_items, list):
        return []

    articles: list[Article] = []
    for raw in raw_items:
        article = convert(raw) if isinstance(raw, dict) else None
        if article is not None:
            articles.append(article)

    discarded = len(raw_items) - len(articles)
    if discarded:
        logger.debug("%s: discarded %d items without title or URL", provider, discarded)
    return articles


class KeyedNewsProvider(NewsProvider):
    """News provider whose only credential is one API key."""

    key_name: ProviderKey = ProviderKey.NEWS_API

    def __init__(self, resolver: ConfigResolver) -> None:
        self.resolver = resolver

    def is_configured(self) -> bool:
        return self.resolver.is_configured(self.key_name)

    def api_key(self) -> str:
        key = self.resolver.resolve(self.key_name)
        if not key:
            raise NotConfiguredError(f"{self.name} API key is not configured")
        return key
