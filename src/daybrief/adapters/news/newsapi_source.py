"""NewsAPI international news source."""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from daybrief.adapters.http import JsonClient
from daybrief.adapters.news.base import KeyedNewsProvider, make_article, normalize_articles
from daybrief.config import ConfigResolver, ProviderKey
from daybrief.core.entities import Article, CategoryDescriptor, ProviderFamily
from daybrief.core.errors import AuthError, ProviderAPIError

logger = logging.getLogger(__name__)

NEWS_API_BASE = "https://newsapi.org/v2"

AUTH_CODES = {"apiKeyInvalid", "apiKeyDisabled", "apiKeyExhausted", "apiKeyMissing"}

CATEGORIES = [
    CategoryDescriptor("general", "综合"),
    CategoryDescriptor("technology", "科技"),
    CategoryDescriptor("business", "商业"),
    CategoryDescriptor("entertainment", "娱乐"),
    CategoryDescriptor("sports", "体育"),
    CategoryDescriptor("science", "科学"),
    CategoryDescriptor("health", "健康"),
]


class NewsApiSource(KeyedNewsProvider):
    """Fetch headlines and search results from NewsAPI.

    The free plan allows 100 requests per day, which is why results are
    cached per time window upstream.
    """

    name = "NewsAPI"
    family = ProviderFamily.INTERNATIONAL
    key_name = ProviderKey.NEWS_API
    max_page_size = 100
    supports_search = True

    def __init__(
        self,
        resolver: ConfigResolver,
        client: JsonClient,
        base_url: str = NEWS_API_BASE,
    ) -> None:
        super().__init__(resolver)
        self.client = client
        self.base_url = base_url

    async def fetch_headlines(
        self, category: str = "general", page_size: int = 20, country: str = "cn"
    ) -> list[Article]:
        query = urlencode({
            "country": country,
            "category": category,
            "pageSize": self.clamp_page_size(page_size),
            "apiKey": self.api_key(),
        })
        data = await self.client.get_json(f"{self.base_url}/top-headlines?{query}")

        articles = normalize_articles(
            self._extract_items(data),
            lambda raw: self._to_article(raw, category),
            provider=self.name,
        )
        if not articles:
            logger.warning("NewsAPI returned no headlines for %s/%s", country, category)
        return articles

    async def search(self, query: str, page_size: int = 20, language: str = "zh") -> list[Article]:
        if not query or not query.strip():
            return []

        params = urlencode({
            "q": query.strip(),
            "language": language,
            "sortBy": "publishedAt",
            "pageSize": self.clamp_page_size(page_size),
            "apiKey": self.api_key(),
        })
        data = await self.client.get_json(f"{self.base_url}/everything?{params}")

        return normalize_articles(
            self._extract_items(data),
            lambda raw: self._to_article(raw, ""),
            provider=self.name,
        )

    async def list_categories(self) -> list[CategoryDescriptor]:
        return list(CATEGORIES)

    def _extract_items(self, data: Any) -> list:
        if not isinstance(data, dict):
            logger.warning("NewsAPI returned a non-object payload")
            return []

        if data.get("status") == "error":
            code = data.get("code")
            message = data.get("message") or "unknown error"
            if code in AUTH_CODES:
                raise AuthError(f"{message} ({code})", status=None, provider=self.name)
            raise ProviderAPIError(f"NewsAPI error: {message}", code=code, provider=self.name)

        articles = data.get("articles")
        if not isinstance(articles, list):
            logger.warning("NewsAPI payload has no articles list")
            return []
        return articles

    def _to_article(self, raw: dict, category: str) -> Optional[Article]:
        source = raw.get("source")
        return make_article(
            title=raw.get("title"),
            url=raw.get("url"),
            description=raw.get("description"),
            image_url=raw.get("urlToImage"),
            published_at=raw.get("publishedAt"),
            source=source.get("name") if isinstance(source, dict) else None,
            category=category,
        )
