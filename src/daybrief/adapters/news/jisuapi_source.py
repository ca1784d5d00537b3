"""JisuAPI domestic news source (secondary)."""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup

from daybrief.adapters.http import JsonClient
from daybrief.adapters.news.base import KeyedNewsProvider, make_article, normalize_articles
from daybrief.config import ConfigResolver, ProviderKey
from daybrief.core.entities import Article, CategoryDescriptor, ProviderFamily
from daybrief.core.errors import AuthError, ProviderAPIError

logger = logging.getLogger(__name__)

JISUAPI_BASE = "https://api.jisuapi.com"

# Missing, expired, unauthorized or exhausted appkey
AUTH_STATUSES = {101, 102, 103, 104}

CHANNELS = {
    "general": "头条",
    "technology": "科技",
    "science": "科技",
    "business": "财经",
    "entertainment": "娱乐",
    "sports": "体育",
    "health": "健康",
}

CATEGORIES = [
    CategoryDescriptor("general", "头条", "头条"),
    CategoryDescriptor("technology", "科技", "科技"),
    CategoryDescriptor("business", "财经", "财经"),
    CategoryDescriptor("entertainment", "娱乐", "娱乐"),
    CategoryDescriptor("sports", "体育", "体育"),
    CategoryDescriptor("health", "健康", "健康"),
]


def _plain(html: Any, limit: int = 200) -> str:
    """Strip markup from the article body and keep a short teaser."""
    if not html:
        return ""
    soup = BeautifulSoup(str(html), "html.parser")
    return " ".join(soup.get_text(" ", strip=True).split())[:limit]


class JisuApiSource(KeyedNewsProvider):
    """Fetch domestic channel news from JisuAPI."""

    name = "JisuAPI"
    family = ProviderFamily.DOMESTIC
    key_name = ProviderKey.JISUAPI
    max_page_size = 50
    supports_search = False

    def __init__(
        self,
        resolver: ConfigResolver,
        client: JsonClient,
        base_url: str = JISUAPI_BASE,
    ) -> None:
        super().__init__(resolver)
        self.client = client
        self.base_url = base_url

    async def fetch_headlines(
        self, category: str = "general", page_size: int = 20, country: str = "cn"
    ) -> list[Article]:
        channel = CHANNELS.get(category, CHANNELS["general"])
        query = urlencode({
            "channel": channel,
            "num": self.clamp_page_size(page_size),
            "appkey": self.api_key(),
        })
        data = await self.client.get_json(f"{self.base_url}/news/get?{query}")

        raw_items = self._extract_items(data)
        articles = normalize_articles(
            raw_items, lambda raw: self._to_article(raw, category), provider=self.name
        )
        logger.info("JisuAPI %s: %d articles", channel, len(articles))
        return articles

    async def list_categories(self) -> list[CategoryDescriptor]:
        return list(CATEGORIES)

    def _extract_items(self, data: Any) -> list:
        if not isinstance(data, dict):
            logger.warning("JisuAPI returned a non-object payload")
            return []

        try:
            status = int(data.get("status"))
        except (TypeError, ValueError):
            logger.warning("JisuAPI payload has no usable status: %r", data.get("status"))
            return []

        if status != 0:
            message = data.get("msg") or f"status {data.get('status')}"
            if status in AUTH_STATUSES:
                raise AuthError(f"{message} (status {status})", status=None, provider=self.name)
            raise ProviderAPIError(f"JisuAPI error: {message}", code=status, provider=self.name)

        result = data.get("result")
        if not isinstance(result, dict) or not isinstance(result.get("list"), list):
            logger.warning("JisuAPI payload has no result.list")
            return []
        return result["list"]

    def _to_article(self, raw: dict, category: str) -> Optional[Article]:
        return make_article(
            title=raw.get("title"),
            url=raw.get("url"),
            description=_plain(raw.get("content")),
            image_url=raw.get("pic"),
            published_at=raw.get("time"),
            source=raw.get("src"),
            category=category,
        )
