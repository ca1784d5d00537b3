"""TianAPI domestic news source (primary).

TianAPI's free tier allows about 3 requests per second, so every request,
including the channel catalog, goes through the rate-limited gateway.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from daybrief.adapters.news.base import KeyedNewsProvider, make_article, normalize_articles
from daybrief.config import ConfigResolver, ProviderKey
from daybrief.core.catalog import CatalogCache
from daybrief.core.entities import Article, CategoryDescriptor, ProviderFamily
from daybrief.core.errors import AuthError, ProviderAPIError
from daybrief.core.rate_limit import RateLimitedGateway

logger = logging.getLogger(__name__)

TIANAPI_BASE = "https://apis.tianapi.com"

SUCCESS_CODE = 200
NO_DATA_CODE = 250
# Permission, quota and key errors
AUTH_CODES = {140, 150, 160, 190, 230, 240}

HEADLINE_CATEGORY = "guonei"

# Generic category -> catalog ids to try in order
GENERIC_TO_NAMEID = {
    "general": ("guonei",),
    "technology": ("keji",),
    "science": ("keji",),
    "business": ("caijing",),
    "entertainment": ("huabian", "yule"),
    "sports": ("tiyu",),
    "health": ("health", "jiankang"),
}

# Used when the catalog omits a channel name
NAMEID_LABELS = {
    "guonei": "国内",
    "keji": "科技",
    "caijing": "财经",
    "yule": "娱乐",
    "huabian": "娱乐",
    "tiyu": "体育",
    "jiankang": "健康",
    "health": "健康",
    "world": "国际",
    "social": "社会",
    "dongman": "动漫",
    "junshi": "军事",
    "other": "其他",
}

FALLBACK_CATEGORIES = [
    CategoryDescriptor("guonei", "国内新闻", None),
    CategoryDescriptor("social", "社会新闻", 5),
    CategoryDescriptor("world", "国际新闻", 8),
    CategoryDescriptor("huabian", "娱乐新闻", 10),
    CategoryDescriptor("tiyu", "体育新闻", 12),
    CategoryDescriptor("keji", "科技新闻", 13),
    CategoryDescriptor("caijing", "财经新闻", 32),
    CategoryDescriptor("health", "健康知识", 17),
]


class TianApiSource(KeyedNewsProvider):
    """Fetch domestic headlines and channel news from TianAPI."""

    name = "TianAPI"
    family = ProviderFamily.DOMESTIC
    key_name = ProviderKey.TIANAPI
    max_page_size = 50
    supports_search = False

    def __init__(
        self,
        resolver: ConfigResolver,
        gateway: RateLimitedGateway,
        catalog: CatalogCache,
        base_url: str = TIANAPI_BASE,
    ) -> None:
        super().__init__(resolver)
        self.gateway = gateway
        self.catalog = catalog
        self.base_url = base_url
        catalog.register(self.name, self._fetch_catalog, FALLBACK_CATEGORIES)

    async def fetch_headlines(
        self, category: str = "general", page_size: int = 20, country: str = "cn"
    ) -> list[Article]:
        """Fetch news for a generic category such as ``technology``."""
        candidates = GENERIC_TO_NAMEID.get(category, (HEADLINE_CATEGORY,))
        category_id = candidates[0]

        if len(candidates) > 1:
            known = {c.id for c in await self.list_categories()}
            category_id = next((c for c in candidates if c in known), candidates[0])

        return await self.fetch_by_category_id(category_id, page_size, label=category)

    async def fetch_by_category_id(
        self, category_id: str, page_size: int = 20, label: Optional[str] = None
    ) -> list[Article]:
        """Fetch news for a catalog id such as ``keji``."""
        num = self.clamp_page_size(page_size)
        descriptor = None

        if category_id != HEADLINE_CATEGORY:
            descriptor = await self._find_category(category_id)
            if descriptor is None:
                raise ProviderAPIError(f"Unknown domestic category: {category_id}", provider=self.name)

        if descriptor is None or descriptor.provider_category_ref is None:
            query = urlencode({"key": self.api_key(), "num": num})
            url = f"{self.base_url}/guonei/index?{query}"
        else:
            query = urlencode({
                "key": self.api_key(),
                "col": descriptor.provider_category_ref,
                "num": num,
                "form": 1,
            })
            url = f"{self.base_url}/allnews/index?{query}"

        data = await self.gateway.throttled_fetch(url)
        raw_items = self._extract_items(data)
        category = label or category_id

        articles = normalize_articles(
            raw_items, lambda raw: self._to_article(raw, category), provider=self.name
        )
        logger.info("TianAPI %s: %d articles", category_id, len(articles))
        return articles

    async def list_categories(self) -> list[CategoryDescriptor]:
        return await self.catalog.get_categories(self.name)

    async def _find_category(self, category_id: str) -> Optional[CategoryDescriptor]:
        for descriptor in await self.list_categories():
            if descriptor.id == category_id:
                return descriptor
        return None

    def _check_code(self, data: dict) -> Optional[int]:
        """Raise for provider error codes; return the numeric code."""
        raw_code = data.get("code")
        try:
            code = int(raw_code)
        except (TypeError, ValueError):
            return None

        if code in (SUCCESS_CODE, NO_DATA_CODE):
            return code

        message = data.get("msg") or f"code {code}"
        if code in AUTH_CODES:
            raise AuthError(f"{message} (code {code})", status=None, provider=self.name)
        raise ProviderAPIError(f"TianAPI error: {message}", code=code, provider=self.name)

    def _extract_items(self, data: Any) -> list:
        if not isinstance(data, dict):
            logger.warning("TianAPI returned a non-object payload")
            return []

        code = self._check_code(data)
        if code != SUCCESS_CODE:
            return []

        newslist = data.get("newslist")
        if isinstance(newslist, list):
            return newslist

        result = data.get("result")
        if isinstance(result, list):
            return result
        if isinstance(result, dict):
            for field_name in ("list", "newslist"):
                if isinstance(result.get(field_name), list):
                    return result[field_name]

        logger.warning("TianAPI payload has no article list")
        return []

    def _to_article(self, raw: dict, category: str) -> Optional[Article]:
        return make_article(
            title=raw.get("title"),
            url=raw.get("url"),
            description=raw.get("description"),
            image_url=raw.get("picUrl"),
            published_at=raw.get("ctime"),
            source=raw.get("source"),
            category=category,
        )

    async def _fetch_catalog(self) -> list[CategoryDescriptor]:
        """Load the channel catalog; raises on any provider failure."""
        url = f"{self.base_url}/allnews/catelist?{urlencode({'key': self.api_key()})}"
        data = await self.gateway.throttled_fetch(url)

        if not isinstance(data, dict) or self._check_code(data) != SUCCESS_CODE:
            raise ProviderAPIError("TianAPI catalog unavailable", provider=self.name)

        result = data.get("result")
        raw = result.get("list") if isinstance(result, dict) else result
        if isinstance(raw, list) and raw and isinstance(raw[0], list):
            raw = raw[0]
        if not isinstance(raw, list):
            return []

        descriptors = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            nameid = item.get("nameid")
            colid = item.get("colid")
            if not nameid or colid is None:
                continue
            descriptors.append(CategoryDescriptor(
                id=nameid,
                label=item.get("name") or NAMEID_LABELS.get(nameid, nameid),
                provider_category_ref=colid,
            ))

        # Domestic headlines channel first
        descriptors.sort(key=lambda d: d.id != HEADLINE_CATEGORY)
        return descriptors
