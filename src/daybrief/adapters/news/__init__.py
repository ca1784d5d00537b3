"""News provider adapters."""

from daybrief.adapters.news.jisuapi_source import JisuApiSource
from daybrief.adapters.news.newsapi_source import NewsApiSource
from daybrief.adapters.news.tianapi_source import TianApiSource

__all__ = [
    "JisuApiSource",
    "NewsApiSource",
    "TianApiSource",
]
