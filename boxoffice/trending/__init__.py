"""Trending search counters."""

from boxoffice.trending.store import (
    DocumentTrendingStore,
    SqlTrendingStore,
    TrendingStore,
    collapse_trending,
    create_trending_store_from_env,
)

__all__ = [
    "DocumentTrendingStore",
    "SqlTrendingStore",
    "TrendingStore",
    "collapse_trending",
    "create_trending_store_from_env",
]
