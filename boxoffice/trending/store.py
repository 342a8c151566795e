"""Search-term popularity counters and the trending leaderboard."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Iterable, Mapping, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.sql import text

from boxoffice.catalog.models import CatalogItemSummary, TrendingRecord
from boxoffice.trending.appwrite import AppwriteCollection, create_collection_from_env, equal, limit, order_desc
from boxoffice.utils.urls import poster_url

logger = logging.getLogger(__name__)

TRENDING_SIZE = 8
# Reads collapse only the SCAN_LIMIT highest-count records. When many terms
# share a few items, those rows can hold fewer than ``n`` distinct items even
# though more exist further down; raise the limit if that shows up.
SCAN_LIMIT = int(os.environ.get("TRENDING_SCAN_LIMIT", 100))


class TrendingStore(Protocol):
    async def record_search(self, term: str, item: CatalogItemSummary) -> TrendingRecord: ...

    async def top_trending(self, n: int = TRENDING_SIZE) -> list[TrendingRecord]: ...

    async def close(self) -> None: ...


def collapse_trending(records: Iterable[TrendingRecord], n: int = TRENDING_SIZE) -> list[TrendingRecord]:
    """Keep the highest-count record per item id, ordered by count; ties keep scan order."""
    best: dict[int, TrendingRecord] = {}
    for record in records:
        current = best.get(record.item_id)
        if current is None or current.count < record.count:
            best[record.item_id] = record
    ordered = sorted(best.values(), key=lambda r: r.count, reverse=True)
    return ordered[: max(n, 0)]


def _normalize_term(term: str) -> str:
    cleaned = term.strip()
    if not cleaned:
        raise ValueError("Search term must not be blank")
    return cleaned


class SqlTrendingStore:
    """Counters in ``trending_searches``; ``search_term`` is unique, so each term has one row."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def record_search(self, term: str, item: CatalogItemSummary) -> TrendingRecord:
        term = _normalize_term(term)
        return await asyncio.get_running_loop().run_in_executor(None, self._upsert, term, item)

    async def top_trending(self, n: int = TRENDING_SIZE) -> list[TrendingRecord]:
        records = await asyncio.get_running_loop().run_in_executor(None, self._load_ordered)
        return collapse_trending(records, n)

    async def close(self) -> None:
        self.engine.dispose()

    def _upsert(self, term: str, item: CatalogItemSummary) -> TrendingRecord:
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO trending_searches (search_term, item_id, title, count, poster_url)
                    VALUES (:search_term, :item_id, :title, 1, :poster_url)
                    ON CONFLICT (search_term) DO UPDATE SET
                      count = trending_searches.count + 1
                    """
                ),
                {
                    "search_term": term,
                    "item_id": item.id,
                    "title": item.title,
                    "poster_url": poster_url(item.poster_path),
                },
            )
            row = conn.execute(
                text(
                    """
                    SELECT id, search_term, item_id, title, count, poster_url
                    FROM trending_searches
                    WHERE search_term = :search_term
                    """
                ),
                {"search_term": term},
            ).mappings().one()
        return _record_from_row(row)

    def _load_ordered(self) -> list[TrendingRecord]:
        query = text(
            """
            SELECT id, search_term, item_id, title, count, poster_url
            FROM trending_searches
            ORDER BY count DESC, id ASC
            LIMIT :limit
            """
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query, {"limit": SCAN_LIMIT}).mappings().all()
        return [_record_from_row(row) for row in rows]


def _record_from_row(row: Mapping[str, Any]) -> TrendingRecord:
    return TrendingRecord(
        search_term=row["search_term"],
        item_id=int(row["item_id"]),
        title=row["title"],
        count=int(row["count"]),
        poster_url=row["poster_url"],
        doc_id=str(row["id"]),
    )


class DocumentTrendingStore:
    """Counters kept as documents in a remote collection.

    The collection has no uniqueness constraint on ``searchTerm``. When a term
    already has documents, only the first one returned is incremented and no
    new document is created, so this store never adds a duplicate itself.
    """

    def __init__(self, collection: AppwriteCollection) -> None:
        self.collection = collection

    async def record_search(self, term: str, item: CatalogItemSummary) -> TrendingRecord:
        term = _normalize_term(term)
        documents = await self.collection.list_documents([equal("searchTerm", term)])
        if documents:
            if len(documents) > 1:
                logger.warning("Found %s documents for search term %r; incrementing the first", len(documents), term)
            existing = documents[0]
            updated = await self.collection.update_document(existing["$id"], {"count": int(existing["count"]) + 1})
            return _record_from_document({**existing, **updated})
        created = await self.collection.create_document(
            {
                "searchTerm": term,
                "movie_id": item.id,
                "title": item.title,
                "count": 1,
                "poster_url": poster_url(item.poster_path),
            }
        )
        return _record_from_document(created)

    async def top_trending(self, n: int = TRENDING_SIZE) -> list[TrendingRecord]:
        documents = await self.collection.list_documents([order_desc("count"), limit(SCAN_LIMIT)])
        return collapse_trending((_record_from_document(doc) for doc in documents), n)

    async def close(self) -> None:
        await self.collection.close()


def _record_from_document(doc: Mapping[str, Any]) -> TrendingRecord:
    return TrendingRecord(
        search_term=doc["searchTerm"],
        item_id=int(doc["movie_id"]),
        title=doc.get("title") or "",
        count=int(doc["count"]),
        poster_url=doc.get("poster_url") or "",
        doc_id=doc.get("$id"),
    )


def create_trending_store_from_env(engine: Engine | None = None) -> TrendingStore:
    backend = os.environ.get("TRENDING_BACKEND", "sql")
    if backend == "appwrite":
        return DocumentTrendingStore(create_collection_from_env())
    if backend != "sql":
        raise ValueError(f"Unknown TRENDING_BACKEND {backend!r}")
    if engine is None:
        from boxoffice.db.session import create_engine_from_env

        engine = create_engine_from_env()
    return SqlTrendingStore(engine)
