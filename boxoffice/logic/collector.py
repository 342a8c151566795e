"""Paged candidate collection."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Sequence

import httpx

from boxoffice.catalog.client import CatalogClient
from boxoffice.catalog.models import CatalogItemSummary

logger = logging.getLogger(__name__)

RECENCY_DESC = "primary_release_date.desc"


class CandidateCollector:
    """Walks discovery pages newest-first until the pool is big enough.

    Pages are requested one at a time since the stopping condition depends on
    what has already arrived. A failed or malformed page ends the walk and
    whatever was gathered so far is returned.
    """

    def __init__(self, client: CatalogClient) -> None:
        self.client = client

    async def collect(
        self,
        window_start: date,
        window_end: date,
        min_votes: int,
        target_pool_size: int,
        max_pages: int,
        *,
        genre_ids: Iterable[int] | None = None,
    ) -> list[CatalogItemSummary]:
        accumulator: list[CatalogItemSummary] = []
        page = 1
        while len(accumulator) < target_pool_size and page <= max_pages:
            try:
                results = await self.client.discover_page(
                    page=page,
                    sort_by=RECENCY_DESC,
                    release_gte=window_start,
                    release_lte=window_end,
                    min_votes=min_votes,
                    genre_ids=genre_ids,
                )
            except (httpx.HTTPError, KeyError, ValueError) as exc:
                logger.warning("Stopping collection at page %s: %r", page, exc)
                break
            if not results:
                logger.info("Catalog exhausted at page %s", page)
                break
            accumulator.extend(results)
            page += 1
        logger.info("Collected %s candidates from %s page(s)", len(accumulator), page - 1)
        return accumulator


def dedupe_by_id(summaries: Sequence[CatalogItemSummary]) -> list[CatalogItemSummary]:
    seen: set[int] = set()
    unique: list[CatalogItemSummary] = []
    for summary in summaries:
        if summary.id in seen:
            continue
        seen.add(summary.id)
        unique.append(summary)
    return unique
