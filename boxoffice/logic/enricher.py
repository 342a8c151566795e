"""Concurrent per-candidate enrichment."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import httpx

from boxoffice.catalog.client import CatalogClient
from boxoffice.catalog.models import CatalogItemSummary, EnrichedCandidate
from boxoffice.utils.dates import today_in_tz

logger = logging.getLogger(__name__)


class DetailEnricher:
    def __init__(self, client: CatalogClient, *, reference_year: int | None = None) -> None:
        self.client = client
        self.reference_year = reference_year

    async def enrich(self, summaries: Sequence[CatalogItemSummary]) -> list[EnrichedCandidate]:
        """Attach detail and images to every summary; candidates with a failed fetch are dropped.

        Results come back in completion order.
        """
        if not summaries:
            return []
        reference_year = self.reference_year or today_in_tz().year
        tasks = [self._enrich_one(summary, reference_year) for summary in summaries]
        enriched: list[EnrichedCandidate] = []
        for future in asyncio.as_completed(tasks):
            candidate = await future
            if candidate is not None:
                enriched.append(candidate)
        dropped = len(summaries) - len(enriched)
        if dropped:
            logger.info("Dropped %s of %s candidates during enrichment", dropped, len(summaries))
        return enriched

    async def _enrich_one(self, summary: CatalogItemSummary, reference_year: int) -> EnrichedCandidate | None:
        try:
            detail, images = await asyncio.gather(
                self.client.fetch_detail(summary.id),
                self.client.fetch_images(summary.id),
            )
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.warning("Dropping candidate %s (%s): %s", summary.id, summary.title, exc)
            return None
        return EnrichedCandidate.build(summary, detail, images, reference_year=reference_year)
