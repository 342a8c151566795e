"""Box office outlier computation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date

from boxoffice.catalog.client import CatalogClient
from boxoffice.catalog.models import ClassifiedCandidate, EnrichedCandidate, OutlierMode
from boxoffice.logic.collector import CandidateCollector, dedupe_by_id
from boxoffice.logic.enricher import DetailEnricher
from boxoffice.logic.ranking import rank
from boxoffice.logic.signals import classify
from boxoffice.utils.dates import start_of_previous_year, today_in_tz

logger = logging.getLogger(__name__)

MIN_VOTES = int(os.environ.get("MIN_VOTES", 100))
TARGET_POOL_SIZE = 60
MAX_PAGES = 5


@dataclass(slots=True)
class BoxOfficeDigest:
    profit: list[ClassifiedCandidate]
    loss: list[ClassifiedCandidate]


async def gather_candidates(
    client: CatalogClient,
    *,
    as_of: date | None = None,
    window_start: date | None = None,
    min_votes: int = MIN_VOTES,
    target_pool_size: int = TARGET_POOL_SIZE,
    max_pages: int = MAX_PAGES,
) -> list[EnrichedCandidate]:
    today = as_of or today_in_tz()
    start = window_start or start_of_previous_year(today)
    summaries = await CandidateCollector(client).collect(
        start, today, min_votes, target_pool_size, max_pages
    )
    unique = dedupe_by_id(summaries)
    return await DetailEnricher(client, reference_year=today.year).enrich(unique)


async def compute_outliers(
    client: CatalogClient,
    mode: OutlierMode | str,
    limit: int,
    **options,
) -> list[ClassifiedCandidate]:
    candidates = await gather_candidates(client, **options)
    return rank(classify(candidates, mode), limit)


async def compute_box_office(
    client: CatalogClient,
    limit_profit: int = 8,
    limit_loss: int = 20,
    **options,
) -> BoxOfficeDigest:
    """One collection and enrichment run split into the profit and loss leaderboards."""
    candidates = await gather_candidates(client, **options)
    profit = rank(classify(candidates, OutlierMode.PROFIT), limit_profit)
    loss = rank(classify(candidates, OutlierMode.LOSS), limit_loss)
    logger.info(
        "Box office digest: %s profit / %s loss outliers from %s candidates",
        len(profit),
        len(loss),
        len(candidates),
    )
    return BoxOfficeDigest(profit=profit, loss=loss)
