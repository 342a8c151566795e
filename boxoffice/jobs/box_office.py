"""Box office job orchestration."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from dotenv import load_dotenv

from boxoffice.catalog.client import create_client_from_env
from boxoffice.catalog.discovery import format_currency
from boxoffice.catalog.models import ClassifiedCandidate
from boxoffice.logic.box_office import BoxOfficeDigest, compute_box_office
from boxoffice.utils.dates import format_date, today_in_tz

logger = logging.getLogger(__name__)


async def run_box_office(as_of: date | None = None, *, limit_profit: int = 8, limit_loss: int = 20) -> BoxOfficeDigest:
    load_dotenv()
    target_date = as_of or today_in_tz()
    client = create_client_from_env()
    try:
        digest = await compute_box_office(client, limit_profit, limit_loss, as_of=target_date)
    finally:
        await client.close()

    logger.info("Box office outliers as of %s", format_date(target_date))
    for label, entries in (("profit", digest.profit), ("loss", digest.loss)):
        for position, entry in enumerate(entries, start=1):
            logger.info("%s #%s %s", label, position, _describe(entry))
    return digest


def _describe(entry: ClassifiedCandidate) -> str:
    candidate = entry.candidate
    return (
        f"{candidate.title} ({candidate.release_year or '?'}): "
        f"budget {format_currency(candidate.budget)}, revenue {format_currency(candidate.revenue)}, "
        f"{format_currency(entry.profit_or_loss)} ({entry.ratio:.2f}x)"
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(run_box_office())
