"""Seed the trending store with demo searches."""

from __future__ import annotations

import asyncio

from dotenv import load_dotenv

from boxoffice.catalog.models import CatalogItemSummary
from boxoffice.db.migrate import run_migrations
from boxoffice.db.session import create_engine_from_env
from boxoffice.trending.store import SqlTrendingStore

DEMO_SEARCHES = [
    ("dune", 438631, "Dune", "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg", 3),
    ("dune part two", 693134, "Dune: Part Two", "/1pdfLvkbY9ohJlCjQH2CZjjYVvJ.jpg", 2),
    ("oppenheimer", 872585, "Oppenheimer", "/8Gxv8gSFCU0XGDykEGv7zR1n2ua.jpg", 2),
    ("barbie", 346698, "Barbie", "/iuFNMS8U5cb6xfzi51Dbkovj7vM.jpg", 1),
]


async def seed() -> None:
    engine = create_engine_from_env()
    run_migrations(engine)
    store = SqlTrendingStore(engine)
    try:
        for term, item_id, title, poster_path, times in DEMO_SEARCHES:
            item = CatalogItemSummary(
                id=item_id,
                title=title,
                release_date=None,
                popularity=0.0,
                vote_count=0,
                poster_path=poster_path,
                backdrop_path=None,
            )
            for _ in range(times):
                await store.record_search(term, item)
    finally:
        await store.close()


def main() -> None:
    load_dotenv()
    asyncio.run(seed())
    print("Seed complete")


if __name__ == "__main__":
    main()
