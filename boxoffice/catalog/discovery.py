"""Catalog browsing: search, hero rows, genre rows and movie details."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import httpx

from boxoffice.catalog.client import CatalogClient
from boxoffice.catalog.models import (
    CastMember,
    CatalogItemDetail,
    CatalogItemSummary,
    CrewMember,
    MovieDetails,
    MovieLanguage,
    UpcomingRelease,
)
from boxoffice.utils.dates import months_after, months_before, today_in_tz

logger = logging.getLogger(__name__)

POPULARITY_DESC = "popularity.desc"
NOW_PLAYING_MONTHS = 2
NOW_PLAYING_MIN_VOTES = 100
UPCOMING_MONTHS = 6
CERTIFICATION_COUNTRY = "US"
WRITER_JOBS = frozenset({"Screenplay", "Writer", "Story"})

LANGUAGE_NAMES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "en": MappingProxyType({"english": "English", "native": "English"}),
        "es": MappingProxyType({"english": "Spanish", "native": "Español"}),
        "fr": MappingProxyType({"english": "French", "native": "Français"}),
        "de": MappingProxyType({"english": "German", "native": "Deutsch"}),
        "it": MappingProxyType({"english": "Italian", "native": "Italiano"}),
        "ja": MappingProxyType({"english": "Japanese", "native": "日本語"}),
        "ko": MappingProxyType({"english": "Korean", "native": "한국어"}),
        "zh": MappingProxyType({"english": "Chinese", "native": "中文"}),
        "hi": MappingProxyType({"english": "Hindi", "native": "हिन्दी"}),
        "ru": MappingProxyType({"english": "Russian", "native": "Русский"}),
        "pt": MappingProxyType({"english": "Portuguese", "native": "Português"}),
    }
)

_COMPACT_UNITS = ((1_000_000_000_000, "T"), (1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K"))


async def search_movies(client: CatalogClient, query: str) -> list[CatalogItemSummary]:
    """Title search, or the most popular titles when the query is blank."""
    if query.strip():
        return await client.search(query.strip())
    return await client.discover_page(page=1, sort_by=POPULARITY_DESC)


async def by_genre(client: CatalogClient, genre_ids: Iterable[int]) -> list[CatalogItemSummary]:
    return await client.discover_page(page=1, sort_by=POPULARITY_DESC, genre_ids=list(genre_ids))


async def now_playing(client: CatalogClient, *, limit: int = 7, as_of: date | None = None) -> list[CatalogItemSummary]:
    """Popular recent releases with a clean (untagged) poster where one exists."""
    today = as_of or today_in_tz()
    window_start = months_before(today, NOW_PLAYING_MONTHS)
    results = await client.discover_page(
        page=1,
        sort_by=POPULARITY_DESC,
        release_gte=window_start,
        release_lte=today,
    )
    picked = [
        item
        for item in results
        if item.poster_path
        and item.vote_count > NOW_PLAYING_MIN_VOTES
        and item.release_date is not None
        and window_start <= item.release_date <= today
    ][:limit]
    return list(await asyncio.gather(*(_with_clean_poster(client, item) for item in picked)))


async def _with_clean_poster(client: CatalogClient, item: CatalogItemSummary) -> CatalogItemSummary:
    try:
        images = await client.fetch_images(item.id)
    except httpx.HTTPError as exc:
        logger.warning("Keeping default poster for %s: %s", item.id, exc)
        return item
    if not images.poster_path:
        return item
    return CatalogItemSummary(
        id=item.id,
        title=item.title,
        release_date=item.release_date,
        popularity=item.popularity,
        vote_count=item.vote_count,
        poster_path=images.poster_path,
        backdrop_path=item.backdrop_path,
        genre_ids=item.genre_ids,
    )


async def upcoming(client: CatalogClient, *, limit: int = 10, as_of: date | None = None) -> list[UpcomingRelease]:
    today = as_of or today_in_tz()
    start = today + timedelta(days=1)
    results = await client.discover_page(
        page=1,
        sort_by="primary_release_date.asc",
        release_gte=start,
        release_lte=months_after(today, UPCOMING_MONTHS),
    )
    releases = [
        UpcomingRelease(summary=item, days_until_release=(item.release_date - today).days)
        for item in results
        if item.release_date is not None and item.release_date > today
    ]
    return releases[:limit]


async def movie_details(client: CatalogClient, item_id: int) -> MovieDetails:
    payload, release_dates, credits = await asyncio.gather(
        client.fetch_detail_payload(item_id),
        client.fetch_release_dates(item_id),
        client.fetch_credits(item_id),
    )
    detail = CatalogItemDetail.from_payload(payload)
    crew = credits.get("crew") or []
    return MovieDetails(
        detail=detail,
        title=payload.get("title") or "",
        certification=certification(release_dates),
        formatted_runtime=format_runtime(detail.runtime),
        formatted_budget=format_currency(detail.budget),
        formatted_revenue=format_currency(detail.revenue),
        formatted_profit=format_currency(detail.revenue - detail.budget),
        directors=[
            CrewMember(id=person["id"], name=person["name"])
            for person in crew
            if person.get("job") == "Director"
        ],
        writers=[
            CrewMember(id=person["id"], name=person["name"], job=person["job"])
            for person in crew
            if person.get("job") in WRITER_JOBS
        ],
        cast=[
            CastMember(
                id=actor["id"],
                name=actor["name"],
                character=actor.get("character"),
                profile_path=actor.get("profile_path"),
            )
            for actor in credits.get("cast") or []
        ],
    )


async def movie_languages(client: CatalogClient, item_id: int) -> list[MovieLanguage]:
    """Original language first, then the other spoken languages; empty on failure."""
    try:
        payload = await client.fetch_detail_payload(item_id)
    except httpx.HTTPError as exc:
        logger.warning("Language lookup failed for %s: %s", item_id, exc)
        return []
    original = payload.get("original_language") or ""
    languages = [
        MovieLanguage(
            iso_639_1=original,
            english_name=_language_name(original, "english"),
            name=_language_name(original, "native"),
            type="Original",
        )
    ]
    for lang in payload.get("spoken_languages") or []:
        code = lang.get("iso_639_1") or ""
        if code == original:
            continue
        languages.append(
            MovieLanguage(
                iso_639_1=code,
                english_name=lang.get("english_name") or _language_name(code, "english"),
                name=lang.get("name") or _language_name(code, "native"),
                type="Subtitled",
            )
        )
    return languages


def _language_name(code: str, kind: str) -> str:
    names = LANGUAGE_NAMES.get(code)
    if names:
        return names[kind]
    return code.upper()


def certification(release_dates: Mapping[str, Any]) -> str:
    for entry in release_dates.get("results") or []:
        if entry.get("iso_3166_1") == CERTIFICATION_COUNTRY:
            dates = entry.get("release_dates") or []
            if dates and dates[0].get("certification"):
                return dates[0]["certification"]
            break
    return "NR"


def format_runtime(minutes: int | None) -> str:
    total = minutes or 0
    return f"{total // 60}h {total % 60}m"


def format_currency(amount: int) -> str:
    """Compact USD, e.g. ``$1.5M``; zero is unknown and renders as ``N/A``."""
    if amount == 0:
        return "N/A"
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    for idx, (threshold, suffix) in enumerate(_COMPACT_UNITS):
        if value >= threshold:
            scaled = round(value / threshold, 1)
            if scaled >= 1000 and idx > 0:
                threshold, suffix = _COMPACT_UNITS[idx - 1]
                scaled = round(value / threshold, 1)
            return f"{sign}${_trim(scaled)}{suffix}"
    return f"{sign}${value}"


def _trim(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text
