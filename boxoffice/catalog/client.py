"""Catalog service client."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import date
from typing import Any, Iterable

import httpx

from boxoffice.catalog.models import CatalogItemDetail, CatalogItemSummary, ImageAssets
from boxoffice.utils.dates import format_date

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_CONCURRENCY = 8


class CatalogClient:
    """Read-only access to the movie catalog.

    Every request shares one semaphore, so no more than ``concurrency``
    requests are in flight at once no matter how many callers fan out.
    Non-2xx responses raise ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        concurrency: int = DEFAULT_CONCURRENCY,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._session = session or httpx.AsyncClient(timeout=30.0)
        self._semaphore = asyncio.Semaphore(concurrency)

    async def close(self) -> None:
        await self._session.aclose()

    async def discover_page(
        self,
        *,
        page: int,
        sort_by: str,
        release_gte: date | None = None,
        release_lte: date | None = None,
        min_votes: int | None = None,
        genre_ids: Iterable[int] | None = None,
    ) -> list[CatalogItemSummary]:
        params: dict[str, Any] = {"sort_by": sort_by, "page": page}
        if release_gte:
            params["primary_release_date.gte"] = format_date(release_gte)
        if release_lte:
            params["primary_release_date.lte"] = format_date(release_lte)
        if min_votes is not None:
            params["vote_count.gte"] = min_votes
        if genre_ids:
            params["with_genres"] = ",".join(str(genre_id) for genre_id in genre_ids)
        data = await self._get_json("/discover/movie", params=params)
        return [CatalogItemSummary.from_payload(item) for item in data.get("results", [])]

    async def search(self, query: str, *, page: int = 1) -> list[CatalogItemSummary]:
        data = await self._get_json("/search/movie", params={"query": query, "page": page})
        return [CatalogItemSummary.from_payload(item) for item in data.get("results", [])]

    async def fetch_detail(self, item_id: int) -> CatalogItemDetail:
        return CatalogItemDetail.from_payload(await self.fetch_detail_payload(item_id))

    async def fetch_detail_payload(self, item_id: int) -> dict[str, Any]:
        return await self._get_json(f"/movie/{item_id}")

    async def fetch_images_payload(self, item_id: int) -> dict[str, Any]:
        return await self._get_json(f"/movie/{item_id}/images")

    async def fetch_images(self, item_id: int) -> ImageAssets:
        return ImageAssets.from_payload(await self.fetch_images_payload(item_id))

    async def fetch_release_dates(self, item_id: int) -> dict[str, Any]:
        return await self._get_json(f"/movie/{item_id}/release_dates")

    async def fetch_credits(self, item_id: int) -> dict[str, Any]:
        return await self._get_json(f"/movie/{item_id}/credits")

    async def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await self._request("GET", f"{self.base_url}{path}", params=params)
        response.raise_for_status()
        return response.json()

    async def _request(self, method: str, url: str, *, params: dict[str, Any] | None = None) -> httpx.Response:
        headers = {"Accept": "application/json", "Authorization": f"Bearer {self.token}"}
        async with self._semaphore:
            return await self._session.request(method, url, params=params, headers=headers)


def create_client_from_env(*, session: httpx.AsyncClient | None = None) -> CatalogClient:
    """Build a client from ``TMDB_API_KEY`` and friends; a missing key raises ``KeyError``."""
    token = os.environ["TMDB_API_KEY"]
    return CatalogClient(
        token,
        base_url=os.environ.get("TMDB_BASE_URL", DEFAULT_BASE_URL),
        concurrency=int(os.environ.get("CATALOG_CONCURRENCY", DEFAULT_CONCURRENCY)),
        session=session,
    )
