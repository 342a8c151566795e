"""FastAPI application serving box office outliers, search and trending."""

from __future__ import annotations

import logging
from datetime import date
from typing import AsyncIterator

import httpx
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from boxoffice.catalog import load_genre_rows
from boxoffice.catalog.client import CatalogClient, create_client_from_env
from boxoffice.catalog.discovery import by_genre, movie_details, movie_languages, now_playing, search_movies, upcoming
from boxoffice.catalog.models import CatalogItemSummary, ClassifiedCandidate, TrendingRecord
from boxoffice.logic.box_office import compute_box_office
from boxoffice.trending.store import TRENDING_SIZE, TrendingStore, create_trending_store_from_env
from boxoffice.utils.urls import image_url

logger = logging.getLogger(__name__)

load_dotenv()

app = FastAPI(title="Box Office API")


class MovieOut(BaseModel):
    id: int
    title: str
    release_date: date | None
    vote_count: int
    poster_url: str | None
    backdrop_url: str | None


class OutlierOut(BaseModel):
    id: int
    title: str
    release_year: int | None
    budget: int
    revenue: int
    profit_or_loss: int
    ratio: float
    logo_url: str | None
    poster_url: str | None


class BoxOfficeResponse(BaseModel):
    profit: list[OutlierOut]
    loss: list[OutlierOut]


class TrendingOut(BaseModel):
    search_term: str
    movie_id: int
    title: str
    count: int
    poster_url: str


class SearchResponse(BaseModel):
    results: list[MovieOut]
    trending: TrendingOut | None = None


class UpcomingOut(MovieOut):
    days_until_release: int


class PersonOut(BaseModel):
    id: int
    name: str
    job: str | None = None
    character: str | None = None
    profile_path: str | None = None


class DetailsOut(BaseModel):
    id: int
    title: str
    budget: int
    revenue: int
    runtime: int | None
    certification: str
    formatted_runtime: str
    formatted_budget: str
    formatted_revenue: str
    formatted_profit: str
    directors: list[PersonOut]
    writers: list[PersonOut]
    cast: list[PersonOut]


class LanguageOut(BaseModel):
    iso_639_1: str
    english_name: str
    name: str
    type: str


class GenreOut(BaseModel):
    name: str
    genre_ids: list[int]


async def get_catalog_client() -> AsyncIterator[CatalogClient]:
    try:
        client = create_client_from_env()
    except KeyError as exc:
        raise HTTPException(status_code=503, detail="Catalog credentials not configured") from exc
    try:
        yield client
    finally:
        await client.close()


async def get_trending_store() -> AsyncIterator[TrendingStore]:
    try:
        store = create_trending_store_from_env()
    except KeyError as exc:
        raise HTTPException(status_code=503, detail="Trending store not configured") from exc
    try:
        yield store
    finally:
        await store.close()


def _movie_out(item: CatalogItemSummary) -> MovieOut:
    return MovieOut(
        id=item.id,
        title=item.title,
        release_date=item.release_date,
        vote_count=item.vote_count,
        poster_url=image_url(item.poster_path, size="w500"),
        backdrop_url=image_url(item.backdrop_path),
    )


def _outlier_out(entry: ClassifiedCandidate) -> OutlierOut:
    candidate = entry.candidate
    return OutlierOut(
        id=candidate.id,
        title=candidate.title,
        release_year=candidate.release_year,
        budget=candidate.budget,
        revenue=candidate.revenue,
        profit_or_loss=entry.profit_or_loss,
        ratio=round(entry.ratio, 4),
        logo_url=image_url(candidate.logo_path),
        poster_url=image_url(candidate.summary.poster_path, size="w500"),
    )


def _trending_out(record: TrendingRecord) -> TrendingOut:
    return TrendingOut(
        search_term=record.search_term,
        movie_id=record.item_id,
        title=record.title,
        count=record.count,
        poster_url=record.poster_url,
    )


@app.get("/box-office", response_model=BoxOfficeResponse)
async def box_office(
    limit_profit: int = Query(8, ge=0, le=50),
    limit_loss: int = Query(20, ge=0, le=50),
    client: CatalogClient = Depends(get_catalog_client),
) -> BoxOfficeResponse:
    digest = await compute_box_office(client, limit_profit, limit_loss)
    return BoxOfficeResponse(
        profit=[_outlier_out(entry) for entry in digest.profit],
        loss=[_outlier_out(entry) for entry in digest.loss],
    )


@app.get("/search", response_model=SearchResponse)
async def search(
    query: str = "",
    client: CatalogClient = Depends(get_catalog_client),
    store: TrendingStore = Depends(get_trending_store),
) -> SearchResponse:
    try:
        results = await search_movies(client, query)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail="Catalog unavailable") from exc
    trending = None
    if query.strip() and results:
        try:
            trending = _trending_out(await store.record_search(query, results[0]))
        except (httpx.HTTPError, SQLAlchemyError) as exc:
            logger.error("Failed to record search %r: %s", query, exc)
            raise HTTPException(status_code=502, detail="Trending store unavailable") from exc
    return SearchResponse(results=[_movie_out(item) for item in results], trending=trending)


@app.get("/trending", response_model=list[TrendingOut])
async def trending(store: TrendingStore = Depends(get_trending_store)) -> list[TrendingOut]:
    try:
        records = await store.top_trending(TRENDING_SIZE)
    except (httpx.HTTPError, SQLAlchemyError) as exc:
        logger.error("Failed to load trending searches: %s", exc)
        raise HTTPException(status_code=502, detail="Trending store unavailable") from exc
    return [_trending_out(record) for record in records]


@app.get("/now-playing", response_model=list[MovieOut])
async def now_playing_movies(client: CatalogClient = Depends(get_catalog_client)) -> list[MovieOut]:
    try:
        items = await now_playing(client)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail="Catalog unavailable") from exc
    return [_movie_out(item) for item in items]


@app.get("/upcoming", response_model=list[UpcomingOut])
async def upcoming_movies(
    limit: int = Query(10, ge=1, le=20),
    client: CatalogClient = Depends(get_catalog_client),
) -> list[UpcomingOut]:
    try:
        releases = await upcoming(client, limit=limit)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail="Catalog unavailable") from exc
    return [
        UpcomingOut(**_movie_out(release.summary).model_dump(), days_until_release=release.days_until_release)
        for release in releases
    ]


@app.get("/genres", response_model=list[GenreOut])
async def genres() -> list[GenreOut]:
    return [GenreOut(name=row.name, genre_ids=row.genre_ids) for row in load_genre_rows()]


@app.get("/genres/movies", response_model=list[MovieOut])
async def genre_movies(
    genre_ids: list[int] = Query(..., min_length=1),
    client: CatalogClient = Depends(get_catalog_client),
) -> list[MovieOut]:
    try:
        items = await by_genre(client, genre_ids)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail="Catalog unavailable") from exc
    return [_movie_out(item) for item in items]


@app.get("/movies/{movie_id}", response_model=DetailsOut)
async def movie(movie_id: int, client: CatalogClient = Depends(get_catalog_client)) -> DetailsOut:
    try:
        details = await movie_details(client, movie_id)
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            raise HTTPException(status_code=404, detail="Movie not found") from exc
        raise HTTPException(status_code=502, detail="Catalog unavailable") from exc
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail="Catalog unavailable") from exc
    detail = details.detail
    return DetailsOut(
        id=detail.id,
        title=details.title,
        budget=detail.budget,
        revenue=detail.revenue,
        runtime=detail.runtime,
        certification=details.certification,
        formatted_runtime=details.formatted_runtime,
        formatted_budget=details.formatted_budget,
        formatted_revenue=details.formatted_revenue,
        formatted_profit=details.formatted_profit,
        directors=[PersonOut(id=p.id, name=p.name) for p in details.directors],
        writers=[PersonOut(id=p.id, name=p.name, job=p.job) for p in details.writers],
        cast=[
            PersonOut(id=a.id, name=a.name, character=a.character, profile_path=a.profile_path)
            for a in details.cast
        ],
    )


@app.get("/movies/{movie_id}/languages", response_model=list[LanguageOut])
async def languages(movie_id: int, client: CatalogClient = Depends(get_catalog_client)) -> list[LanguageOut]:
    return [
        LanguageOut(iso_639_1=lang.iso_639_1, english_name=lang.english_name, name=lang.name, type=lang.type)
        for lang in await movie_languages(client, movie_id)
    ]
