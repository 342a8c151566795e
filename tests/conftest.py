import json
from datetime import date
from typing import Any

import httpx
import pytest
import respx
from sqlalchemy import Column, Integer, MetaData, Table, Text, UniqueConstraint, create_engine
from sqlalchemy.pool import StaticPool

from boxoffice.catalog.client import CatalogClient
from boxoffice.catalog.models import CatalogItemDetail, CatalogItemSummary, EnrichedCandidate, ImageAssets

BASE_URL = "https://catalog.test/3"

metadata = MetaData()

trending_searches = Table(
    "trending_searches",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("search_term", Text, nullable=False),
    Column("item_id", Integer, nullable=False),
    Column("title", Text, nullable=False),
    Column("count", Integer, nullable=False, default=1),
    Column("poster_url", Text, nullable=False),
    UniqueConstraint("search_term", name="trending_searches_term_idx"),
)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


def movie_payload(item_id: int, *, release_date: str = "2024-05-01", **extra: Any) -> dict[str, Any]:
    payload = {
        "id": item_id,
        "title": f"Movie {item_id}",
        "release_date": release_date,
        "popularity": 10.0 + item_id,
        "vote_count": 500,
        "poster_path": f"/poster{item_id}.jpg",
        "backdrop_path": f"/backdrop{item_id}.jpg",
        "genre_ids": [28],
    }
    payload.update(extra)
    return payload


class FakeCatalog:
    """Routes catalog requests to in-memory data; ``fail`` holds paths answered with 500."""

    def __init__(self) -> None:
        self.pages: dict[int, list[dict[str, Any]]] = {}
        self.search_results: list[dict[str, Any]] = []
        self.details: dict[int, dict[str, Any]] = {}
        self.images: dict[int, dict[str, Any]] = {}
        self.release_dates: dict[int, dict[str, Any]] = {}
        self.credits: dict[int, dict[str, Any]] = {}
        self.fail: set[str] = set()
        self.fail_pages: set[int] = set()
        self.garbled_pages: set[int] = set()
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/3")
        if path in self.fail:
            return httpx.Response(500, json={"status_message": "boom"})
        if path == "/discover/movie":
            page = int(request.url.params.get("page", 1))
            if page in self.fail_pages:
                return httpx.Response(503, json={"status_message": "unavailable"})
            if page in self.garbled_pages:
                return httpx.Response(200, content=b"<html>upstream error</html>")
            return httpx.Response(200, json={"page": page, "results": self.pages.get(page, [])})
        if path == "/search/movie":
            return httpx.Response(200, json={"results": self.search_results})
        parts = path.strip("/").split("/")
        item_id = int(parts[1])
        sources: dict[str, dict[int, dict[str, Any]]] = {
            "": self.details,
            "images": self.images,
            "release_dates": self.release_dates,
            "credits": self.credits,
        }
        source = sources[parts[2] if len(parts) > 2 else ""]
        if item_id not in source:
            return httpx.Response(404, json={"status_message": "not found"})
        return httpx.Response(200, json=source[item_id])

    def paths(self, prefix: str) -> list[str]:
        return [r.url.path for r in self.requests if r.url.path.startswith(prefix)]


@pytest.fixture()
def fake_catalog():
    return FakeCatalog()


@pytest.fixture()
def catalog_router(fake_catalog):
    with respx.mock(assert_all_called=False) as router:
        router.route(host="catalog.test").mock(side_effect=fake_catalog.handler)
        yield router


@pytest.fixture()
def catalog_client(catalog_router):
    return CatalogClient("token", base_url=BASE_URL, concurrency=4, session=httpx.AsyncClient())


def make_candidate(
    item_id: int,
    budget: int,
    revenue: int,
    *,
    release: date | None = date(2024, 5, 1),
    reference_year: int = 2024,
) -> EnrichedCandidate:
    summary = CatalogItemSummary(
        id=item_id,
        title=f"Movie {item_id}",
        release_date=release,
        popularity=1.0,
        vote_count=500,
        poster_path=f"/poster{item_id}.jpg",
        backdrop_path=None,
    )
    detail = CatalogItemDetail(id=item_id, budget=budget, revenue=revenue, runtime=120)
    return EnrichedCandidate.build(summary, detail, ImageAssets(), reference_year=reference_year)


class FakeCollection:
    """In-memory stand-in for the Appwrite documents endpoint."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self.unavailable = False
        self._next_id = 1

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.unavailable:
            return httpx.Response(500, json={"message": "Server Error"})
        if request.method == "GET":
            docs = list(self.documents)
            for raw in request.url.params.get_list("queries[]"):
                query = json.loads(raw)
                if query["method"] == "equal":
                    docs = [d for d in docs if d.get(query["attribute"]) in query["values"]]
                elif query["method"] == "orderDesc":
                    docs.sort(key=lambda d: d[query["attribute"]], reverse=True)
                elif query["method"] == "limit":
                    docs = docs[: query["values"][0]]
            return httpx.Response(200, json={"total": len(docs), "documents": docs})
        body = json.loads(request.content)
        if request.method == "POST":
            doc = {"$id": f"doc{self._next_id}", **body["data"]}
            self._next_id += 1
            self.documents.append(doc)
            return httpx.Response(201, json=doc)
        if request.method == "PATCH":
            doc_id = request.url.path.rsplit("/", 1)[-1]
            doc = next(d for d in self.documents if d["$id"] == doc_id)
            doc.update(body["data"])
            return httpx.Response(200, json=doc)
        return httpx.Response(405)


@pytest.fixture()
def fake_collection():
    return FakeCollection()


@pytest.fixture()
def collection_router(fake_collection):
    with respx.mock(assert_all_called=False) as router:
        router.route(host="appwrite.test").mock(side_effect=fake_collection.handler)
        yield router
