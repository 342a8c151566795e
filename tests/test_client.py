import httpx
import pytest

from boxoffice.catalog.client import create_client_from_env


@pytest.mark.asyncio
async def test_non_2xx_raises(fake_catalog, catalog_client):
    with pytest.raises(httpx.HTTPStatusError):
        await catalog_client.fetch_detail(1)


@pytest.mark.asyncio
async def test_detail_treats_missing_financials_as_unknown(fake_catalog, catalog_client):
    fake_catalog.details[1] = {"id": 1, "budget": None, "runtime": 90}
    detail = await catalog_client.fetch_detail(1)
    assert (detail.budget, detail.revenue) == (0, 0)


@pytest.mark.asyncio
async def test_genre_filter_is_comma_joined(fake_catalog, catalog_client):
    await catalog_client.discover_page(page=1, sort_by="popularity.desc", genre_ids=[28, 12])
    assert fake_catalog.requests[0].url.params["with_genres"] == "28,12"


def test_client_from_env(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "abc")
    monkeypatch.setenv("TMDB_BASE_URL", "https://example.test/3/")
    monkeypatch.setenv("CATALOG_CONCURRENCY", "3")
    client = create_client_from_env()
    assert client.base_url == "https://example.test/3"
    assert client._semaphore._value == 3


def test_client_from_env_requires_key(monkeypatch):
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    with pytest.raises(KeyError):
        create_client_from_env()
