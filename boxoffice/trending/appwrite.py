"""Minimal Appwrite document collection client."""

from __future__ import annotations

import json
import os
from typing import Any, Sequence

import httpx

DEFAULT_ENDPOINT = "https://cloud.appwrite.io/v1"
UNIQUE_ID = "unique()"


def equal(attribute: str, value: Any) -> str:
    return json.dumps({"method": "equal", "attribute": attribute, "values": [value]})


def order_desc(attribute: str) -> str:
    return json.dumps({"method": "orderDesc", "attribute": attribute})


def limit(value: int) -> str:
    return json.dumps({"method": "limit", "values": [value]})


class AppwriteCollection:
    """One collection in an Appwrite database, addressed by database and collection id."""

    def __init__(
        self,
        *,
        project_id: str,
        database_id: str,
        collection_id: str,
        api_key: str | None = None,
        endpoint: str = DEFAULT_ENDPOINT,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = f"{endpoint.rstrip('/')}/databases/{database_id}/collections/{collection_id}/documents"
        self.headers = {"X-Appwrite-Project": project_id, "Content-Type": "application/json"}
        if api_key:
            self.headers["X-Appwrite-Key"] = api_key
        self._session = session or httpx.AsyncClient(timeout=15.0)

    async def close(self) -> None:
        await self._session.aclose()

    async def list_documents(self, queries: Sequence[str] = ()) -> list[dict[str, Any]]:
        params = {"queries[]": list(queries)} if queries else None
        response = await self._session.get(self.url, params=params, headers=self.headers)
        response.raise_for_status()
        return response.json().get("documents", [])

    async def create_document(self, data: dict[str, Any], *, document_id: str = UNIQUE_ID) -> dict[str, Any]:
        response = await self._session.post(
            self.url, json={"documentId": document_id, "data": data}, headers=self.headers
        )
        response.raise_for_status()
        return response.json()

    async def update_document(self, document_id: str, data: dict[str, Any]) -> dict[str, Any]:
        response = await self._session.patch(
            f"{self.url}/{document_id}", json={"data": data}, headers=self.headers
        )
        response.raise_for_status()
        return response.json()


def create_collection_from_env(*, session: httpx.AsyncClient | None = None) -> AppwriteCollection:
    return AppwriteCollection(
        project_id=os.environ["APPWRITE_PROJECT_ID"],
        database_id=os.environ["APPWRITE_DATABASE_ID"],
        collection_id=os.environ["APPWRITE_COLLECTION_ID"],
        api_key=os.environ.get("APPWRITE_API_KEY"),
        endpoint=os.environ.get("APPWRITE_ENDPOINT", DEFAULT_ENDPOINT),
        session=session,
    )
