"""Catalog image URL helpers."""

from __future__ import annotations

import os

DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
POSTER_SIZE = "w500"


def image_base_url() -> str:
    return os.environ.get("TMDB_IMAGE_BASE_URL", DEFAULT_IMAGE_BASE_URL).rstrip("/")


def image_url(path: str | None, *, size: str = "original") -> str | None:
    if not path:
        return None
    return f"{image_base_url()}/{size}/{path.lstrip('/')}"


def poster_url(path: str | None) -> str:
    """Poster URL stored on trending records; an absent path still yields the size prefix."""
    return f"{image_base_url()}/{POSTER_SIZE}{path or ''}"
