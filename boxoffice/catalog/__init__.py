"""Catalog access helpers."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass

import yaml

GENRES_PATH = pathlib.Path(__file__).with_name("genres.yml")


@dataclass(slots=True)
class GenreRow:
    name: str
    genre_ids: list[int]


def load_genre_rows(limit: int | None = None) -> list[GenreRow]:
    data = yaml.safe_load(GENRES_PATH.read_text())
    rows = [GenreRow(name=item["name"], genre_ids=[int(g) for g in item["genre_ids"]]) for item in data]
    if limit:
        return rows[:limit]
    return rows
