"""Catalog data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping, Sequence

from boxoffice.utils.dates import parse_release_date, year_priority

CLEAN_LOGO_LANGUAGES = (None, "", "en")
BACKDROP_INDEX = 7


class OutlierMode(str, Enum):
    PROFIT = "profit"
    LOSS = "loss"


@dataclass(slots=True, frozen=True)
class CatalogItemSummary:
    id: int
    title: str
    release_date: date | None
    popularity: float
    vote_count: int
    poster_path: str | None
    backdrop_path: str | None
    genre_ids: tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CatalogItemSummary":
        return cls(
            id=int(data["id"]),
            title=data.get("title") or data.get("original_title") or "",
            release_date=parse_release_date(data.get("release_date")),
            popularity=float(data.get("popularity") or 0.0),
            vote_count=int(data.get("vote_count") or 0),
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            genre_ids=tuple(data.get("genre_ids") or ()),
        )


@dataclass(slots=True, frozen=True)
class CatalogItemDetail:
    id: int
    budget: int
    revenue: int
    runtime: int | None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CatalogItemDetail":
        return cls(
            id=int(data["id"]),
            budget=max(int(data.get("budget") or 0), 0),
            revenue=max(int(data.get("revenue") or 0), 0),
            runtime=data.get("runtime"),
            raw=data,
        )


@dataclass(slots=True, frozen=True)
class ImageAssets:
    logo_path: str | None = None
    backdrop_path: str | None = None
    poster_path: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ImageAssets":
        logos = [item for item in data.get("logos") or [] if item.get("iso_639_1") in CLEAN_LOGO_LANGUAGES]
        backdrops = [item for item in data.get("backdrops") or [] if not item.get("iso_639_1")]
        posters = [item for item in data.get("posters") or [] if not item.get("iso_639_1")]
        backdrop = backdrops[min(BACKDROP_INDEX, len(backdrops) - 1)] if backdrops else None
        return cls(
            logo_path=logos[0].get("file_path") if logos else None,
            backdrop_path=backdrop.get("file_path") if backdrop else None,
            poster_path=posters[0].get("file_path") if posters else None,
        )


@dataclass(slots=True, frozen=True)
class EnrichedCandidate:
    summary: CatalogItemSummary
    detail: CatalogItemDetail
    images: ImageAssets
    release_year: int | None
    year_priority: int

    @classmethod
    def build(
        cls,
        summary: CatalogItemSummary,
        detail: CatalogItemDetail,
        images: ImageAssets,
        *,
        reference_year: int,
    ) -> "EnrichedCandidate":
        release_year = summary.release_date.year if summary.release_date else None
        return cls(
            summary=summary,
            detail=detail,
            images=images,
            release_year=release_year,
            year_priority=year_priority(release_year, reference_year),
        )

    @property
    def id(self) -> int:
        return self.summary.id

    @property
    def title(self) -> str:
        return self.summary.title

    @property
    def budget(self) -> int:
        return self.detail.budget

    @property
    def revenue(self) -> int:
        return self.detail.revenue

    @property
    def logo_path(self) -> str | None:
        return self.images.logo_path


@dataclass(slots=True, frozen=True)
class ClassifiedCandidate:
    candidate: EnrichedCandidate
    mode: OutlierMode
    profit_or_loss: int
    ratio: float

    @property
    def id(self) -> int:
        return self.candidate.id

    @property
    def year_priority(self) -> int:
        return self.candidate.year_priority


@dataclass(slots=True)
class TrendingRecord:
    search_term: str
    item_id: int
    title: str
    count: int
    poster_url: str
    doc_id: str | None = None


@dataclass(slots=True)
class UpcomingRelease:
    summary: CatalogItemSummary
    days_until_release: int


@dataclass(slots=True)
class MovieLanguage:
    iso_639_1: str
    english_name: str
    name: str
    type: str


@dataclass(slots=True)
class CrewMember:
    id: int
    name: str
    job: str | None = None


@dataclass(slots=True)
class CastMember:
    id: int
    name: str
    character: str | None
    profile_path: str | None


@dataclass(slots=True)
class MovieDetails:
    detail: CatalogItemDetail
    title: str
    certification: str
    formatted_runtime: str
    formatted_budget: str
    formatted_revenue: str
    formatted_profit: str
    directors: Sequence[CrewMember]
    writers: Sequence[CrewMember]
    cast: Sequence[CastMember]
