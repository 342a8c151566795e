"""Ranking of classified outliers."""

from __future__ import annotations

from typing import Sequence

from boxoffice.catalog.models import ClassifiedCandidate


def rank(pool: Sequence[ClassifiedCandidate], limit: int) -> list[ClassifiedCandidate]:
    # Recent years first, then the largest absolute profit or loss. Stable for full ties.
    ordered = sorted(pool, key=lambda c: (c.year_priority, -abs(c.profit_or_loss)))
    return ordered[: max(limit, 0)]
