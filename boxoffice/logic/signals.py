"""Eligibility rules for box office outliers."""

from __future__ import annotations

import os
from typing import Iterable

from boxoffice.catalog.models import ClassifiedCandidate, EnrichedCandidate, OutlierMode

BUDGET_FLOOR = int(os.environ.get("BUDGET_FLOOR", 1_000_000))
PROFIT_MULTIPLIER = float(os.environ.get("PROFIT_MULTIPLIER", 1.3))
LOSS_MULTIPLIER = float(os.environ.get("LOSS_MULTIPLIER", 0.85))


def is_profit_outlier(budget: int, revenue: int) -> bool:
    return budget > BUDGET_FLOOR and revenue > BUDGET_FLOOR and revenue > budget * PROFIT_MULTIPLIER


def is_loss_outlier(budget: int, revenue: int) -> bool:
    return budget > BUDGET_FLOOR and revenue > 0 and revenue < budget * LOSS_MULTIPLIER


_RULES = {
    OutlierMode.PROFIT: is_profit_outlier,
    OutlierMode.LOSS: is_loss_outlier,
}


def classify(candidates: Iterable[EnrichedCandidate], mode: OutlierMode | str) -> list[ClassifiedCandidate]:
    """Keep the candidates that clear the rule for ``mode``; the rest are discarded."""
    mode = OutlierMode(mode)
    rule = _RULES[mode]
    pool: list[ClassifiedCandidate] = []
    for candidate in candidates:
        budget, revenue = candidate.budget, candidate.revenue
        if not rule(budget, revenue):
            continue
        pool.append(
            ClassifiedCandidate(
                candidate=candidate,
                mode=mode,
                profit_or_loss=revenue - budget,
                ratio=revenue / budget,
            )
        )
    return pool
