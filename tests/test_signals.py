import pytest

from boxoffice.catalog.models import OutlierMode
from boxoffice.logic import signals

from conftest import make_candidate


def test_profit_rule():
    assert signals.is_profit_outlier(10_000_000, 13_000_001)
    assert not signals.is_profit_outlier(10_000_000, 13_000_000)
    assert not signals.is_profit_outlier(1_000_000, 50_000_000)
    assert not signals.is_profit_outlier(0, 5_000_000)


def test_loss_rule():
    assert signals.is_loss_outlier(10_000_000, 8_000_000)
    assert not signals.is_loss_outlier(10_000_000, 8_500_000)
    assert not signals.is_loss_outlier(10_000_000, 0)
    assert not signals.is_loss_outlier(900_000, 10_000)


def test_unknown_budget_excluded_from_both_pools():
    candidates = [make_candidate(1, 0, 5_000_000)]
    assert signals.classify(candidates, OutlierMode.PROFIT) == []
    assert signals.classify(candidates, OutlierMode.LOSS) == []


def test_classify_attaches_profit_and_ratio():
    pool = signals.classify([make_candidate(1, 10_000_000, 30_000_000)], "profit")
    assert len(pool) == 1
    assert pool[0].profit_or_loss == 20_000_000
    assert pool[0].ratio == 3.0
    assert pool[0].mode is OutlierMode.PROFIT


def test_pools_are_disjoint_and_hold_invariants():
    candidates = [
        make_candidate(1, 10_000_000, 30_000_000),
        make_candidate(2, 10_000_000, 2_000_000),
        make_candidate(3, 10_000_000, 10_000_000),
        make_candidate(4, 500_000, 9_000_000),
        make_candidate(5, 20_000_000, 1),
        make_candidate(6, 50_000_000, 0),
    ]
    profit = signals.classify(candidates, OutlierMode.PROFIT)
    loss = signals.classify(candidates, OutlierMode.LOSS)
    assert {c.id for c in profit} == {1}
    assert {c.id for c in loss} == {2, 5}
    for entry in profit:
        budget, revenue = entry.candidate.budget, entry.candidate.revenue
        assert budget > signals.BUDGET_FLOOR and revenue > signals.BUDGET_FLOOR
        assert revenue > budget * signals.PROFIT_MULTIPLIER
    for entry in loss:
        budget, revenue = entry.candidate.budget, entry.candidate.revenue
        assert budget > signals.BUDGET_FLOOR and revenue > 0
        assert revenue < budget * signals.LOSS_MULTIPLIER
        assert entry.profit_or_loss < 0


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        signals.classify([], "breakeven")
