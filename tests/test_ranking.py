from datetime import date

from boxoffice.catalog.models import OutlierMode
from boxoffice.logic.ranking import rank
from boxoffice.logic.signals import classify

from conftest import make_candidate


def _pool():
    candidates = [
        make_candidate(1, 10_000_000, 20_000_000, release=date(2023, 3, 1)),
        make_candidate(2, 10_000_000, 90_000_000, release=date(2021, 3, 1)),
        make_candidate(3, 10_000_000, 15_000_000, release=date(2024, 3, 1)),
        make_candidate(4, 100_000_000, 140_000_000, release=date(2024, 6, 1)),
        make_candidate(5, 10_000_000, 80_000_000, release=None),
    ]
    return classify(candidates, OutlierMode.PROFIT)


def test_rank_orders_by_year_bucket_then_magnitude():
    ranked = rank(_pool(), 10)
    assert [c.id for c in ranked] == [4, 3, 1, 2, 5]
    keys = [(c.year_priority, -abs(c.profit_or_loss)) for c in ranked]
    assert keys == sorted(keys)


def test_rank_uses_magnitude_not_ratio():
    # 3 has the better ratio (1.5x vs 1.4x) but 4 has the larger profit.
    ranked = rank(_pool(), 2)
    assert [c.id for c in ranked] == [4, 3]


def test_rank_loss_puts_largest_loss_first():
    candidates = [
        make_candidate(1, 10_000_000, 5_000_000),
        make_candidate(2, 200_000_000, 20_000_000),
    ]
    ranked = rank(classify(candidates, OutlierMode.LOSS), 5)
    assert [c.id for c in ranked] == [2, 1]


def test_rank_length_is_min_of_limit_and_pool():
    pool = _pool()
    for limit in range(0, 8):
        assert len(rank(pool, limit)) == min(limit, len(pool))
    assert rank([], 3) == []
    assert rank(pool, -1) == []
