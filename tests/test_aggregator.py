import pytest

from fundraise.engine.aggregator import aggregate, progress_toward, reached_milestones
from fundraise.engine.ledger import OrderConsolidator, OrderLog, VolumeLedger


def test_empty_ledger_has_zero_totals(catalog):
    totals = aggregate(catalog, {"coffret": 0, "gourde": 0, "bougie": 0}, 1000)

    assert totals.units == 0
    assert totals.revenue == 0
    assert totals.progress == 0


def test_gourde_paper_voucher_end_to_end(catalog):
    """150 gourdes are all priced at the >= 150 tier."""
    ledger = VolumeLedger(catalog.ids())
    OrderConsolidator(ledger, OrderLog()).consolidate_paper_order("Club", {"gourde": 150})

    assert ledger.volume("gourde") == 150

    totals = aggregate(catalog, ledger.snapshot(), 1000)
    assert totals.group_margin == pytest.approx(975)
    assert totals.platform_margin == pytest.approx(375)
    assert totals.progress == pytest.approx(0.975)
    assert totals.units == 150


def test_crossing_a_tier_reprices_past_volume(catalog):
    before = aggregate(catalog, {"coffret": 99}, 10_000)
    after = aggregate(catalog, {"coffret": 100}, 10_000)

    assert before.group_margin == 99 * 7
    assert after.group_margin == 100 * 8


def test_totals_sum_over_products(catalog):
    totals = aggregate(catalog, {"coffret": 10, "bougie": 5}, 10_000)

    assert totals.revenue == 10 * 25 + 5 * 12
    assert totals.cost == 10 * 12 + 5 * 4
    assert totals.group_margin == 10 * 7 + 5 * 6
    assert totals.units == 15


@pytest.mark.parametrize("goal", [0, -50])
def test_non_positive_goal_reports_full_progress(catalog, goal):
    totals = aggregate(catalog, {"coffret": 3}, goal)
    assert totals.progress == 1.0


def test_progress_is_clamped():
    assert progress_toward(5000, 1000) == 1.0
    assert progress_toward(250, 1000) == 0.25


def test_reached_milestones():
    milestones = ((300, "stickers"), (100, "livraison"), (500, "bonus"))

    assert reached_milestones(99, milestones) == []
    assert reached_milestones(300, milestones) == [(100, "livraison"), (300, "stickers")]
