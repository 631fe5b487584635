import pytest

from fundraise.engine.pricing_engine import PricingEngine, split


@pytest.fixture
def engine(catalog):
    return PricingEngine(catalog)


def test_split_applies_one_tier_to_whole_quantity(catalog):
    gourde = catalog["gourde"]
    result = split(gourde, 150, 150)

    assert result.tier.min_volume == 150
    assert result.cost == 900
    assert result.revenue == 2250
    assert result.platform_margin == pytest.approx(375)
    assert result.group_margin == pytest.approx(975)


@pytest.mark.parametrize("product_id", ["coffret", "gourde", "bougie"])
@pytest.mark.parametrize("volume,qty", [(0, 1), (99, 3), (150, 150), (450, 20), (1000, 7)])
def test_total_margin_is_revenue_minus_cost(catalog, product_id, volume, qty):
    result = split(catalog[product_id], volume, qty)
    assert result.total_margin == pytest.approx(result.revenue - result.cost)


def test_split_is_pure(catalog):
    bougie = catalog["bougie"]
    assert split(bougie, 250, 4) == split(bougie, 250, 4)


def test_quote_prices_batch_at_volume_after_adding_it(engine):
    """95 recorded + 10 in cart crosses the 100 threshold for the whole batch."""
    quote = engine.quote({"coffret": 10}, {"coffret": 95})

    line = quote.lines[0]
    assert line.split.tier.min_volume == 100
    assert line.split.group_margin == 80
    assert quote.total == 250
    assert quote.group_margin == 80


def test_quote_skips_unknown_and_empty_lines(engine):
    quote = engine.quote({"coffret": 2, "mug": 3, "gourde": 0}, {})

    assert [line.product_id for line in quote.lines] == ["coffret"]
    assert quote.total == 50
    assert quote.units == 2


def test_quote_trace_lists_resolution_steps(engine):
    line = engine.quote({"bougie": 1}, {"bougie": 199}).lines[0]
    steps = [t.step for t in line.trace]

    assert steps[:3] == ["Product Lookup", "Volume", "Tier Resolution"]
    assert "200" in line.get_trace_text()


def test_unit_rates_use_current_volume(engine):
    assert engine.unit_rates("gourde", 149).group == 6
    assert engine.unit_rates("gourde", 150).group == 6.5


def test_catalog_view(engine):
    rows = {row["id"]: row for row in engine.catalog_view({"coffret": 120})}

    assert rows["coffret"]["groupRate"] == 8
    assert rows["coffret"]["nextTierAt"] == 300
    assert rows["gourde"]["volume"] == 0
    assert rows["gourde"]["nextTierAt"] == 150
