import pytest

from fundraise.engine.errors import ConfigurationError
from fundraise.engine.models import Product, Tier
from fundraise.engine.tier_resolver import next_tier, resolve, validate_tiers


@pytest.fixture
def coffret(catalog):
    return catalog["coffret"]


@pytest.mark.parametrize("volume,expected", [
    (0, (6, 7)),
    (99, (6, 7)),
    (100, (5, 8)),
    (299, (5, 8)),
    (300, (4, 9)),
    (10_000, (4, 9)),
])
def test_resolve_picks_highest_reached_threshold(coffret, volume, expected):
    tier = resolve(coffret, volume)
    assert (tier.platform, tier.group) == expected, \
        f"Volume {volume}: expected {expected}, got ({tier.platform}, {tier.group})"


def test_resolve_ignores_tier_order():
    """Tiers given out of order still resolve by threshold."""
    product = Product(
        id="x", name="X", cost=1, price=10,
        tiers=(Tier(50, 1, 5), Tier(0, 3, 3), Tier(20, 2, 4)),
    )
    assert resolve(product, 25).min_volume == 20
    assert resolve(product, 75).min_volume == 50


def test_resolve_is_idempotent(coffret):
    assert resolve(coffret, 150) == resolve(coffret, 150)


def test_resolve_rejects_negative_volume(coffret):
    with pytest.raises(ValueError):
        resolve(coffret, -1)


def test_next_tier(coffret):
    assert next_tier(coffret, 0).min_volume == 100
    assert next_tier(coffret, 100).min_volume == 300
    assert next_tier(coffret, 300) is None


def test_validate_tiers_sorts():
    tiers = validate_tiers("x", [Tier(100, 1, 2), Tier(0, 2, 1)])
    assert [t.min_volume for t in tiers] == [0, 100]


def test_validate_tiers_requires_zero_floor():
    with pytest.raises(ConfigurationError, match="volume 0"):
        validate_tiers("x", [Tier(10, 1, 1)])


def test_validate_tiers_rejects_duplicates():
    with pytest.raises(ConfigurationError, match="duplicate"):
        validate_tiers("x", [Tier(0, 1, 1), Tier(0, 2, 2)])


def test_validate_tiers_rejects_empty_and_negative():
    with pytest.raises(ConfigurationError):
        validate_tiers("x", [])
    with pytest.raises(ConfigurationError, match="negative"):
        validate_tiers("x", [Tier(0, 1, 1), Tier(-5, 1, 1)])
