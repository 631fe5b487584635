"""
Tier Resolver - picks the volume tier that applies to a product.

A product's tiers are validated once when the catalog is loaded, so
resolve() never has to deal with a missing floor tier.
"""
from typing import Optional

from .errors import ConfigurationError
from .models import Product, Tier


def validate_tiers(product_id: str, tiers) -> tuple[Tier, ...]:
    """
    Check a product's tiers and return them sorted by threshold.

    Raises ConfigurationError when the set is empty, has a negative or
    duplicate threshold, or has no tier starting at zero.
    """
    if not tiers:
        raise ConfigurationError(f"Product '{product_id}' has no tiers")

    seen = set()
    for tier in tiers:
        if tier.min_volume < 0:
            raise ConfigurationError(
                f"Product '{product_id}' has a negative tier threshold ({tier.min_volume})"
            )
        if tier.min_volume in seen:
            raise ConfigurationError(
                f"Product '{product_id}' has duplicate tier threshold {tier.min_volume}"
            )
        seen.add(tier.min_volume)

    if 0 not in seen:
        raise ConfigurationError(f"Product '{product_id}' has no tier starting at volume 0")

    return tuple(sorted(tiers, key=lambda t: t.min_volume))


def resolve(product: Product, cumulative_volume: int) -> Tier:
    """
    Return the tier with the largest threshold not above the volume.

    Args:
        product: Catalog product (tiers validated at load time)
        cumulative_volume: Units recorded so far, >= 0
    """
    if cumulative_volume < 0:
        raise ValueError(f"Cumulative volume must be >= 0, got {cumulative_volume}")

    current = None
    for tier in product.tiers:
        if tier.min_volume <= cumulative_volume and (
            current is None or tier.min_volume > current.min_volume
        ):
            current = tier
    return current


def next_tier(product: Product, cumulative_volume: int) -> Optional[Tier]:
    """The first tier not yet reached, or None once the top tier is active."""
    upcoming = [t for t in product.tiers if t.min_volume > cumulative_volume]
    if not upcoming:
        return None
    return min(upcoming, key=lambda t: t.min_volume)
