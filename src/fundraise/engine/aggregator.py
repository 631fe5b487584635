"""
Goal Aggregator - fundraiser totals from the volume ledger.

Each product's whole accumulated volume is priced at the tier that volume
currently qualifies for, so reported past margins move up when a new
threshold is crossed. This is a dashboard figure, not a per-sale history.
"""
from typing import Mapping

from .catalog import Catalog
from .models import Totals
from .pricing_engine import split


def progress_toward(group_margin: float, goal: float) -> float:
    """Fraction of the goal reached, clamped to 1. A goal <= 0 counts as reached."""
    if goal <= 0:
        return 1.0
    return min(1.0, group_margin / goal)


def aggregate(catalog: Catalog, volumes: Mapping[str, int], goal: float) -> Totals:
    """Sum split(product, V, V) over every product with volume V > 0."""
    revenue = platform = group = cost = 0.0
    units = 0

    for product_id, volume in volumes.items():
        product = catalog.get(product_id)
        if product is None or volume <= 0:
            continue
        batch = split(product, volume, volume)
        revenue += batch.revenue
        platform += batch.platform_margin
        group += batch.group_margin
        cost += batch.cost
        units += volume

    return Totals(
        revenue=revenue,
        platform_margin=platform,
        group_margin=group,
        cost=cost,
        units=units,
        progress=progress_toward(group, goal),
    )


def reached_milestones(units: int, milestones) -> list[tuple[int, str]]:
    """Reward milestones whose unit threshold is reached, lowest first."""
    return sorted((m for m in milestones if units >= m[0]), key=lambda m: m[0])
