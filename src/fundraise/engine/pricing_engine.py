"""
Pricing Engine - margin split and cart pricing with traceability.

Batch pricing convention: a batch of q units added to a product whose
ledger volume is v is priced entirely at the tier reached by v + q.
The goal aggregator applies the same rule to the whole accumulated volume
(split(product, V, V)), so a cart quote and the dashboard always agree
on which tier a sale lands in.
"""
import logging
from typing import Mapping, Optional

from .catalog import Catalog
from .formatting import format_euro
from .models import Product, Quote, QuoteLine, Split, Tier
from .tier_resolver import next_tier, resolve

logger = logging.getLogger(__name__)


def split(product: Product, cumulative_volume: int, quantity: int) -> Split:
    """
    Price a batch at the single tier active at cumulative_volume.

    The tier's per-unit rates apply to the whole quantity; a batch that
    straddles a threshold is not cut into sub-batches.
    """
    tier = resolve(product, cumulative_volume)
    cost = product.cost * quantity
    revenue = product.price * quantity
    return Split(
        tier=tier,
        cost=cost,
        revenue=revenue,
        platform_margin=tier.platform * quantity,
        group_margin=tier.group * quantity,
        total_margin=revenue - cost,
    )


class PricingEngine:
    """
    Prices carts and catalog views against the current volume ledger.

    The engine is stateless apart from its catalog; ledger volumes are
    passed in as a snapshot (product id -> units).
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def unit_rates(self, product_id: str, volume: int) -> Tier:
        """Tier currently reached by a product, for per-unit display."""
        return resolve(self.catalog[product_id], volume)

    def catalog_view(self, volumes: Mapping[str, int]) -> list[dict]:
        """Per-product display rows: prices, current rates, volume, next threshold."""
        rows = []
        for product in self.catalog:
            volume = volumes.get(product.id, 0)
            tier = resolve(product, volume)
            upcoming = next_tier(product, volume)
            rows.append({
                "id": product.id,
                "name": product.name,
                "description": product.description,
                "image": product.image,
                "price": product.price,
                "cost": product.cost,
                "platformRate": tier.platform,
                "groupRate": tier.group,
                "volume": volume,
                "nextTierAt": upcoming.min_volume if upcoming else None,
            })
        return rows

    def quote(self, items: Mapping[str, int], volumes: Mapping[str, int]) -> Quote:
        """
        Price cart items as if they were consolidated now.

        Args:
            items: Dict of {product_id: quantity}
            volumes: Ledger snapshot {product_id: units}

        Returns:
            Quote with buyer total (list price) and margin split per line
        """
        quote = Quote()
        for product_id, qty in items.items():
            line = self._quote_line(product_id, qty, volumes.get(product_id, 0))
            if line:
                quote.lines.append(line)
                quote.total += line.extended_price
        return quote

    def _quote_line(self, product_id: str, qty: int, volume: int) -> Optional[QuoteLine]:
        """Price a single cart line with trace."""
        product = self.catalog.get(product_id)
        if product is None:
            logger.warning(f"Skipping unknown product '{product_id}' in quote")
            return None
        if qty <= 0:
            return None

        volume_after = volume + qty
        batch = split(product, volume_after, qty)

        line = QuoteLine(
            product_id=product.id,
            name=product.name,
            quantity=qty,
            unit_price=product.price,
            extended_price=batch.revenue,
            split=batch,
        )
        line.add_trace("Product Lookup", "Found product in catalog", product.id)
        line.add_trace("Volume", f"{volume} recorded + {qty} in cart", str(volume_after))
        line.add_trace("Tier Resolution", f"Tier from {batch.tier.min_volume} units",
                       f"{format_euro(batch.tier.group)} group / {format_euro(batch.tier.platform)} platform")
        line.add_trace("Extension", f"Quantity {qty} × {format_euro(product.price)}", format_euro(batch.revenue))
        line.add_trace("Group Margin", f"Quantity {qty} × {format_euro(batch.tier.group)}", format_euro(batch.group_margin))
        return line
