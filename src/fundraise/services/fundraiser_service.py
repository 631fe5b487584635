"""
Fundraiser Service - one group's selling session.

Owns the volume ledger, the paper-order log and the shopping cart, and
exposes the operations the API and the UI call. The ledger lives as long
as the session; nothing here is persisted locally.
"""
import logging
import re
from typing import Optional

from ..engine.aggregator import aggregate, reached_milestones
from ..engine.catalog import Catalog
from ..engine.errors import InvalidOrderError, UpstreamPersistenceError
from ..engine.ledger import LineItems, OrderConsolidator, OrderLog, VolumeLedger, normalize_line_items
from ..engine.models import OrderRecord, Quote, Totals
from ..engine.pricing_engine import PricingEngine
from ..config.settings import DEFAULT_MILESTONES
from .order_recorder import OrderRecorder

logger = logging.getLogger(__name__)


class Cart:
    """Product id -> quantity. An entry dropping to zero is removed."""

    def __init__(self):
        self._items: dict[str, int] = {}

    def add(self, product_id: str, qty: int = 1):
        self._items[product_id] = self._items.get(product_id, 0) + qty
        if self._items[product_id] <= 0:
            del self._items[product_id]

    def update_qty(self, product_id: str, delta: int):
        qty = max(0, self._items.get(product_id, 0) + delta)
        if qty == 0:
            self._items.pop(product_id, None)
        else:
            self._items[product_id] = qty

    def items(self) -> dict[str, int]:
        return dict(self._items)

    def clear(self):
        self._items.clear()

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def unit_count(self) -> int:
        return sum(self._items.values())


class FundraiserSession:
    """Ledger, order log, cart and goal of a single fundraising group."""

    def __init__(
        self,
        catalog: Catalog,
        recorder: Optional[OrderRecorder] = None,
        goal: float = 3000.0,
        group_name: str = "Scouts de Namur",
        shop_base_url: str = "https://fundraise.app",
        milestones=DEFAULT_MILESTONES,
    ):
        self.catalog = catalog
        self.recorder = recorder
        self.goal = goal
        self.group_name = group_name
        self.shop_base_url = shop_base_url.rstrip('/')
        self.milestones = tuple(milestones)

        self.pricing = PricingEngine(catalog)
        self.ledger = VolumeLedger(catalog.ids())
        self.order_log = OrderLog()
        self.consolidator = OrderConsolidator(self.ledger, self.order_log)
        self.cart = Cart()

    @classmethod
    def from_settings(cls, catalog: Catalog, settings, recorder: Optional[OrderRecorder] = None) -> 'FundraiserSession':
        return cls(
            catalog,
            recorder=recorder,
            goal=settings.default_goal,
            group_name=settings.group_name,
            shop_base_url=settings.shop_base_url,
            milestones=settings.milestones,
        )

    # Cart

    def _require_product(self, product_id: str):
        if product_id not in self.catalog:
            raise InvalidOrderError(f"Unknown product id: {product_id}")

    def add_to_cart(self, product_id: str, qty: int = 1):
        self._require_product(product_id)
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise InvalidOrderError(f"Quantity must be an integer >= 1, got {qty!r}")
        self.cart.add(product_id, qty)

    def update_qty(self, product_id: str, delta: int):
        self._require_product(product_id)
        self.cart.update_qty(product_id, delta)

    def cart_quote(self) -> Quote:
        return self.pricing.quote(self.cart.items(), self.ledger.snapshot())

    def checkout(self) -> Quote:
        """
        Commit the cart to the ledger and empty it.

        Online checkouts are not journaled in the order log. The quote is
        priced from the volumes this checkout was applied on top of.
        """
        if self.cart.is_empty:
            return self.cart_quote()
        items = self.cart.items()
        after = self.consolidator.consolidate(items)
        before = {pid: volume - items.get(pid, 0) for pid, volume in after.items()}
        quote = self.pricing.quote(items, before)
        self.cart.clear()
        logger.info(f"Checkout of {quote.units} units for {self.group_name}")
        return quote

    # Orders

    def order_total(self, items: LineItems) -> float:
        """Buyer total (list price) of validated line items."""
        return sum(self.catalog[line.product_id].price * line.quantity
                   for line in normalize_line_items(items) if line.product_id in self.catalog)

    def encode_paper_order(self, buyer: str, items: LineItems, email: Optional[str] = None) -> OrderRecord:
        """
        Consolidate and journal a paper voucher, then hand it to the recorder.

        A recorder failure is re-raised with the record attached as
        `order_record`; the local consolidation stays applied.
        """
        record = self.consolidator.consolidate_paper_order(buyer, items)

        if self.recorder is not None:
            try:
                self.recorder.record(
                    buyer=record.buyer,
                    group=self.group_name,
                    items=list(record.items),
                    email=email or "",
                    total=self.order_total(record.items),
                )
            except UpstreamPersistenceError as e:
                logger.error(f"Paper voucher {record.id} kept locally, recording failed: {e}")
                e.order_record = record
                raise
        return record

    def submit_order(self, buyer: str, group: str, items: LineItems,
                     email: Optional[str] = None, total: Optional[float] = None) -> Optional[str]:
        """
        Validate an order and forward it to the recorder.

        Returns the stored record id. The ledger is not touched.
        """
        buyer = (buyer or "").strip()
        group = (group or "").strip()
        lines = normalize_line_items(items)
        if not buyer or not group or not lines:
            raise InvalidOrderError("Invalid payload")
        unknown = sorted({line.product_id for line in lines if line.product_id not in self.catalog})
        if unknown:
            raise InvalidOrderError(f"Unknown product id(s): {', '.join(unknown)}")

        if self.recorder is None:
            raise UpstreamPersistenceError("Order recording is not configured")

        if total is None:
            total = self.order_total(lines)
        return self.recorder.record(buyer=buyer, group=group, items=lines, email=email or "", total=total)

    # Dashboard

    def totals(self) -> Totals:
        return aggregate(self.catalog, self.ledger.snapshot(), self.goal)

    def volumes(self) -> list[dict]:
        """Per-product volume and the group margin per unit currently reached."""
        snapshot = self.ledger.snapshot()
        rows = []
        for product in self.catalog:
            volume = snapshot[product.id]
            tier = self.pricing.unit_rates(product.id, volume)
            rows.append({"id": product.id, "name": product.name, "volume": volume, "groupRate": tier.group})
        return rows

    def reached_milestones(self) -> list[tuple[int, str]]:
        return reached_milestones(self.ledger.total_units, self.milestones)

    def set_goal(self, goal: float):
        self.goal = float(goal)

    def rename_group(self, name: str):
        self.group_name = name

    def shop_url(self) -> str:
        """Mini-shop link: group name lower-cased, whitespace runs as '-'."""
        slug = re.sub(r"\s+", "-", self.group_name.lower())
        return f"{self.shop_base_url}/{slug}"
