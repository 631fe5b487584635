"""
Volume Ledger and Order Consolidator.

The ledger is the only mutable state of the engine: one running unit
count per catalog product. Orders are merged into it all-or-nothing under
a single-writer lock.
"""
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Iterable, Iterator, Mapping, Union

from .errors import InvalidOrderError
from .models import LineItem, OrderRecord

logger = logging.getLogger(__name__)

LineItems = Union[Mapping[str, int], Iterable[LineItem]]


class VolumeLedger:
    """Per-product cumulative unit counts, created at zero for every product."""

    def __init__(self, product_ids: Iterable[str]):
        self._volumes: dict[str, int] = {pid: 0 for pid in product_ids}
        self._lock = threading.Lock()

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._volumes

    def volume(self, product_id: str) -> int:
        return self._volumes[product_id]

    def snapshot(self) -> dict[str, int]:
        """Copy of the current volumes."""
        with self._lock:
            return dict(self._volumes)

    @property
    def total_units(self) -> int:
        return sum(self.snapshot().values())

    def apply(self, increments: Mapping[str, int]) -> dict[str, int]:
        """
        Add every increment in one critical section.

        Raises InvalidOrderError, with nothing applied, if any product id
        is not tracked. Returns the volumes right after the update.
        """
        with self._lock:
            unknown = [pid for pid in increments if pid not in self._volumes]
            if unknown:
                raise InvalidOrderError(f"Unknown product id(s): {', '.join(sorted(unknown))}")

            for product_id, qty in increments.items():
                self._volumes[product_id] += qty
            return dict(self._volumes)


class OrderLog:
    """Append-only journal of encoded paper vouchers."""

    def __init__(self):
        self._records: list[OrderRecord] = []
        self._lock = threading.Lock()

    def append(self, record: OrderRecord):
        with self._lock:
            self._records.append(record)

    def records(self) -> tuple[OrderRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def __iter__(self) -> Iterator[OrderRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        return len(self._records)


def normalize_line_items(items: LineItems) -> list[LineItem]:
    """
    Turn a cart dict or a sequence of line items into positive line items.

    Lines with a zero or negative quantity are dropped. A quantity that is
    not an integer raises InvalidOrderError.
    """
    if isinstance(items, Mapping):
        pairs = list(items.items())
    else:
        pairs = [(item.product_id, item.quantity) for item in items]

    normalized = []
    for product_id, qty in pairs:
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise InvalidOrderError(f"Quantity for '{product_id}' must be an integer, got {qty!r}")
        if qty <= 0:
            continue
        normalized.append(LineItem(product_id=str(product_id), quantity=qty))
    return normalized


def consolidate(ledger: VolumeLedger, items: LineItems) -> dict[str, int]:
    """
    Merge an order's line items into the ledger as one atomic update.

    Unknown product ids raise InvalidOrderError and leave the ledger
    untouched. An empty order is a no-op.

    Returns:
        Snapshot of the ledger after the update
    """
    lines = normalize_line_items(items)

    increments: dict[str, int] = {}
    for line in lines:
        increments[line.product_id] = increments.get(line.product_id, 0) + line.quantity

    snapshot = ledger.apply(increments)

    if increments:
        logger.info(f"Consolidated {sum(increments.values())} units over {len(increments)} product(s)")
        logger.debug(f"Ledger volumes: {snapshot}")
    return snapshot


class OrderConsolidator:
    """Consolidates online checkouts and paper vouchers into one ledger."""

    def __init__(self, ledger: VolumeLedger, order_log: OrderLog):
        self.ledger = ledger
        self.order_log = order_log

    def consolidate(self, items: LineItems) -> dict[str, int]:
        """Online checkout: update the ledger, no order record."""
        return consolidate(self.ledger, items)

    def consolidate_paper_order(self, buyer: str, items: LineItems) -> OrderRecord:
        """
        Encode a paper voucher: validate, update the ledger, journal it.

        Raises InvalidOrderError for a blank buyer, an order with no
        positive line, or an unknown product. Nothing is changed then.
        """
        buyer = (buyer or "").strip()
        if not buyer:
            raise InvalidOrderError("Paper voucher needs a buyer name")

        lines = normalize_line_items(items)
        if not lines:
            raise InvalidOrderError("Paper voucher has no items")

        consolidate(self.ledger, lines)

        record = OrderRecord(
            id=str(uuid.uuid4()),
            buyer=buyer,
            items=tuple(lines),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self.order_log.append(record)
        logger.info(f"Paper voucher {record.id} recorded for {buyer} ({record.unit_count} units)")
        return record
