"""
Data models for the margin engine.

Catalog, split and order records are frozen dataclasses; only the quote
lines collect a trace while they are being priced.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Tier:
    """A volume threshold with per-unit platform and group margins."""
    min_volume: int
    platform: float
    group: float

    @property
    def total(self) -> float:
        """Margin per unit handed out by this tier (platform + group)."""
        return self.platform + self.group


@dataclass(frozen=True)
class Product:
    """A sellable catalog item. Tiers are sorted by ascending threshold."""
    id: str
    name: str
    cost: float
    price: float
    tiers: tuple[Tier, ...]
    description: str = ""
    image: str = ""

    @property
    def margin_pool(self) -> float:
        """Per-unit margin available to split (price - cost)."""
        return self.price - self.cost

    def inconsistent_tiers(self) -> list[Tier]:
        """Tiers handing out more than the margin pool."""
        return [t for t in self.tiers if t.total > self.margin_pool + 1e-9]


@dataclass(frozen=True)
class LineItem:
    """A product id and a quantity, as submitted by a cart or a voucher."""
    product_id: str
    quantity: int

    def to_dict(self) -> dict:
        return {"productId": self.product_id, "quantity": self.quantity}


@dataclass(frozen=True)
class Split:
    """Cost, revenue and margin breakdown of a priced batch."""
    tier: Tier
    cost: float
    revenue: float
    platform_margin: float
    group_margin: float
    total_margin: float


@dataclass(frozen=True)
class Totals:
    """Fundraiser totals derived from the volume ledger."""
    revenue: float = 0.0
    platform_margin: float = 0.0
    group_margin: float = 0.0
    cost: float = 0.0
    units: int = 0
    progress: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class OrderRecord:
    """An encoded paper voucher. Never mutated once appended to the log."""
    id: str
    buyer: str
    items: tuple[LineItem, ...]
    created_at: str

    @property
    def unit_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "buyer": self.buyer,
            "items": [item.to_dict() for item in self.items],
            "createdAt": self.created_at,
        }


@dataclass
class QuoteLine:
    """A single priced line of a cart quote."""
    product_id: str
    name: str
    quantity: int
    unit_price: float
    extended_price: float
    split: Split
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class Quote:
    """Priced cart: buyer-facing total plus the margin split of every line."""
    lines: list[QuoteLine] = field(default_factory=list)
    total: float = 0.0

    @property
    def units(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def group_margin(self) -> float:
        return sum(line.split.group_margin for line in self.lines)

    @property
    def platform_margin(self) -> float:
        return sum(line.split.platform_margin for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "units": self.units,
            "groupMargin": self.group_margin,
            "platformMargin": self.platform_margin,
            "lines": [
                {
                    "productId": line.product_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "unitPrice": line.unit_price,
                    "extendedPrice": line.extended_price,
                    "tierMin": line.split.tier.min_volume,
                    "groupMargin": line.split.group_margin,
                    "platformMargin": line.split.platform_margin,
                }
                for line in self.lines
            ],
        }
