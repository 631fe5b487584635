"""
Pydantic request models shared by the API routers.

Line items travel as {productId, quantity}.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..engine.models import LineItem


class LineItemIn(BaseModel):
    """A line item on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int = Field(ge=1)

    def to_line_item(self) -> LineItem:
        return LineItem(product_id=self.product_id, quantity=self.quantity)


class CartItemIn(LineItemIn):
    quantity: int = Field(default=1, ge=1)


class QuantityDelta(BaseModel):
    delta: int


class GoalUpdate(BaseModel):
    goal: float


class PaperOrderIn(BaseModel):
    """Paper voucher encoded by a group admin."""
    buyer: str
    items: list[LineItemIn]
    email: Optional[str] = None


class OrderIn(BaseModel):
    """Order forwarded to the record store."""
    buyer: str = ""
    email: Optional[str] = None
    group: str = ""
    items: list[LineItemIn] = Field(default_factory=list)
    total: Optional[float] = None
