# marketplace/domain/results.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class CartLineView:
    """Zamrozony odczyt pozycji koszyka sprzed jakiejkolwiek mutacji w checkout."""

    line_id: int
    product_id: int | None
    product_name: str | None
    stall_id: int | None
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class OrderSummary:
    order_id: int
    stall_id: int
    total_amount: Decimal
    status: str
    payment_id: int
    payment_status: str
    payment_method: str
    items: List[CartLineView] = field(default_factory=list)


@dataclass
class GroupFailure:
    stall_id: int
    line_ids: List[int]
    error: dict


@dataclass
class SkippedLine:
    line_id: int
    product_id: int | None
    reason: str


@dataclass
class CheckoutResult:
    orders: List[OrderSummary] = field(default_factory=list)
    errors: List[GroupFailure] = field(default_factory=list)
    skipped: List[SkippedLine] = field(default_factory=list)
    remaining_lines: int = 0
