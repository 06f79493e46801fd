# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime

from marketplace.utils.settings import DEFAULT_PAYMENT_METHOD


class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(1, gt=0, description="Ilość produktu (musi być > 0)")


class CartItemUpdate(BaseModel):
    """Zmiana ilosci, 0 usuwa pozycje."""

    quantity: int = Field(..., ge=0, description="Nowa ilość (0 usuwa pozycję)")


class CartLineOut(BaseModel):
    line_id: int
    product_id: int | None
    product_name: str | None = None
    stall_id: int | None = None
    quantity: int
    unit_price: Decimal
    current_price: Decimal | None = None
    stock: int | None = None
    available: bool | None = None


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: int
    buyer_id: int
    version: int
    items: List[CartLineOut]
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class CheckoutIn(BaseModel):
    # walidacja adresu w CheckoutService (InvalidInput -> 400, nie 422)
    delivery_address: str | None = None
    payment_method: str = Field(DEFAULT_PAYMENT_METHOD, min_length=1, max_length=100)


class OrderLineOut(BaseModel):
    line_id: int
    product_id: int | None
    quantity: int
    unit_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderSummaryOut(BaseModel):
    order_id: int
    stall_id: int
    total_amount: Decimal
    status: str
    payment_id: int
    payment_status: str
    payment_method: str
    items: List[OrderLineOut]

    model_config = ConfigDict(from_attributes=True)


class GroupFailureOut(BaseModel):
    stall_id: int
    line_ids: List[int]
    error: dict


class SkippedLineOut(BaseModel):
    line_id: int
    product_id: int | None
    reason: str


class CheckoutOut(BaseModel):
    message: str
    orders: List[OrderSummaryOut]
    total_orders: int
    errors: List[GroupFailureOut] = []
    skipped: List[SkippedLineOut] = []
    remaining_lines: int = 0


class PaymentOut(BaseModel):
    payment_id: int
    amount: Decimal
    method: str
    status: str


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    order_id: int
    buyer_id: int
    stall_id: int
    status: str
    total_amount: Decimal
    delivery_address: str
    created_at: datetime
    updated_at: datetime
    payment: PaymentOut | None = None
    items: List[OrderLineOut] = []


class VendorOrdersOut(BaseModel):
    orders: List[OrderOut]
    total_count: int
