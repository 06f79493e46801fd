#marketplace/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Numeric, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    buyer_id = Column(Integer, ForeignKey("buyers.user_id", ondelete="CASCADE"), nullable=False, unique=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    lines = relationship("CartLineModel", back_populates="cart")


class CartLineModel(Base):
    """
    Pozycja koszyka albo zamowienia, nigdy obu naraz.
    unit_price to snapshot ceny z momentu dodania do koszyka.
    """

    __tablename__ = "cart_lines"
    __table_args__ = (
        CheckConstraint("cart_id IS NULL OR order_id IS NULL", name="ck_cart_lines_cart_xor_order"),
        CheckConstraint("quantity > 0", name="ck_cart_lines_quantity_positive"),
        UniqueConstraint("cart_id", "product_id", name="u_cart_product"),
    )

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    cart = relationship("CartModel", back_populates="lines")
    order = relationship("OrderModel", back_populates="lines")
    product = relationship("ProductModel")
