from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from marketplace.data.database import Base


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, unique=True)
    payer_buyer_id = Column(Integer, ForeignKey("buyers.user_id", ondelete="SET NULL"), nullable=True)
    stall_id = Column(Integer, ForeignKey("stalls.id", ondelete="SET NULL"), nullable=True)

    amount = Column(Numeric(14, 2), nullable=False)
    method = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, paid, failed, refunded
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    order = relationship("OrderModel", back_populates="payment")
