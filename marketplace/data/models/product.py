from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)

    id = Column(Integer, primary_key=True)
    stall_id = Column(Integer, ForeignKey("stalls.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(250), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    # available == (stock > 0), pilnuje tego ProductRepo.decrement_stock
    stock = Column(Integer, nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=False)

    stall = relationship("StallModel")
