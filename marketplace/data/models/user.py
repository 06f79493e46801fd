from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="buyer")  # buyer, vendor

    buyer = relationship("BuyerModel", back_populates="user", uselist=False)


class BuyerModel(Base):
    __tablename__ = "buyers"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    address = Column(Text, nullable=True)

    user = relationship("UserModel", back_populates="buyer")
