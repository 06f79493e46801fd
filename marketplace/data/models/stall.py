from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime

from marketplace.data.database import Base


class StallModel(Base):
    """Stoisko = sprzedawca. Kazde zamowienie nalezy do dokladnie jednego stoiska."""

    __tablename__ = "stalls"

    id = Column(Integer, primary_key=True)
    vendor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, default="general")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
