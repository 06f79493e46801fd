# marketplace/data/seed.py
from decimal import Decimal

from sqlalchemy import select

from marketplace.data.database import SessionLocal, init_db
from marketplace.data.models import (
    UserModel,
    BuyerModel,
    StallModel,
    ProductModel,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    # (stoisko, nazwa, cena, stan)
    ("Aling Nena's Fruits", "Mango (1 kg)", Decimal("120.00"), 40),
    ("Aling Nena's Fruits", "Calamansi (500 g)", Decimal("45.50"), 25),
    ("Mang Tomas Hardware", "Claw hammer", Decimal("350.00"), 5),
    ("Mang Tomas Hardware", "Wood screws (100 pcs)", Decimal("89.00"), 0),
]


def seed(db=None):
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.execute(select(UserModel)).first():
            logger.info("Database already seeded")
            return

        buyer = UserModel(full_name="Juan Dela Cruz", email="buyer@example.com", role="buyer")
        vendor = UserModel(full_name="Nena Santos", email="vendor@example.com", role="vendor")
        db.add_all([buyer, vendor])
        db.flush()

        db.add(BuyerModel(user_id=buyer.id, address="123 Rizal St, Quezon City"))

        stalls = {}
        for stall_name, name, price, stock in PRODUCTS:
            if stall_name not in stalls:
                stalls[stall_name] = StallModel(vendor_id=vendor.id, name=stall_name, category="market")
                db.add(stalls[stall_name])
                db.flush()
            db.add(
                ProductModel(
                    stall_id=stalls[stall_name].id,
                    name=name,
                    price=price,
                    stock=stock,
                    available=stock > 0,
                )
            )

        db.commit()
        logger.info(f"Seeded buyer {buyer.id}, vendor {vendor.id}, {len(PRODUCTS)} products")
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    init_db()
    seed()
