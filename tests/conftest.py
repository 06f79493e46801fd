import os

# przed importem marketplace: settings czyta env przy imporcie
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from marketplace.api import create_app
from marketplace.data.database import get_db, init_db, make_engine
from marketplace.data.models import (
    UserModel,
    BuyerModel,
    StallModel,
    ProductModel,
    CartModel,
    CartLineModel,
)


class FakeNotificationService:
    """Zbiera wywolania zamiast wysylac taski do Celery."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send_order_notification(self, buyer_id, order_id, stall_id):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.sent.append((buyer_id, order_id, stall_id))


class Factory:
    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self):
        self._seq += 1
        return self._seq

    def buyer(self, address="1 Market St") -> BuyerModel:
        n = self._next()
        user = UserModel(full_name=f"Buyer {n}", email=f"buyer{n}@example.com", role="buyer")
        self.db.add(user)
        self.db.flush()
        buyer = BuyerModel(user_id=user.id, address=address)
        self.db.add(buyer)
        self.db.commit()
        return buyer

    def vendor(self) -> UserModel:
        n = self._next()
        user = UserModel(full_name=f"Vendor {n}", email=f"vendor{n}@example.com", role="vendor")
        self.db.add(user)
        self.db.commit()
        return user

    def stall(self, vendor=None, category="general") -> StallModel:
        vendor = vendor or self.vendor()
        stall = StallModel(vendor_id=vendor.id, name=f"Stall {self._next()}", category=category)
        self.db.add(stall)
        self.db.commit()
        return stall

    def product(self, stall=None, price="10.00", stock=5, stall_id=...) -> ProductModel:
        if stall_id is ...:
            stall_id = (stall or self.stall()).id
        product = ProductModel(
            stall_id=stall_id,
            name=f"Product {self._next()}",
            price=Decimal(price),
            stock=stock,
            available=stock > 0,
        )
        self.db.add(product)
        self.db.commit()
        return product

    def cart(self, buyer) -> CartModel:
        cart = self.db.query(CartModel).filter_by(buyer_id=buyer.user_id).one_or_none()
        if cart:
            return cart
        cart = CartModel(buyer_id=buyer.user_id, version=1)
        self.db.add(cart)
        self.db.commit()
        return cart

    def line(self, buyer, product, quantity=1, unit_price=None) -> CartLineModel:
        cart = self.cart(buyer)
        line = CartLineModel(
            cart_id=cart.id,
            product_id=product.id,
            quantity=quantity,
            unit_price=Decimal(unit_price) if unit_price is not None else product.price,
        )
        self.db.add(line)
        self.db.commit()
        return line


@pytest.fixture()
def engine():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def factory(db):
    return Factory(db)


@pytest.fixture()
def notifications():
    return FakeNotificationService()


@pytest.fixture()
def client(session_factory):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app)


@pytest.fixture()
def failing_notifications():
    return FakeNotificationService(fail=True)
