"""Checkout: one order + payment per stall, atomic stock decrement per group."""

from decimal import Decimal

import pytest
from sqlalchemy import update

from marketplace.data.models import CartLineModel, OrderModel, PaymentModel, ProductModel
from marketplace.domain.errors import (
    EmptyCart,
    Forbidden,
    InternalError,
    InvalidInput,
    NoValidItems,
    Unauthorized,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.services.checkout_service import CheckoutService


@pytest.fixture()
def service(db, notifications):
    return CheckoutService(db, notification_service=notifications)


def _orders(db):
    return db.query(OrderModel).all()


def _payments(db):
    return db.query(PaymentModel).all()


class TestCheckoutValidation:
    def test_missing_identity_is_unauthorized(self, service):
        with pytest.raises(Unauthorized):
            service.checkout(None, "1 Market St")

    def test_user_that_is_not_a_buyer_is_forbidden(self, service, factory):
        vendor = factory.vendor()
        with pytest.raises(Forbidden):
            service.checkout(vendor.id, "1 Market St")

    def test_unknown_user_is_forbidden(self, service):
        with pytest.raises(Forbidden):
            service.checkout(999, "1 Market St")

    @pytest.mark.parametrize("address", [None, "", "   "])
    def test_blank_delivery_address_is_invalid(self, service, factory, address):
        buyer = factory.buyer()
        factory.line(buyer, factory.product(), quantity=1)

        with pytest.raises(InvalidInput):
            service.checkout(buyer.user_id, address)

        assert _orders(service.db) == []

    def test_buyer_without_cart_gets_empty_cart(self, service, factory, db):
        buyer = factory.buyer()
        with pytest.raises(EmptyCart):
            service.checkout(buyer.user_id, "1 Market St")

        assert _orders(db) == []
        assert _payments(db) == []

    def test_empty_cart_creates_nothing(self, service, factory, db):
        buyer = factory.buyer()
        factory.cart(buyer)

        with pytest.raises(EmptyCart):
            service.checkout(buyer.user_id, "1 Market St")

        assert _orders(db) == []
        assert _payments(db) == []

    def test_all_lines_unresolvable_is_no_valid_items(self, service, factory, db):
        buyer = factory.buyer()
        orphan = factory.product(stall_id=None)
        factory.line(buyer, orphan, quantity=1)

        with pytest.raises(NoValidItems):
            service.checkout(buyer.user_id, "1 Market St")

        assert _orders(db) == []


class TestCheckoutSingleStall:
    def test_creates_order_and_payment_from_snapshot_prices(self, service, factory, db):
        buyer = factory.buyer()
        stall = factory.stall()
        apple = factory.product(stall, price="10.00", stock=5)
        pear = factory.product(stall, price="2.50", stock=10)
        factory.line(buyer, apple, quantity=2)
        factory.line(buyer, pear, quantity=4)

        result = service.checkout(buyer.user_id, "1 Market St", "gcash")

        assert len(result.orders) == 1
        assert result.errors == []
        summary = result.orders[0]
        assert summary.stall_id == stall.id
        assert summary.total_amount == Decimal("30.00")
        assert summary.status == "pending"
        assert summary.payment_status == "pending"
        assert summary.payment_method == "gcash"

        order = db.get(OrderModel, summary.order_id)
        assert order.total_amount == Decimal("30.00")
        assert order.delivery_address == "1 Market St"
        assert order.payment.amount == order.total_amount
        assert sum(l.unit_price * l.quantity for l in order.lines) == order.total_amount

    def test_uses_snapshot_not_live_price(self, service, factory, db):
        buyer = factory.buyer()
        product = factory.product(price="10.00", stock=5)
        factory.line(buyer, product, quantity=1, unit_price="8.00")

        product.price = Decimal("99.00")
        db.commit()

        result = service.checkout(buyer.user_id, "1 Market St")

        assert result.orders[0].total_amount == Decimal("8.00")

    def test_decrements_stock_and_keeps_available_flag(self, service, factory, db):
        buyer = factory.buyer()
        stall = factory.stall()
        partial = factory.product(stall, stock=5)
        exact = factory.product(stall, stock=3)
        factory.line(buyer, partial, quantity=2)
        factory.line(buyer, exact, quantity=3)

        service.checkout(buyer.user_id, "1 Market St")

        db.expire_all()
        partial = db.get(ProductModel, partial.id)
        exact = db.get(ProductModel, exact.id)
        assert (partial.stock, partial.available) == (3, True)
        assert (exact.stock, exact.available) == (0, False)

    def test_lines_move_from_cart_to_order(self, service, factory, db):
        buyer = factory.buyer()
        line = factory.line(buyer, factory.product(stock=5), quantity=1)
        cart_id = line.cart_id

        result = service.checkout(buyer.user_id, "1 Market St")

        db.expire_all()
        line = db.get(CartLineModel, line.id)
        assert line.cart_id is None
        assert line.order_id == result.orders[0].order_id
        assert result.remaining_lines == 0
        # koszyk zostaje, tylko pusty
        assert CartRepo(db).get_cart_by_buyer(buyer.user_id).id == cart_id

    def test_second_checkout_of_emptied_cart_is_empty_cart(self, service, factory, db):
        buyer = factory.buyer()
        factory.line(buyer, factory.product(stock=5), quantity=1)

        service.checkout(buyer.user_id, "1 Market St")

        with pytest.raises(EmptyCart):
            service.checkout(buyer.user_id, "1 Market St")
        assert len(_orders(db)) == 1

    def test_default_payment_method_is_cod(self, service, factory):
        buyer = factory.buyer()
        factory.line(buyer, factory.product(stock=5), quantity=1)

        result = service.checkout(buyer.user_id, "1 Market St")

        assert result.orders[0].payment_method == "cod"

    def test_queues_notification_per_order(self, service, factory, notifications):
        buyer = factory.buyer()
        factory.line(buyer, factory.product(stock=5), quantity=1)

        result = service.checkout(buyer.user_id, "1 Market St")

        order = result.orders[0]
        assert notifications.sent == [(buyer.user_id, order.order_id, order.stall_id)]

    def test_notification_failure_keeps_order(self, db, factory, failing_notifications):
        service = CheckoutService(db, notification_service=failing_notifications)
        buyer = factory.buyer()
        factory.line(buyer, factory.product(stock=5), quantity=1)

        result = service.checkout(buyer.user_id, "1 Market St")

        assert len(result.orders) == 1
        assert len(_orders(db)) == 1


class TestCheckoutMultipleStalls:
    def test_one_order_per_stall(self, service, factory, db):
        buyer = factory.buyer()
        first, second = factory.stall(), factory.stall()
        factory.line(buyer, factory.product(first, price="1.00", stock=9), quantity=1)
        factory.line(buyer, factory.product(first, price="2.00", stock=9), quantity=1)
        factory.line(buyer, factory.product(second, price="3.00", stock=9), quantity=1)

        result = service.checkout(buyer.user_id, "1 Market St")

        assert len(result.orders) == 2
        totals = {o.stall_id: o.total_amount for o in result.orders}
        assert totals == {first.id: Decimal("3.00"), second.id: Decimal("3.00")}

        for order in _orders(db):
            stalls = {line.product.stall_id for line in order.lines}
            assert stalls == {order.stall_id}
        assert len(_payments(db)) == 2

    def test_insufficient_stock_fails_only_its_group(self, service, factory, db):
        buyer = factory.buyer()
        seller1, seller2 = factory.stall(), factory.stall()
        product_a = factory.product(seller1, price="10.00", stock=5)
        product_b = factory.product(seller2, price="5.00", stock=1)
        line_a = factory.line(buyer, product_a, quantity=2)
        line_b = factory.line(buyer, product_b, quantity=3)
        cart_id = line_b.cart_id

        result = service.checkout(buyer.user_id, "1 Market St")

        assert len(result.orders) == 1
        order1 = result.orders[0]
        assert order1.stall_id == seller1.id
        assert order1.total_amount == Decimal("20.00")

        assert len(result.errors) == 1
        failure = result.errors[0]
        assert failure.stall_id == seller2.id
        assert failure.line_ids == [line_b.id]
        assert failure.error == {
            "code": "insufficient_stock",
            "product_id": product_b.id,
            "product_name": product_b.name,
            "requested": 3,
            "available": 1,
        }

        db.expire_all()
        assert db.get(ProductModel, product_a.id).stock == 3
        assert db.get(ProductModel, product_b.id).stock == 1
        assert db.get(CartLineModel, line_a.id).order_id == order1.order_id

        line_b = db.get(CartLineModel, line_b.id)
        assert line_b.cart_id == cart_id
        assert line_b.order_id is None
        assert line_b.quantity == 3
        assert line_b.unit_price == Decimal("5.00")

        assert len(_orders(db)) == 1
        assert len(_payments(db)) == 1
        assert result.remaining_lines == 1

    def test_failed_group_rolls_back_earlier_decrements(self, service, factory, db):
        buyer = factory.buyer()
        stall = factory.stall()
        plenty = factory.product(stall, stock=10)
        scarce = factory.product(stall, stock=1)
        factory.line(buyer, plenty, quantity=4)
        factory.line(buyer, scarce, quantity=2)

        result = service.checkout(buyer.user_id, "1 Market St")

        assert result.orders == []
        assert result.errors[0].error["product_id"] == scarce.id

        db.expire_all()
        assert db.get(ProductModel, plenty.id).stock == 10
        assert db.get(ProductModel, plenty.id).available is True
        assert _orders(db) == []
        assert _payments(db) == []
        assert result.remaining_lines == 2

    def test_unresolvable_lines_are_skipped_and_reported(self, service, factory, db):
        buyer = factory.buyer()
        good = factory.line(buyer, factory.product(stock=5), quantity=1)
        orphan_product = factory.product(stall_id=None)
        orphan = factory.line(buyer, orphan_product, quantity=1)
        deleted_product = factory.product(stock=5)
        deleted = factory.line(buyer, deleted_product, quantity=1)
        db.delete(deleted_product)
        db.commit()

        result = service.checkout(buyer.user_id, "1 Market St")

        assert len(result.orders) == 1
        assert [l.line_id for l in result.orders[0].items] == [good.id]
        reasons = {s.line_id: s.reason for s in result.skipped}
        assert reasons == {orphan.id: "seller_not_found", deleted.id: "product_not_found"}
        # pominiete pozycje zostaja w koszyku
        assert result.remaining_lines == 2


class TestCheckoutConcurrency:
    def test_two_buyers_cannot_oversell(self, service, factory, db):
        product = factory.product(stock=5)
        first, second = factory.buyer(), factory.buyer()
        factory.line(first, product, quantity=3)
        factory.line(second, product, quantity=3)

        ok = service.checkout(first.user_id, "1 Market St")
        failed = service.checkout(second.user_id, "2 Market St")

        assert len(ok.orders) == 1
        assert failed.orders == []
        assert failed.errors[0].error["available"] == 2

        db.expire_all()
        product = db.get(ProductModel, product.id)
        assert product.stock == 2
        assert product.available is True

    def test_lines_already_taken_by_another_checkout_conflict(self, service, factory, db, monkeypatch):
        buyer = factory.buyer()
        line = factory.line(buyer, factory.product(stock=5), quantity=1)

        # inny checkout zabral pozycje miedzy odczytem a przepieciem
        monkeypatch.setattr(CartRepo, "move_lines_to_order", lambda self, cart_id, quantities, order_id: 0)

        result = service.checkout(buyer.user_id, "1 Market St")

        assert result.orders == []
        assert result.errors[0].error["code"] == "conflict"
        assert _orders(db) == []
        db.expire_all()
        assert db.get(CartLineModel, line.id).cart_id is not None

    def test_quantity_changed_after_read_conflicts(self, service, factory, db, monkeypatch):
        buyer = factory.buyer()
        product = factory.product(price="10.00", stock=10)
        line = factory.line(buyer, product, quantity=2)

        load_lines = service._load_lines

        def load_then_edit(cart_id):
            loaded = load_lines(cart_id)
            # update_item z innego requestu po odczycie koszyka
            db.execute(update(CartLineModel).where(CartLineModel.id == line.id).values(quantity=5))
            return loaded

        monkeypatch.setattr(service, "_load_lines", load_then_edit)

        result = service.checkout(buyer.user_id, "1 Market St")

        assert result.orders == []
        assert result.errors[0].error["code"] == "conflict"
        assert _orders(db) == []
        assert _payments(db) == []
        db.expire_all()
        assert db.get(ProductModel, product.id).stock == 10
        moved = db.get(CartLineModel, line.id)
        assert moved.cart_id is not None
        assert moved.order_id is None
        assert moved.quantity == 5


class TestCheckoutPersistenceErrors:
    def test_database_error_becomes_internal_error(self, service, factory, monkeypatch):
        from sqlalchemy.exc import OperationalError

        buyer = factory.buyer()
        factory.line(buyer, factory.product(stock=5), quantity=1)

        def boom(self, *args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("connection lost"))

        monkeypatch.setattr("marketplace.repos.order_repo.OrderRepo.create_order", boom)

        with pytest.raises(InternalError):
            service.checkout(buyer.user_id, "1 Market St")
