# marketplace/services/checkout_service.py
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.domain.errors import (
    ConcurrencyConflict,
    EmptyCart,
    InsufficientStock,
    InternalError,
    InvalidInput,
    NoValidItems,
    Unauthorized,
)
from marketplace.domain.results import (
    CartLineView,
    CheckoutResult,
    GroupFailure,
    OrderSummary,
    SkippedLine,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.directory_service import DirectoryService
from marketplace.services.notification_service import NotificationService
from marketplace.utils.settings import DEFAULT_PAYMENT_METHOD
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

_CENTS = Decimal("0.01")


class CheckoutService:
    """
    Zamiana koszyka kupujacego na zamowienia, jedno zamowienie + platnosc na stoisko.

    Kazda grupa (stoisko) to osobna transakcja: zamowienie, platnosc,
    przepiecie pozycji i zdjecie stanu sa widoczne razem albo wcale.
    Blad jednej grupy nie cofa pozostalych.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.directory = DirectoryService(db)
        self.notification_service = notification_service or NotificationService()

    def checkout(
        self,
        buyer_id: int | None,
        delivery_address: str | None,
        payment_method: str = DEFAULT_PAYMENT_METHOD,
    ) -> CheckoutResult:
        if buyer_id is None:
            raise Unauthorized("Brak tozsamosci uzytkownika")

        address = (delivery_address or "").strip()
        if not address:
            raise InvalidInput("Adres dostawy jest wymagany")

        method = (payment_method or "").strip() or DEFAULT_PAYMENT_METHOD

        try:
            buyer = self.directory.resolve_buyer(buyer_id)
            return self._checkout(buyer.user_id, address, method)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Checkout failed for buyer {buyer_id}: {e}")
            raise InternalError("Nie udalo sie utworzyc zamowienia") from e

    def _checkout(self, buyer_id: int, address: str, method: str) -> CheckoutResult:
        cart = self.carts.get_cart_by_buyer(buyer_id)
        if not cart:
            raise EmptyCart("Koszyk jest pusty")

        cart_id = cart.id
        lines, skipped = self._load_lines(cart_id)

        if not lines and not skipped:
            raise EmptyCart("Koszyk jest pusty")

        groups = self._group_by_stall(lines)
        if not groups:
            raise NoValidItems("Brak pozycji z poprawnym produktem i stoiskiem")

        # koniec odczytu, od tego miejsca kazda grupa w swojej transakcji
        self.db.commit()

        result = CheckoutResult(skipped=skipped)

        for stall_id, group in groups.items():
            try:
                summary = self._place_group_order(buyer_id, cart_id, stall_id, group, address, method)
            except (InsufficientStock, ConcurrencyConflict) as e:
                self.db.rollback()
                logger.warning(f"Checkout group for stall {stall_id} rolled back: {e}")
                result.errors.append(
                    GroupFailure(
                        stall_id=stall_id,
                        line_ids=[line.line_id for line in group],
                        error=self._error_body(e),
                    )
                )
                continue

            result.orders.append(summary)
            self._notify(buyer_id, summary)

        # koszyk zostaje, moze byc pusty
        result.remaining_lines = self.carts.count_lines(cart_id)
        self.db.commit()

        logger.info(
            f"Checkout for buyer {buyer_id}: {len(result.orders)} orders, "
            f"{len(result.errors)} failed groups, {len(result.skipped)} skipped lines, "
            f"{result.remaining_lines} lines left in cart {cart_id}"
        )
        return result

    def _load_lines(self, cart_id: int) -> Tuple[List[CartLineView], List[SkippedLine]]:
        lines: List[CartLineView] = []
        skipped: List[SkippedLine] = []

        for line, product, stall in self.carts.get_lines_with_products(cart_id):
            if product is None:
                reason = "product_not_found"
            elif stall is None:
                reason = "seller_not_found"
            else:
                lines.append(
                    CartLineView(
                        line_id=line.id,
                        product_id=product.id,
                        product_name=product.name,
                        stall_id=stall.id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                    )
                )
                continue

            logger.warning(f"Line {line.id} in cart {cart_id} skipped: {reason}")
            skipped.append(SkippedLine(line_id=line.id, product_id=line.product_id, reason=reason))

        return lines, skipped

    @staticmethod
    def _group_by_stall(lines: List[CartLineView]) -> Dict[int, List[CartLineView]]:
        groups: Dict[int, List[CartLineView]] = defaultdict(list)
        for line in lines:
            groups[line.stall_id].append(line)
        return dict(groups)

    def _place_group_order(
        self,
        buyer_id: int,
        cart_id: int,
        stall_id: int,
        group: List[CartLineView],
        address: str,
        method: str,
    ) -> OrderSummary:
        # zawsze ceny ze snapshotu pozycji, nigdy aktualna cena produktu
        total = sum((line.subtotal for line in group), Decimal("0.00")).quantize(_CENTS)

        order = self.orders.create_order(buyer_id, stall_id, total, address)
        payment = self.orders.create_payment(order, method)

        # ilosc musi byc ta sama co w odczycie, inaczej total i zdjety stan by sie rozjechaly
        quantities = {line.line_id: line.quantity for line in group}
        moved = self.carts.move_lines_to_order(cart_id, quantities, order.id)
        if moved != len(quantities):
            raise ConcurrencyConflict(
                "Pozycje koszyka zostaly zmienione albo zamowione przez inny checkout"
            )

        for line in group:
            if not self.products.decrement_stock(line.product_id, line.quantity):
                available = self.products.get_stock(line.product_id)
                raise InsufficientStock(line.product_id, line.product_name, line.quantity, available)

        summary = OrderSummary(
            order_id=order.id,
            stall_id=stall_id,
            total_amount=total,
            status=order.status,
            payment_id=payment.id,
            payment_status=payment.status,
            payment_method=payment.method,
            items=list(group),
        )

        self.db.commit()
        logger.info(f"Order {summary.order_id} created for buyer {buyer_id} at stall {stall_id}, total {total}")
        return summary

    def _notify(self, buyer_id: int, summary: OrderSummary) -> None:
        try:
            self.notification_service.send_order_notification(buyer_id, summary.order_id, summary.stall_id)
        except Exception as e:
            logger.warning(f"Failed to queue notification for order {summary.order_id}: {e}")

    @staticmethod
    def _error_body(error: Exception) -> dict:
        if isinstance(error, InsufficientStock):
            return error.to_dict()
        return {"code": getattr(error, "code", "error"), "message": str(error)}
