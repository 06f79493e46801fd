# marketplace/services/order_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.domain.errors import Forbidden, InvalidInput, NotFound
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.directory_service import DirectoryService

SORT_OPTIONS = ("newest", "oldest", "date-updated")


class OrderService:
    """
    Odczyt zamowien (query). Zamowienia powstaja tylko w CheckoutService.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)
        self.directory = DirectoryService(db)

    def get_order(self, user_id: int | None, order_id: int) -> Dict[str, Any]:
        buyer = self.directory.resolve_buyer(user_id)

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Zamowienie nie istnieje")

        if order.buyer_id != buyer.user_id:
            raise Forbidden("Brak dostepu do zamowienia")

        return self._order_dict(order)

    def list_buyer_orders(self, user_id: int | None) -> List[Dict[str, Any]]:
        buyer = self.directory.resolve_buyer(user_id)
        return [self._order_dict(o) for o in self.repo.list_by_buyer(buyer.user_id)]

    def list_vendor_orders(
        self,
        stall_id: int | None = None,
        categories: List[str] | None = None,
        sort_by: str = "newest",
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        if page < 1 or limit < 1:
            raise InvalidInput("page i limit musza byc >= 1")
        if sort_by not in SORT_OPTIONS:
            # nieznane sortowanie = domyslne
            sort_by = "newest"

        orders, total = self.repo.list_vendor_orders(
            stall_id=stall_id,
            categories=categories,
            sort_by=sort_by,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {
            "orders": [self._order_dict(o) for o in orders],
            "total_count": total,
        }

    @staticmethod
    def _order_dict(order: OrderModel) -> Dict[str, Any]:
        payment = order.payment
        return {
            "order_id": order.id,
            "buyer_id": order.buyer_id,
            "stall_id": order.stall_id,
            "status": order.status,
            "total_amount": order.total_amount,
            "delivery_address": order.delivery_address,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "payment": {
                "payment_id": payment.id,
                "amount": payment.amount,
                "method": payment.method,
                "status": payment.status,
            } if payment else None,
            "items": [
                {
                    "line_id": line.id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                }
                for line in sorted(order.lines, key=lambda l: l.id)
            ],
        }
