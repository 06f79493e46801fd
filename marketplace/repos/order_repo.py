# marketplace/repos/order_repo.py
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.order import OrderModel
from marketplace.data.models.payment import PaymentModel
from marketplace.data.models.stall import StallModel

_SORTS = {
    "newest": (OrderModel.created_at.desc(), OrderModel.id.desc()),
    "oldest": (OrderModel.created_at.asc(), OrderModel.id.asc()),
    "date-updated": (OrderModel.updated_at.desc(), OrderModel.id.desc()),
}


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    # bez commita, transakcje kontroluje CheckoutService
    def create_order(
        self, buyer_id: int, stall_id: int, total: Decimal, delivery_address: str
    ) -> OrderModel:
        order = OrderModel(
            buyer_id=buyer_id,
            stall_id=stall_id,
            status="pending",
            total_amount=total,
            delivery_address=delivery_address,
        )
        self.db.add(order)
        self.db.flush()
        return order

    def create_payment(self, order: OrderModel, method: str) -> PaymentModel:
        payment = PaymentModel(
            order_id=order.id,
            payer_buyer_id=order.buyer_id,
            stall_id=order.stall_id,
            amount=order.total_amount,
            method=method,
            status="pending",
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.lines), selectinload(OrderModel.payment))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def list_by_buyer(self, buyer_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.lines), selectinload(OrderModel.payment))
                .where(OrderModel.buyer_id == buyer_id)
                .order_by(*_SORTS["newest"])
            ).scalars()
        )

    def list_vendor_orders(
        self,
        stall_id: int | None = None,
        categories: List[str] | None = None,
        sort_by: str = "newest",
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[OrderModel], int]:
        filters = []
        if stall_id is not None:
            filters.append(OrderModel.stall_id == stall_id)
        if categories:
            filters.append(StallModel.category.in_(categories))

        order_by = _SORTS.get(sort_by, _SORTS["newest"])

        rows = self.db.execute(
            select(OrderModel)
            .join(StallModel, OrderModel.stall_id == StallModel.id)
            .options(selectinload(OrderModel.lines), selectinload(OrderModel.payment))
            .where(*filters)
            .order_by(*order_by)
            .limit(limit)
            .offset(offset)
        ).scalars()

        total = self.db.execute(
            select(func.count(OrderModel.id))
            .select_from(OrderModel)
            .join(StallModel, OrderModel.stall_id == StallModel.id)
            .where(*filters)
        ).scalar_one()

        return list(rows), total
