# marketplace/repos/cart_repo.py
from typing import Dict, List, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel, CartLineModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.stall import StallModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_buyer(self, buyer_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.buyer_id == buyer_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_line(self, cart_id: int, line_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.id == line_id,
                CartLineModel.cart_id == cart_id,
            )
        ).scalar_one_or_none()

    def get_line_for_product(self, cart_id: int, product_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.cart_id == cart_id,
                CartLineModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_lines_with_products(
        self, cart_id: int
    ) -> List[Tuple[CartLineModel, ProductModel | None, StallModel | None]]:
        # left join: pozycja zostaje nawet gdy produkt albo stoisko zniknelo
        rows = self.db.execute(
            select(CartLineModel, ProductModel, StallModel)
            .outerjoin(ProductModel, CartLineModel.product_id == ProductModel.id)
            .outerjoin(StallModel, ProductModel.stall_id == StallModel.id)
            .where(CartLineModel.cart_id == cart_id)
            .order_by(CartLineModel.id)
        ).all()
        return [tuple(r) for r in rows]

    def count_lines(self, cart_id: int) -> int:
        return self.db.execute(
            select(func.count(CartLineModel.id)).where(CartLineModel.cart_id == cart_id)
        ).scalar_one()

    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartLineModel) -> None:
        self.db.delete(line)
        self.db.flush()

    def clear_lines(self, cart_id: int) -> int:
        return self.db.execute(
            delete(CartLineModel).where(CartLineModel.cart_id == cart_id)
        ).rowcount

    def move_lines_to_order(self, cart_id: int, quantities: Dict[int, int], order_id: int) -> int:
        """
        Przepina pozycje z koszyka do zamowienia, quantities: line_id -> ilosc z odczytu.
        Pozycja zabrana juz przez inny checkout (cart_id) albo zmieniona po odczycie
        (quantity) nie zostanie policzona.
        """
        moved = 0
        for line_id, quantity in quantities.items():
            stmt = (
                update(CartLineModel)
                .where(
                    CartLineModel.id == line_id,
                    CartLineModel.cart_id == cart_id,
                    CartLineModel.quantity == quantity,
                )
                .values(order_id=order_id, cart_id=None)
                .execution_options(synchronize_session=False)
            )
            moved += self.db.execute(stmt).rowcount
        return moved

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        # update carts set version = 2 where id = 1 and version = 1
        stmt = (
            update(CartModel)
            .where(
                CartModel.id == cart_id,
                CartModel.version == old_version,
            )
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
