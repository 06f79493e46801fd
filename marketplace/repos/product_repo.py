# marketplace/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.data.models.stall import StallModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_stall_for_product(self, product_id: int) -> StallModel | None:
        return self.db.execute(
            select(StallModel)
            .join(ProductModel, ProductModel.stall_id == StallModel.id)
            .where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def get_stock(self, product_id: int) -> int:
        stock = self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()
        return stock or 0

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Sprawdzenie stanu i zmniejszenie w jednym UPDATE.
        np. update products set stock = stock - 2, available = (stock - 2) > 0
            where id = 1 and stock >= 2
        Baza trzyma lock na wierszu, dwa rownolegle checkouty nie zejda ponizej 0.
        Zwraca False gdy stanu nie wystarczylo (0 rows affected).
        """
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.stock >= quantity,
            )
            .values(
                stock=ProductModel.stock - quantity,
                available=(ProductModel.stock - quantity) > 0,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1
