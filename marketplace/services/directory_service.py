from sqlalchemy.orm import Session

from marketplace.data.models.user import BuyerModel
from marketplace.data.models.stall import StallModel
from marketplace.domain.errors import Unauthorized, Forbidden
from marketplace.repos.user_repo import UserRepo
from marketplace.repos.product_repo import ProductRepo


class DirectoryService:
    """Kupujacy i sprzedawcy. Tozsamosc przychodzi juz uwierzytelniona z zewnatrz."""

    def __init__(self, db: Session):
        self.users = UserRepo(db)
        self.products = ProductRepo(db)

    def resolve_buyer(self, user_id: int | None) -> BuyerModel:
        if user_id is None:
            raise Unauthorized("Brak tozsamosci uzytkownika")

        buyer = self.users.get_buyer(user_id)
        if not buyer:
            raise Forbidden("Tylko kupujacy maja dostep do koszyka i zamowien")
        return buyer

    def resolve_seller_for_product(self, product_id: int) -> StallModel | None:
        return self.products.get_stall_for_product(product_id)
