from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel, CartLineModel
from marketplace.domain.errors import (
    ConcurrencyConflict,
    InsufficientStock,
    InvalidInput,
    NotFound,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.directory_service import DirectoryService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka kupujacego.
    query (get) tylko odczyt, koszyk tworzony leniwie przy pierwszym dostepie
    commands (add, update, remove, clear) podbijaja wersje koszyka (optimistic locking)
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.directory = DirectoryService(db)

    #query - odczyt
    def get_cart(self, user_id: int | None) -> Dict[str, Any]:
        buyer = self.directory.resolve_buyer(user_id)
        cart = self._get_or_create_cart(buyer.user_id)
        return self._cart_dict(cart)

    #commands
    def add_item(self, user_id: int | None, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidInput("Ilosc musi byc wieksza niz 0")

        buyer = self.directory.resolve_buyer(user_id)
        cart = self._get_or_create_cart(buyer.user_id)

        product = self.products.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")

        if not self.directory.resolve_seller_for_product(product_id):
            raise InvalidInput("Produkt nie jest przypisany do zadnego stoiska")

        if not product.available:
            raise InvalidInput("Produkt jest niedostepny")

        existing = self.repo.get_line_for_product(cart.id, product_id)
        new_quantity = quantity + (existing.quantity if existing else 0)

        if product.stock < new_quantity:
            raise InsufficientStock(product.id, product.name, new_quantity, product.stock)

        if existing:
            # snapshot ceny zostaje z pierwszego dodania
            logger.info(
                f"Product {product_id} already in cart {cart.id}, "
                f"quantity {existing.quantity} -> {new_quantity}"
            )
            existing.quantity = new_quantity
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id} at {product.price}")
            self.repo.add_line(
                CartLineModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=product.price,
                )
            )

        self._bump_version(cart)
        return self._cart_dict(cart)

    def update_item(self, user_id: int | None, line_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 0:
            raise InvalidInput("Podaj poprawna ilosc")

        buyer = self.directory.resolve_buyer(user_id)
        cart = self._get_or_create_cart(buyer.user_id)

        line = self.repo.get_line(cart.id, line_id)
        if not line:
            raise NotFound("Pozycja koszyka nie istnieje")

        if quantity == 0:
            logger.info(f"Removing line {line_id} from cart {cart.id} (quantity 0)")
            self.repo.delete_line(line)
        else:
            product = line.product
            if product is None:
                raise InvalidInput("Produkt z tej pozycji juz nie istnieje")
            if product.stock < quantity:
                raise InsufficientStock(product.id, product.name, quantity, product.stock)
            line.quantity = quantity

        self._bump_version(cart)
        return self._cart_dict(cart)

    def remove_item(self, user_id: int | None, line_id: int) -> Dict[str, Any]:
        buyer = self.directory.resolve_buyer(user_id)
        cart = self._get_or_create_cart(buyer.user_id)

        line = self.repo.get_line(cart.id, line_id)
        if not line:
            raise NotFound("Pozycja koszyka nie istnieje")

        logger.info(f"Removing line {line_id} from cart {cart.id}")
        self.repo.delete_line(line)

        self._bump_version(cart)
        return self._cart_dict(cart)

    def clear_cart(self, user_id: int | None) -> Dict[str, Any]:
        buyer = self.directory.resolve_buyer(user_id)
        cart = self._get_or_create_cart(buyer.user_id)

        removed = self.repo.clear_lines(cart.id)
        logger.info(f"Cleared cart {cart.id}, removed {removed} lines")

        self._bump_version(cart)
        return self._cart_dict(cart)

    def _get_or_create_cart(self, buyer_id: int) -> CartModel:
        existing = self.repo.get_cart_by_buyer(buyer_id)
        if existing:
            return existing

        try:
            created = self.repo.create_cart(CartModel(buyer_id=buyer_id, version=1))
        except IntegrityError:
            # rownolegle pierwsze wejscie, koszyk utworzyl inny request
            self.repo.rollback()
            return self.repo.get_cart_by_buyer(buyer_id)

        logger.info(f"Created cart {created.id} for buyer {buyer_id}")
        return created

    def _bump_version(self, cart: CartModel) -> None:
        old_version = cart.version
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=old_version,
            new_data={
                "version": old_version + 1,
                "updated_at": datetime.now(timezone.utc),
            },
        )

        # 0 rows affected = ktos zmienil koszyk w miedzyczasie
        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflict(
                "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
            )

        self.repo.commit()

    def _cart_dict(self, cart: CartModel) -> Dict[str, Any]:
        rows = self.repo.get_lines_with_products(cart.id)
        total = sum((line.unit_price * line.quantity for line, _, _ in rows), Decimal("0.00"))

        #dict przeksztalcany w jsona
        return {
            "cart_id": cart.id,
            "buyer_id": cart.buyer_id,
            "version": cart.version,
            "items": [
                {
                    "line_id": line.id,
                    "product_id": line.product_id,
                    "product_name": product.name if product else None,
                    "stall_id": stall.id if stall else None,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "current_price": product.price if product else None,
                    "stock": product.stock if product else None,
                    "available": product.available if product else None,
                }
                for line, product, stall in rows
            ],
            "total": total,
        }
