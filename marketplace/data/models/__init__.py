#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from marketplace.data.models.user import UserModel, BuyerModel
from marketplace.data.models.stall import StallModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.cart import CartModel, CartLineModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.payment import PaymentModel

__all__ = [
    "UserModel",
    "BuyerModel",
    "StallModel",
    "ProductModel",
    "CartModel",
    "CartLineModel",
    "OrderModel",
    "PaymentModel",
]
