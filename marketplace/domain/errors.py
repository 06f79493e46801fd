# marketplace/domain/errors.py
"""
Bledy domenowe. Dziedzicza po wyjatkach ktore routery juz obsluguja
(ValueError -> 400, PermissionError -> 401/403, RuntimeError -> 409/500),
`code` trafia do odpowiedzi JSON.
"""


class Unauthorized(PermissionError):
    code = "unauthorized"


class Forbidden(PermissionError):
    code = "forbidden"


class InvalidInput(ValueError):
    code = "invalid_input"


class NotFound(LookupError):
    code = "not_found"


class EmptyCart(ValueError):
    code = "empty_cart"


class NoValidItems(ValueError):
    code = "no_valid_items"


class InsufficientStock(ValueError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, product_name: str | None, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Niewystarczajacy stan produktu {product_name or product_id}: "
            f"zadano {requested}, dostepne {available}"
        )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested": self.requested,
            "available": self.available,
        }


class ConcurrencyConflict(RuntimeError):
    code = "conflict"


class InternalError(RuntimeError):
    code = "internal_error"
