# marketplace/api/errors.py
from fastapi import HTTPException

from marketplace.domain.errors import (
    Unauthorized,
    NotFound,
    ConcurrencyConflict,
    InternalError,
)

# blad domenowy -> status HTTP, kolejnosc ma znaczenie (podklasy najpierw)
_STATUS = (
    (Unauthorized, 401),
    (PermissionError, 403),
    (NotFound, 404),
    (ConcurrencyConflict, 409),
    (InternalError, 500),
    (ValueError, 400),
)

DOMAIN_ERRORS = (PermissionError, LookupError, ValueError, RuntimeError)


def to_http(error: Exception) -> HTTPException:
    for exc_type, status in _STATUS:
        if isinstance(error, exc_type):
            return HTTPException(status_code=status, detail=str(error))
    return HTTPException(status_code=500, detail="Internal server error")
