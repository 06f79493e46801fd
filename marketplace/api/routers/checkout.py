# marketplace/api/routers/checkout.py
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from marketplace.api.errors import DOMAIN_ERRORS, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import CheckoutIn, CheckoutOut
from marketplace.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_service(db: Session):
    return CheckoutService(db)


@router.post("", response_model=CheckoutOut)
def checkout(
    payload: CheckoutIn,
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Tworzy po jednym zamowieniu i platnosci na kazde stoisko z koszyka.
    200 gdy powstalo chociaz jedno zamowienie, 409 gdy wszystkie grupy odpadly.
    """
    svc = get_service(db)
    try:
        result = svc.checkout(user_id, payload.delivery_address, payload.payment_method)
    except DOMAIN_ERRORS as e:
        raise to_http(e)

    body = CheckoutOut(
        message="Order created successfully" if result.orders else "No orders could be created",
        orders=[asdict(o) for o in result.orders],
        total_orders=len(result.orders),
        errors=[asdict(f) for f in result.errors],
        skipped=[asdict(s) for s in result.skipped],
        remaining_lines=result.remaining_lines,
    )

    if not result.orders:
        return JSONResponse(status_code=409, content=body.model_dump(mode="json"))
    return body
