# marketplace/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.errors import DOMAIN_ERRORS, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import OrderOut, VendorOrdersOut
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.list_buyer_orders(user_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.get("/vendor", response_model=VendorOrdersOut)
def list_vendor_orders(
    stall_id: int | None = Query(None, alias="stallId"),
    category: List[str] | None = Query(None),
    sort_by: str = Query("newest", alias="sortBy"),
    page: int = Query(1),
    limit: int = Query(10),
    db: Session = Depends(get_db),
):
    """
    Zamowienia stoisk, filtrowanie po stoisku i kategorii, stronicowanie.
    """
    svc = get_service(db)
    try:
        return svc.list_vendor_orders(
            stall_id=stall_id,
            categories=category,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Pobiera szczegoly zamowienia kupujacego.
    """
    svc = get_service(db)
    try:
        return svc.get_order(user_id, order_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
