#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.errors import DOMAIN_ERRORS, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import CartItemIn, CartItemUpdate, CartOut
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_cart(user_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_item(user_id, payload.product_id, payload.quantity)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.put("/items/{line_id}", response_model=CartOut)
def update_item(
    line_id: int,
    payload: CartItemUpdate,
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_item(user_id, line_id, payload.quantity)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.delete("/items/{line_id}", response_model=CartOut)
def remove_item(
    line_id: int,
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.remove_item(user_id, line_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)


@router.delete("", response_model=CartOut)
@router.delete("/clear", response_model=CartOut)
def clear_cart(
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.clear_cart(user_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
