#app/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.errors import to_http_exception
from app.data.database import get_db
from app.domain.errors import OrderingError
from app.domain.schemas import ItemIn, QuantityIn, CartOut
from app.services.cart_service import CartService
from app.services.product_client import ProductClient

router = APIRouter(prefix="/carts", tags=["carts"])


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db=db, product_client=ProductClient())


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: int, svc: CartService = Depends(get_cart_service)):
    """Returns the user's cart, creating an empty one on first access."""
    return svc.get_or_create_cart(user_id)


@router.post("/{user_id}/items", response_model=CartOut)
def add_item(user_id: int, payload: ItemIn, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.add_product(user_id, payload.product_id, payload.quantity)
    except OrderingError as e:
        raise to_http_exception(e)


@router.put("/{user_id}/items/{product_id}", response_model=CartOut)
def update_item(
    user_id: int,
    product_id: int,
    payload: QuantityIn,
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.update_quantity(user_id, product_id, payload.quantity)
    except OrderingError as e:
        raise to_http_exception(e)


@router.delete("/{user_id}/items/{product_id}", response_model=CartOut)
def remove_item(user_id: int, product_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.remove_product(user_id, product_id)
    except OrderingError as e:
        raise to_http_exception(e)


@router.delete("/{user_id}/clear", response_model=CartOut)
def clear_cart(user_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.clear_cart(user_id)
    except OrderingError as e:
        raise to_http_exception(e)
