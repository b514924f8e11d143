# app/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.errors import to_http_exception
from app.data.database import get_db
from app.domain.errors import OrderingError
from app.domain.schemas import OrderCreate, OrderOut, OrderStatusUpdate, PaymentOutcome
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.services.notification_client import NotificationClient
from app.services.order_service import OrderService
from app.services.payment_client import PaymentClient
from app.services.product_client import ProductClient
from app.services.user_client import UserClient

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    product_client = ProductClient()
    return OrderService(
        db=db,
        carts=CartService(db=db, product_client=product_client),
        products=product_client,
        users=UserClient(),
        payments=PaymentClient(),
        notifications=NotificationClient(),
        lock_service=LockService(),
    )


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, svc: OrderService = Depends(get_order_service)):
    """
    Creates an order from the user's cart, charges it and clears the cart.
    A declined payment answers 402; the order is still stored as PAYMENT_FAILED.
    """
    try:
        return svc.create_order_from_cart(payload.user_id, payload.shipping_address, payload.payment_method)
    except OrderingError as e:
        raise to_http_exception(e)


@router.get("/", response_model=List[OrderOut])
def list_orders(user_id: int = Query(..., gt=0), svc: OrderService = Depends(get_order_service)):
    return svc.list_orders_for_user(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: OrderService = Depends(get_order_service)):
    try:
        return svc.get_order(order_id)
    except OrderingError as e:
        raise to_http_exception(e)


@router.get("/{order_id}/payment", response_model=PaymentOutcome)
def get_payment_status(order_id: int, svc: OrderService = Depends(get_order_service)):
    """Payment recorded by payment-service for the order; 404 when there is none."""
    try:
        return svc.get_payment_status(order_id)
    except OrderingError as e:
        raise to_http_exception(e)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.update_order_status(order_id, payload.status)
    except OrderingError as e:
        raise to_http_exception(e)


@router.delete("/{order_id}", status_code=204)
def delete_order(order_id: int, svc: OrderService = Depends(get_order_service)):
    try:
        svc.delete_order(order_id)
    except OrderingError as e:
        raise to_http_exception(e)
    return Response(status_code=204)
