# app/services/order_service.py
import uuid
from decimal import Decimal

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel, PENDING, PAYMENT_FAILED
from app.data.models.order_item import OrderItemModel
from app.domain.errors import (
    EmptyCartError,
    GatewayConnectivityError,
    OrderInProgressError,
    OrderNotFoundError,
    OrderingError,
    PaymentFailedError,
    PaymentNotFoundError,
    ProductNotFoundError,
    UserNotFoundError,
)
from app.domain.schemas import NotificationRequest, PaymentOutcome, PaymentRequest, ProductSnapshot, UserProfile
from app.repos.order_repo import OrderRepo
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.services.notification_client import NotificationClient
from app.services.payment_client import PaymentClient
from app.services.product_client import ProductClient
from app.services.user_client import UserClient
from app.utils.settings import ORDER_LOCK_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_CONFIRMATION = "ORDER_CONFIRMATION"


class OrderService:
    """
    Order domain use cases. Every collaborator is passed in explicitly.

    create_order_from_cart is a saga without two-phase commit: once the order
    row is written it is never removed, later failures only move its status.
    """

    def __init__(
        self,
        db: Session,
        carts: CartService,
        products: ProductClient,
        users: UserClient,
        payments: PaymentClient,
        notifications: NotificationClient,
        lock_service: LockService,
        lock_ttl: int = ORDER_LOCK_TTL_SECONDS,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = carts
        self.products = products
        self.users = users
        self.payments = payments
        self.notifications = notifications
        self.lock_service = lock_service
        self.lock_ttl = lock_ttl

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_order_from_cart(self, user_id: int, shipping_address: str, payment_method: str) -> OrderModel:
        """
        Use Case: create an order from the user's cart.

        1. Validates cart, user and products (no side effects on failure)
        2. Persists the order and clears the cart in one transaction
        3. Charges the order and records the settlement status
        4. Sends a confirmation email when the payment completed (best effort)

        Raises:
            OrderInProgressError: another creation for this user holds the lock.
            EmptyCartError, UserNotFoundError, ProductNotFoundError: nothing persisted.
            PaymentFailedError: order persisted with status PAYMENT_FAILED.
            GatewayConnectivityError: a remote service is unreachable; if it was
                payment-service the order stays PENDING.
        """
        token = uuid.uuid4().hex
        try:
            acquired = self.lock_service.acquire_order_lock(user_id, token, self.lock_ttl)
        except RedisError as e:
            raise GatewayConnectivityError("redis", str(e)) from e
        if not acquired:
            raise OrderInProgressError(user_id)

        try:
            return self._create_order_from_cart(user_id, shipping_address, payment_method)
        finally:
            try:
                self.lock_service.release_order_lock(user_id, token)
            except RedisError as e:
                logger.warning(f"Failed to release order lock of user {user_id}, left to TTL: {e}")

    def update_order_status(self, order_id: int, status: str) -> OrderModel:
        order = self.repo.update_order_status(order_id, status)
        if not order:
            raise OrderNotFoundError(order_id)
        logger.info(f"Order {order_id} status updated to {status}")
        return order

    def delete_order(self, order_id: int):
        if not self.repo.delete_order(order_id):
            raise OrderNotFoundError(order_id)
        logger.info(f"Order {order_id} deleted")

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders_for_user(self, user_id: int) -> list[OrderModel]:
        """Newest first."""
        return self.repo.list_orders_by_user(user_id)

    def get_payment_status(self, order_id: int) -> PaymentOutcome:
        """Asks payment-service for the payment recorded against an existing order."""
        order = self.get_order(order_id)
        outcome = self.payments.get_payment_status(str(order.id))
        if outcome is None:
            raise PaymentNotFoundError(order.id)
        return outcome

    # =====================================================
    # SAGA STEPS
    # =====================================================
    def _create_order_from_cart(self, user_id: int, shipping_address: str, payment_method: str) -> OrderModel:
        cart = self.carts.get_or_create_cart(user_id)
        if not cart.items:
            raise EmptyCartError(user_id)

        user = self.users.fetch_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        products = self._resolve_products(cart.items)
        order = self._build_order(user_id, shipping_address, payment_method, cart.items, products)

        try:
            self.repo.create_order(order, commit=False)
            self.carts.clear_cart(user_id, commit=False)
            self.repo.commit()
        except (SQLAlchemyError, OrderingError):
            self.repo.rollback()
            raise
        self.db.refresh(order)
        logger.info(f"Order {order.id} created from cart of user {user_id}, total {order.total_amount}")

        outcome = self.payments.process_payment(
            PaymentRequest(
                order_id=str(order.id),
                amount=order.total_amount,
                payment_method_details=order.payment_method,
            )
        )

        if outcome is None:
            self.repo.update_order_status(order.id, PAYMENT_FAILED)
            logger.error(f"Payment for order {order.id} could not be processed, status {PAYMENT_FAILED}")
            raise PaymentFailedError(order.id)

        order = self.repo.update_order_status(order.id, outcome.payment_status, outcome.transaction_id)
        logger.info(
            f"Payment for order {order.id} processed with status {outcome.payment_status} "
            f"(TxID: {outcome.transaction_id})"
        )

        if outcome.is_completed:
            self._send_confirmation(user, order)

        return order

    def _resolve_products(self, items: list[CartItemModel]) -> dict[int, ProductSnapshot]:
        # sequential, one call per distinct product; any miss aborts the attempt
        products = {}
        for product_id in dict.fromkeys(i.product_id for i in items):
            product = self.products.fetch_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            products[product_id] = product
        return products

    @staticmethod
    def _build_order(
        user_id: int,
        shipping_address: str,
        payment_method: str,
        items: list[CartItemModel],
        products: dict[int, ProductSnapshot],
    ) -> OrderModel:
        # prices come from the cart, never re-fetched: the customer pays what they saw
        order_items = [
            OrderItemModel(
                product_id=i.product_id,
                product_name=products[i.product_id].name,
                quantity=i.quantity,
                unit_price=i.price_at_addition,
                subtotal=i.price_at_addition * i.quantity,
            )
            for i in items
        ]
        total = sum((oi.subtotal for oi in order_items), Decimal("0.00"))

        return OrderModel(
            user_id=user_id,
            shipping_address=shipping_address,
            payment_method=payment_method,
            total_amount=total,
            status=PENDING,
            items=order_items,
        )

    def _send_confirmation(self, user: UserProfile, order: OrderModel):
        """Best effort: every failure is logged and dropped, the order is already settled."""
        request = NotificationRequest(
            recipient_email=user.email,
            subject=f"Order Confirmation #{order.id}",
            body=(
                f"Dear {user.display_name},\n\n"
                f"Thank you for your purchase. Your order #{order.id} has been confirmed "
                f"and your payment was processed successfully. Total: {order.total_amount:.2f}\n\n"
                f"Kind regards,\nThe Shop team"
            ),
            kind=ORDER_CONFIRMATION,
        )
        try:
            sent = self.notifications.send_email(request)
        except Exception as e:
            logger.error(f"Exception while sending order confirmation for order {order.id} to {user.email}: {e}")
            return

        if sent:
            logger.info(f"Order confirmation for order {order.id} sent to {user.email}")
        else:
            logger.error(f"Notification service refused order confirmation for order {order.id} to {user.email}")
