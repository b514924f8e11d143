# app/domain/errors.py
from enum import Enum


class FailureKind(str, Enum):
    EMPTY_CART = "EMPTY_CART"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    GATEWAY_CONNECTIVITY = "GATEWAY_CONNECTIVITY"
    NOTIFICATION_FAILURE = "NOTIFICATION_FAILURE"
    CART_NOT_FOUND = "CART_NOT_FOUND"
    CART_ITEM_NOT_FOUND = "CART_ITEM_NOT_FOUND"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_IN_PROGRESS = "ORDER_IN_PROGRESS"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"


class OrderingError(Exception):
    """
    Base class for every typed failure of the cart and order use cases.

    Each subclass fixes a FailureKind and the HTTP status the API answers with,
    so callers can branch on the exception type (or on ``kind``) instead of
    parsing messages.
    """

    kind: FailureKind
    status_code: int = 400

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_detail(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, **self.context}


class EmptyCartError(OrderingError):
    kind = FailureKind.EMPTY_CART
    status_code = 400

    def __init__(self, user_id: int):
        super().__init__(f"Cart of user {user_id} is empty", user_id=user_id)


class UserNotFoundError(OrderingError):
    kind = FailureKind.USER_NOT_FOUND
    status_code = 404

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found", user_id=user_id)


class ProductNotFoundError(OrderingError):
    kind = FailureKind.PRODUCT_NOT_FOUND
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found in catalog", product_id=product_id)


class PaymentFailedError(OrderingError):
    """The order exists (status PAYMENT_FAILED) but no payment outcome was obtained."""

    kind = FailureKind.PAYMENT_FAILED
    status_code = 402

    def __init__(self, order_id: int):
        super().__init__(f"Payment for order {order_id} failed", order_id=order_id)
        self.order_id = order_id


class GatewayConnectivityError(OrderingError):
    kind = FailureKind.GATEWAY_CONNECTIVITY
    status_code = 503

    def __init__(self, service: str, reason: str):
        super().__init__(f"Error communicating with {service}: {reason}", service=service)
        self.service = service


class NotificationError(OrderingError):
    kind = FailureKind.NOTIFICATION_FAILURE
    status_code = 503

    def __init__(self, reason: str):
        super().__init__(f"Error communicating with notification-service: {reason}")


class CartNotFoundError(OrderingError):
    kind = FailureKind.CART_NOT_FOUND
    status_code = 404

    def __init__(self, user_id: int):
        super().__init__(f"Cart not found for user {user_id}", user_id=user_id)


class CartItemNotFoundError(OrderingError):
    kind = FailureKind.CART_ITEM_NOT_FOUND
    status_code = 404

    def __init__(self, user_id: int, product_id: int):
        super().__init__(
            f"Product {product_id} is not in the cart of user {user_id}",
            user_id=user_id,
            product_id=product_id,
        )


class InvalidQuantityError(OrderingError):
    kind = FailureKind.INVALID_QUANTITY
    status_code = 400

    def __init__(self, quantity: int):
        super().__init__(f"Quantity must be greater than 0, got {quantity}", quantity=quantity)


class OrderNotFoundError(OrderingError):
    kind = FailureKind.ORDER_NOT_FOUND
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found", order_id=order_id)


class OrderInProgressError(OrderingError):
    kind = FailureKind.ORDER_IN_PROGRESS
    status_code = 409

    def __init__(self, user_id: int):
        super().__init__(f"An order is already being created for user {user_id}", user_id=user_id)


class ConcurrencyConflictError(OrderingError):
    kind = FailureKind.CONCURRENCY_CONFLICT
    status_code = 409

    def __init__(self, user_id: int):
        super().__init__(f"Cart of user {user_id} was modified concurrently", user_id=user_id)


class PaymentNotFoundError(OrderingError):
    kind = FailureKind.PAYMENT_NOT_FOUND
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__(f"No payment recorded for order {order_id}", order_id=order_id)
