# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


# =====================================================
# API
# =====================================================
class ItemIn(BaseModel):
    """Schema for adding a product to a cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")


class QuantityIn(BaseModel):
    """Schema for changing a cart line quantity. 0 or less removes the line."""

    quantity: int


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    price_at_addition: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    """Schema for creating an order from the user's cart."""

    user_id: int = Field(..., gt=0, description="User ID (must be > 0)")
    shipping_address: str = Field(..., min_length=1, max_length=500)
    payment_method: str = Field(..., min_length=1, max_length=100)


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=32)


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    created_at: datetime
    shipping_address: str
    payment_method: str
    total_amount: Decimal
    status: str
    transaction_id: str | None = None
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# Remote services
# =====================================================
class ProductSnapshot(BaseModel):
    """Product as returned by product-service; only what an order needs."""

    id: int
    name: str
    price: Decimal


class UserProfile(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = Field(default=None, alias="fullName")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


class PaymentRequest(BaseModel):
    order_id: str = Field(..., alias="orderId")
    amount: Decimal
    payment_method_details: str = Field(..., alias="paymentMethodDetails")

    model_config = ConfigDict(populate_by_name=True)

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)


class PaymentOutcome(BaseModel):
    """
    Settlement returned by payment-service.

    ``payment_status`` is kept verbatim (COMPLETED, PENDING, FAILED, ...);
    only "completed" has a meaning for order creation.
    """

    id: Optional[int] = None
    order_id: Optional[str] = Field(default=None, alias="orderId")
    amount: Optional[Decimal] = None
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    payment_status: str = Field(..., alias="paymentStatus", min_length=1, max_length=32)
    transaction_id: Optional[str] = Field(default=None, alias="transactionId", max_length=128)
    transaction_timestamp: Optional[datetime] = Field(default=None, alias="transactionTimestamp")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_completed(self) -> bool:
        return self.payment_status.strip().upper() == "COMPLETED"


class NotificationRequest(BaseModel):
    recipient_email: str = Field(..., alias="recipientEmail")
    subject: str
    body: str
    kind: str

    model_config = ConfigDict(populate_by_name=True)
