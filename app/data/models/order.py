from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from app.data.database import Base

PENDING = "PENDING"
PAYMENT_FAILED = "PAYMENT_FAILED"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    shipping_address = Column(String(500), nullable=False)
    payment_method = Column(String(100), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    # PENDING, PAYMENT_FAILED or whatever settlement status payment-service returned
    status = Column(String(32), nullable=False, default=PENDING)
    transaction_id = Column(String(128), nullable=True)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
        lazy="selectin",
    )
