# app/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel, commit: bool = True) -> OrderModel:
        self.db.add(order)
        if commit:
            self.db.commit()
            self.db.refresh(order)
        else:
            # assigns the primary key, caller owns the transaction
            self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_orders_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def update_order_status(
        self, order_id: int, status: str, transaction_id: str | None = None
    ) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
            if transaction_id is not None:
                order.transaction_id = transaction_id
            self.db.commit()
            self.db.refresh(order)
        return order

    def delete_order(self, order_id: int) -> bool:
        order = self.get_order(order_id)
        if not order:
            return False
        self.db.delete(order)
        self.db.commit()
        return True

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
