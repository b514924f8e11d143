# app/repos/cart_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, cart: CartModel, item: CartItemModel) -> CartItemModel:
        if item not in cart.items:
            cart.items.append(item)
        self.db.add(item)
        return item

    def delete_cart_item(self, cart: CartModel, item: CartItemModel):
        # delete-orphan cascade removes the row on flush
        cart.items.remove(item)

    def clear_items(self, cart: CartModel):
        cart.items.clear()

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        """Compare-and-set on the version column; 0 rows means someone else won."""
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
