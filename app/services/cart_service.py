from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.errors import (
    CartItemNotFoundError,
    CartNotFoundError,
    ConcurrencyConflictError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from app.repos.cart_repo import CartRepo
from app.services.product_client import ProductClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases of the cart domain, one cart per user.
    Commands (add, update, remove, clear) bump the cart version with
    optimistic locking; get_or_create_cart is the only query.
    """

    def __init__(self, db: Session, product_client: ProductClient):
        self.repo = CartRepo(db)
        self.product_client = product_client

    # =====================================================
    # QUERY
    # =====================================================
    def get_or_create_cart(self, user_id: int) -> CartModel:
        """Never fails with not-found: an empty cart is created on first access."""
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        except IntegrityError:
            # another request created it first
            self.repo.rollback()
            return self.repo.get_cart_by_user(user_id)

        logger.info(f"Cart {created.id} created for user {user_id}")
        return created

    # =====================================================
    # COMMANDS
    # =====================================================
    def add_product(self, user_id: int, product_id: int, quantity: int) -> CartModel:
        """
        Adds a product at its current catalog price. Adding a product already in
        the cart increments its quantity and replaces the captured price.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        cart = self.get_or_create_cart(user_id)
        price = self._current_price(product_id)

        existing_item = self.repo.get_cart_item(cart.id, product_id)
        if existing_item:
            existing_item.quantity += quantity
            existing_item.price_at_addition = price
        else:
            self.repo.add_cart_item(
                cart,
                CartItemModel(
                    product_id=product_id,
                    quantity=quantity,
                    price_at_addition=price,
                ),
            )

        self._commit_new_version(cart)
        logger.info(f"Product {product_id} x{quantity} added to cart of user {user_id}")
        return cart

    def update_quantity(self, user_id: int, product_id: int, new_quantity: int) -> CartModel:
        """Sets the quantity of a line; 0 or less removes it."""
        cart = self._existing_cart(user_id)
        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise CartItemNotFoundError(user_id, product_id)

        if new_quantity <= 0:
            self.repo.delete_cart_item(cart, item)
        else:
            item.quantity = new_quantity
            item.price_at_addition = self._current_price(product_id)

        self._commit_new_version(cart)
        return cart

    def remove_product(self, user_id: int, product_id: int) -> CartModel:
        cart = self._existing_cart(user_id)
        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise CartItemNotFoundError(user_id, product_id)

        self.repo.delete_cart_item(cart, item)
        self._commit_new_version(cart)
        return cart

    def clear_cart(self, user_id: int, commit: bool = True) -> CartModel:
        """
        Removes every line but keeps the cart row. With commit=False the change
        joins the caller's transaction.
        """
        cart = self._existing_cart(user_id)
        self.repo.clear_items(cart)
        self._bump_version(cart)
        if commit:
            self.repo.commit()
            logger.info(f"Cart of user {user_id} cleared")
        return cart

    # =====================================================
    # HELPERS
    # =====================================================
    def _existing_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise CartNotFoundError(user_id)
        return cart

    def _current_price(self, product_id: int) -> Decimal:
        # HTTP -> product-service (existence + price)
        product = self.product_client.fetch_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return Decimal(str(product.price))

    def _bump_version(self, cart: CartModel):
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflictError(cart.user_id)

    def _commit_new_version(self, cart: CartModel):
        self._bump_version(cart)
        self.repo.commit()
