from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import InsufficientStockError, InvalidQuantityError, NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.analytics_service import ADD_TO_CART, AnalyticsService
from storefront.utils.settings import CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases for the cart domain, one active cart per user.
    commands (add, update, remove, clear, validate) change state
    query (get) only reads

    Every command checks the live catalog, never the price or stock cached
    in the cart lines. Concurrent edits of the same cart are last write wins.
    """

    def __init__(self, db: Session, analytics: AnalyticsService | None = None):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.analytics = analytics or AnalyticsService()

    @staticmethod
    def _next_expiry() -> datetime:
        #every action pushes the TTL forward, an active shopper keeps the cart
        return datetime.now(timezone.utc) + timedelta(seconds=CART_TTL_SECONDS)

    def _require_cart(self, user_id: int) -> CartModel:
        cart = self.repo.find_active_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    #query
    def get_cart(self, user_id: int) -> CartModel:
        return self._require_cart(user_id)

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> CartModel:
        if quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        product = self.products.find_by_id(product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found or inactive")

        if product.stock < quantity:
            raise InsufficientStockError("Insufficient stock")

        cart = self.repo.find_active_by_user(user_id)
        if not cart:
            #lazy creation on first add
            logger.info(f"Creating cart for user {user_id}")
            cart = CartModel(user_id=user_id, is_active=True, expires_at=self._next_expiry())

        existing_item = cart.find_item(product_id)

        if existing_item:
            new_quantity = existing_item.quantity + quantity
            if new_quantity > product.stock:
                raise InsufficientStockError("Total quantity exceeds available stock")

            logger.info(
                f"Product {product_id} already in cart, quantity "
                f"{existing_item.quantity} -> {new_quantity}"
            )
            existing_item.quantity = new_quantity
        else:
            logger.info(f"Adding product {product_id} to cart of user {user_id}")
            cart.items.append(
                CartItemModel(
                    product_id=product_id,
                    quantity=quantity,
                    price=product.price,
                )
            )

        cart.expires_at = self._next_expiry()
        saved = self.repo.save(cart)

        self.analytics.track_event(
            ADD_TO_CART,
            user_id,
            {"product_id": product_id, "quantity": quantity},
        )
        return saved

    def update_item(self, user_id: int, product_id: int, quantity: int) -> CartModel:
        cart = self._require_cart(user_id)

        item = cart.find_item(product_id)
        if not item:
            raise NotFoundError("Item not found in cart")

        if quantity <= 0:
            logger.info(f"Quantity {quantity} for product {product_id}, removing line")
            cart.items.remove(item)
        else:
            product = self.products.find_by_id(product_id)
            if not product or quantity > product.stock:
                raise InvalidQuantityError("Invalid quantity or insufficient stock")
            item.quantity = quantity

        cart.expires_at = self._next_expiry()
        return self.repo.save(cart)

    def remove_item(self, user_id: int, product_id: int) -> CartModel:
        cart = self._require_cart(user_id)

        #absent product is a no-op, not an error
        item = cart.find_item(product_id)
        if item:
            logger.info(f"Removing product {product_id} from cart {cart.id}")
            cart.items.remove(item)

        cart.expires_at = self._next_expiry()
        return self.repo.save(cart)

    def clear_cart(self, user_id: int) -> CartModel | None:
        cart = self.repo.find_active_by_user(user_id)
        if not cart:
            return None

        logger.info(f"Clearing cart {cart.id}")
        return self.repo.clear(cart)

    def validate_cart(self, user_id: int) -> Dict[str, Any]:
        """
        Reconcile the cart with the live catalog and persist the repairs.

        Unavailable products are dropped, quantities are clamped to stock and
        stale prices refreshed. Problems are reported, never raised.
        """
        cart = self.repo.find_active_by_user(user_id)
        if not cart:
            return {"valid": True, "issues": []}

        issues: list[str] = []
        changed = False

        for item in list(cart.items):
            product = self.products.find_by_id(item.product_id)

            if not product or not product.is_active:
                name = product.name if product else "Unknown"
                issues.append(f"Product {name} is no longer available")
                cart.items.remove(item)
                changed = True
                continue

            if product.stock < item.quantity:
                issues.append(f"Only {product.stock} units of {product.name} available")
                changed = True
                if product.stock == 0:
                    #a zero quantity line is not a valid line
                    cart.items.remove(item)
                    continue
                item.quantity = product.stock

            if Decimal(item.price) != Decimal(product.price):
                issues.append(
                    f"Price of {product.name} has changed from {item.price} to {product.price}"
                )
                item.price = product.price
                changed = True

        if changed:
            logger.info(f"Cart {cart.id} repaired: {len(issues)} issue(s)")
            self.repo.save(cart)

        return {"valid": not issues, "issues": issues}
