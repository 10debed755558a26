# storefront/services/order_service.py
import math
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    InsufficientStockError,
    InvalidInputError,
    InvalidStatusError,
    InvalidTransitionError,
    NotFoundError,
)
from storefront.domain.order_status import CANCELLABLE, OrderStatus, can_transition, parse_status
from storefront.domain.schemas import OrderCreate
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.analytics_service import PURCHASE, AnalyticsService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Order domain, kept apart from CartService.

    Placing an order validates every line against the live catalog first,
    then writes the order and reserves stock in a single transaction. Stock
    is reserved with a guarded decrement, so two buyers racing for the last
    units cannot push stock below zero: the loser's transaction is rolled
    back and it gets InsufficientStock.
    """

    def __init__(self, db: Session, analytics: AnalyticsService | None = None):
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.analytics = analytics or AnalyticsService()

    def create_order(self, user_id: int, payload: OrderCreate) -> OrderModel:
        """
        Use case: place an order from an explicit item list or, when no
        items are given, from the user's active cart (checkout).

        1. validates all lines (existence, active flag, stock)
        2. prices every line from the catalog, cart snapshots are ignored
        3. inserts the order and decrements stock, one transaction
        4. clears the checked out cart in the same transaction
        5. emits a purchase event (fire-and-forget)
        """
        if not self.users.get_user(user_id):
            raise NotFoundError("User not found")

        cart = None
        if payload.items:
            requested = [(i.product_id, i.quantity) for i in payload.items]
        else:
            cart = self.carts.find_active_by_user(user_id)
            if not cart or not cart.items:
                raise InvalidInputError("Cart is empty")
            requested = [(i.product_id, i.quantity) for i in cart.items]

        #same product listed twice is one line
        lines: dict[int, int] = {}
        for product_id, quantity in requested:
            lines[product_id] = lines.get(product_id, 0) + quantity

        #validate everything before writing anything
        names: dict[int, str] = {}
        order_items = []
        total = Decimal("0.00")

        for product_id, quantity in lines.items():
            product = self.products.find_by_id(product_id)
            if not product or not product.is_active:
                raise NotFoundError("Product not found or inactive")

            if product.stock < quantity:
                raise InsufficientStockError(
                    f"Only {product.stock} units of {product.name} available"
                )

            price = Decimal(product.price)
            total += price * quantity
            names[product_id] = product.name
            order_items.append(
                OrderItemModel(product_id=product_id, quantity=quantity, price=price)
            )

        address = payload.shipping_address
        order = OrderModel(
            user_id=user_id,
            items=order_items,
            total_amount=total,
            status=OrderStatus.PENDING.value,
            shipping_street=address.street,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_zip_code=address.zip_code,
            shipping_country=address.country,
            payment_method=payload.payment_method,
            notes=payload.notes,
        )

        try:
            self.repo.create(order)

            for item in order_items:
                if not self.products.decrement_stock(item.product_id, item.quantity):
                    #another order took the stock after validation
                    raise InsufficientStockError(
                        f"Insufficient stock for {names[item.product_id]}"
                    )

            if cart is not None:
                cart.items.clear()
                cart.recalculate_totals()

            self.repo.commit()

        except Exception as e:
            logger.error(f"Order for user {user_id} rolled back: {e}")
            self.repo.rollback()
            raise

        logger.info(f"Order {order.id} created for user {user_id}, total {total}")

        self.analytics.track_event(
            PURCHASE,
            user_id,
            {"order_id": order.id, "amount": str(total)},
        )
        return order

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        order = self.repo.find_by_id(order_id, user_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def update_status(self, order_id: int, status: str, user_id: int) -> OrderModel:
        new_status = parse_status(status)
        if new_status is None:
            raise InvalidStatusError("Invalid order status")

        order = self.get_order(order_id, user_id)

        if new_status is OrderStatus.CANCELLED:
            #cancelling has to give the stock back
            return self.cancel_order(order_id, user_id)

        current = OrderStatus(order.status)
        if not can_transition(current, new_status):
            raise InvalidTransitionError(
                f"Cannot change order status from {current.value} to {new_status.value}"
            )

        self.repo.update_status(order, new_status.value)
        self.repo.commit()

        logger.info(f"Order {order_id}: {current.value} -> {new_status.value}")
        return order

    def cancel_order(self, order_id: int, user_id: int) -> OrderModel:
        order = self.get_order(order_id, user_id)
        current = OrderStatus(order.status)

        if current is OrderStatus.CANCELLED:
            raise InvalidTransitionError("Order is already cancelled")

        if current not in CANCELLABLE:
            raise InvalidTransitionError("Cannot cancel shipped or delivered order")

        try:
            for item in order.items:
                if not self.products.increment_stock(item.product_id, item.quantity):
                    logger.warning(
                        f"Product {item.product_id} no longer exists, "
                        f"{item.quantity} units not restored"
                    )

            self.repo.update_status(order, OrderStatus.CANCELLED.value)
            self.repo.commit()

        except Exception as e:
            logger.error(f"Cancelling order {order_id} failed: {e}")
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id} cancelled, stock restored")
        return order

    def list_orders(self, user_id: int, page: int = 1, limit: int = 10) -> dict:
        return self.get_order_history(user_id, page, limit)

    def get_order_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
    ) -> dict:
        if status and parse_status(status) is None:
            raise InvalidStatusError("Invalid order status")

        orders, total = self.repo.find_by_user_paginated(user_id, page, limit, status)

        return {
            "orders": orders,
            "total_orders": total,
            "current_page": page,
            "total_pages": math.ceil(total / limit),
        }

    def get_order_stats(self, user_id: int) -> dict:
        orders = self.repo.find_all_by_user(user_id)

        by_status: dict[str, int] = {}
        for order in orders:
            by_status[order.status] = by_status.get(order.status, 0) + 1

        return {
            "total_orders": len(orders),
            "total_spent": sum((Decimal(o.total_amount) for o in orders), Decimal("0.00")),
            "orders_by_status": by_status,
        }
