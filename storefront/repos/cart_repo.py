# storefront/repos/cart_repo.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_active_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .where(CartModel.user_id == user_id, CartModel.is_active.is_(True))
            .order_by(CartModel.id.desc())
            .limit(1)
        ).scalar_one_or_none()

    def save(self, cart: CartModel) -> CartModel:
        #upsert; totals always recomputed from items before hitting the db
        cart.recalculate_totals()
        self.db.add(cart)
        self.db.commit()
        return cart

    def clear(self, cart: CartModel) -> CartModel:
        cart.items.clear()
        return self.save(cart)

    def expire_stale(self, now: datetime) -> int:
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.is_active.is_(True), CartModel.expires_at < now)
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount
