# storefront/data/models/cart.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    is_active = Column(Boolean, nullable=False, default=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_items = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )

    def find_item(self, product_id: int):
        return next((i for i in self.items if i.product_id == product_id), None)

    def recalculate_totals(self) -> None:
        #totals are derived from items, never set directly
        self.total_items = sum(i.quantity for i in self.items)
        self.total_amount = sum(
            (Decimal(i.price) * i.quantity for i in self.items), Decimal("0.00")
        )
