from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, DateTime, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, shipped, delivered, cancelled
    total_amount = Column(Numeric(12, 2), nullable=False)

    shipping_street = Column(String(255), nullable=False)
    shipping_city = Column(String(100), nullable=False)
    shipping_state = Column(String(100), nullable=False)
    shipping_zip_code = Column(String(20), nullable=False)
    shipping_country = Column(String(100), nullable=False)

    payment_method = Column(String(50), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")  # pending, completed, failed
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    @property
    def shipping_address(self) -> dict:
        return {
            "street": self.shipping_street,
            "city": self.shipping_city,
            "state": self.shipping_state,
            "zip_code": self.shipping_zip_code,
            "country": self.shipping_country,
        }
