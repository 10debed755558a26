from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON

from storefront.data.database import Base


class AnalyticsEventModel(Base):
    __tablename__ = "analytics_events"

    id = Column(Integer, primary_key=True)
    type = Column(String(30), nullable=False, index=True)  # add_to_cart, purchase
    user_id = Column(Integer, nullable=True, index=True)
    data = Column(JSON, nullable=False, default=dict)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
