# storefront/services/analytics_service.py
from datetime import datetime, timezone
from typing import Any

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.data.models.analytics_event import AnalyticsEventModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ADD_TO_CART = "add_to_cart"
PURCHASE = "purchase"


class AnalyticsService:
    """
    Fire-and-forget event sink.
    Events go through Celery; a broker or task failure is logged and never
    breaks the operation that emitted the event.
    """

    @staticmethod
    def track_event(event_type: str, user_id: int | None, data: dict[str, Any]) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            record_event_task.delay(event_type, user_id, data, timestamp)
        except Exception as e:
            logger.warning(f"Analytics event {event_type} dropped: {e}")


@celery_app.task(name="storefront.services.analytics_service.record_event_task")
def record_event_task(event_type: str, user_id: int | None, data: dict, timestamp: str):
    db = SessionLocal()
    try:
        db.add(
            AnalyticsEventModel(
                type=event_type,
                user_id=user_id,
                data=data,
                timestamp=datetime.fromisoformat(timestamp),
            )
        )
        db.commit()
    finally:
        db.close()

    logger.info(f"[ANALYTICS] {event_type} recorded for user {user_id}")
    return {"type": event_type, "user_id": user_id}
