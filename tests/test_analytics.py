from kombu.exceptions import OperationalError
from sqlalchemy import select

from storefront.data.models import AnalyticsEventModel
from storefront.services import analytics_service
from storefront.services.analytics_service import AnalyticsService
from storefront.services.cart_service import CartService


def test_event_is_recorded(db, customer):
    AnalyticsService.track_event("purchase", customer.id, {"order_id": 7, "amount": "9.00"})

    events = db.execute(select(AnalyticsEventModel)).scalars().all()
    assert len(events) == 1
    assert events[0].type == "purchase"
    assert events[0].user_id == customer.id
    assert events[0].data == {"order_id": 7, "amount": "9.00"}


def test_add_to_cart_records_event(db, customer, make_product):
    product = make_product(stock=5)

    CartService(db).add_item(customer.id, product.id, 2)

    event = db.execute(select(AnalyticsEventModel)).scalar_one()
    assert event.type == "add_to_cart"
    assert event.data == {"product_id": product.id, "quantity": 2}


def test_broker_failure_does_not_break_add_to_cart(db, customer, make_product, monkeypatch):
    product = make_product(stock=5)

    def broken_delay(*args, **kwargs):
        raise OperationalError("broker unreachable")

    monkeypatch.setattr(analytics_service.record_event_task, "delay", broken_delay)

    cart = CartService(db).add_item(customer.id, product.id, 1)

    assert cart.total_items == 1
    assert db.execute(select(AnalyticsEventModel)).scalars().all() == []
