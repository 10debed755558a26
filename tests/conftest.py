import os

# must be set before anything from storefront is imported
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from decimal import Decimal
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

import storefront.data.models  # noqa: F401
from storefront.api import create_app
from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel, UserModel
from storefront.services.analytics_service import AnalyticsService


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def analytics():
    return Mock(spec=AnalyticsService)


@pytest.fixture
def client():
    # no context manager: lifespan would dispose the shared in-memory engine
    return TestClient(create_app())


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="user", **kwargs):
        counter["n"] += 1
        user = UserModel(
            email=kwargs.pop("email", f"user{counter['n']}@example.com"),
            first_name=kwargs.pop("first_name", "Jan"),
            last_name=kwargs.pop("last_name", "Kowalski"),
            role=role,
            **kwargs,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def seller(make_user):
    return make_user(role="seller")


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def make_product(db, seller):
    def _make(name="Keyboard", price="199.99", stock=10, is_active=True, category="peripherals", **kwargs):
        product = ProductModel(
            name=name,
            description=kwargs.pop("description", f"{name} description"),
            category=category,
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
            seller_id=kwargs.pop("seller_id", seller.id),
            **kwargs,
        )
        db.add(product)
        db.commit()
        return product

    return _make
