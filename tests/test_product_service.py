from decimal import Decimal

import pytest

from storefront.domain.errors import ForbiddenError, NotFoundError
from storefront.domain.schemas import ProductCreate, ProductQuery, ProductUpdate
from storefront.services.product_service import ProductService


@pytest.fixture
def service(db):
    return ProductService(db)


def test_create_product_belongs_to_seller(service, seller):
    product = service.create_product(
        seller,
        ProductCreate(name="Keyboard", category="peripherals", price=Decimal("199.99"), stock=4),
    )

    assert product.id is not None
    assert product.seller_id == seller.id
    assert product.is_active


def test_get_missing_product(service):
    with pytest.raises(NotFoundError, match="Product not found"):
        service.get_product(404)


def test_list_only_active(service, make_product):
    make_product(name="Keyboard")
    make_product(name="Hidden", is_active=False)

    result = service.list_products(ProductQuery())

    assert result["total"] == 1
    assert [p.name for p in result["products"]] == ["Keyboard"]


def test_search_matches_name_or_description_case_insensitive(service, make_product):
    make_product(name="Mechanical Keyboard", description="clicky")
    make_product(name="Mouse", description="wireless, pairs with any KEYBOARD")
    make_product(name="Monitor", description="27 inch")

    result = service.list_products(ProductQuery(search="keyboard"))

    assert sorted(p.name for p in result["products"]) == ["Mechanical Keyboard", "Mouse"]


def test_filters_category_and_price_range(service, make_product):
    make_product(name="Cheap", price="5.00", category="cables")
    make_product(name="Mid", price="50.00", category="cables")
    make_product(name="Pricey", price="500.00", category="cables")
    make_product(name="Other", price="50.00", category="audio")

    result = service.list_products(
        ProductQuery(category="cables", min_price=Decimal("10"), max_price=Decimal("100"))
    )

    assert [p.name for p in result["products"]] == ["Mid"]


def test_pagination_newest_first(service, make_product):
    for i in range(5):
        make_product(name=f"P{i}")

    result = service.list_products(ProductQuery(page=2, limit=2))

    assert result["total"] == 5
    assert [p.name for p in result["products"]] == ["P2", "P1"]


def test_update_partial(service, seller, make_product):
    product = make_product(price="10.00", stock=3)

    updated = service.update_product(product.id, ProductUpdate(stock=8), seller)

    assert updated.stock == 8
    assert updated.price == Decimal("10.00")


def test_update_by_other_seller_forbidden(service, make_user, make_product):
    product = make_product()
    intruder = make_user(role="seller")

    with pytest.raises(ForbiddenError):
        service.update_product(product.id, ProductUpdate(price=Decimal("1.00")), intruder)


def test_admin_can_delete_any_product(service, make_user, make_product):
    product = make_product()
    admin = make_user(role="admin")

    service.delete_product(product.id, admin)

    with pytest.raises(NotFoundError):
        service.get_product(product.id)
