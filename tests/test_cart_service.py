from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.domain.errors import InsufficientStockError, InvalidQuantityError, NotFoundError
from storefront.services.cart_service import CartService


@pytest.fixture
def service(db, analytics):
    return CartService(db, analytics=analytics)


def assert_totals_consistent(cart):
    assert cart.total_items == sum(i.quantity for i in cart.items)
    assert cart.total_amount == sum((Decimal(i.price) * i.quantity for i in cart.items), Decimal("0.00"))


class TestAddItem:
    def test_first_add_creates_cart(self, service, customer, make_product):
        product = make_product(price="10.00", stock=5)

        cart = service.add_item(customer.id, product.id, 3)

        assert cart.id is not None
        assert cart.is_active
        assert cart.total_items == 3
        assert cart.total_amount == Decimal("30.00")
        assert [(i.product_id, i.quantity, i.price) for i in cart.items] == [(product.id, 3, Decimal("10.00"))]

    def test_adding_beyond_stock_leaves_cart_unchanged(self, service, customer, make_product):
        product = make_product(price="10.00", stock=5)
        service.add_item(customer.id, product.id, 3)

        with pytest.raises(InsufficientStockError):
            service.add_item(customer.id, product.id, 3)

        cart = service.get_cart(customer.id)
        assert cart.total_items == 3
        assert cart.items[0].quantity == 3
        assert cart.total_amount == Decimal("30.00")

    def test_same_product_quantities_are_summed(self, service, customer, make_product):
        product = make_product(stock=10)

        service.add_item(customer.id, product.id, 2)
        cart = service.add_item(customer.id, product.id, 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert_totals_consistent(cart)

    def test_single_request_over_stock(self, service, customer, make_product):
        product = make_product(stock=2)

        with pytest.raises(InsufficientStockError):
            service.add_item(customer.id, product.id, 3)

        with pytest.raises(NotFoundError):
            service.get_cart(customer.id)

    def test_inactive_product_is_not_found(self, service, customer, make_product):
        product = make_product(is_active=False)

        with pytest.raises(NotFoundError):
            service.add_item(customer.id, product.id, 1)

    def test_missing_product_is_not_found(self, service, customer):
        with pytest.raises(NotFoundError):
            service.add_item(customer.id, 9999, 1)

    def test_non_positive_quantity_rejected(self, service, customer, make_product):
        product = make_product()

        with pytest.raises(InvalidQuantityError):
            service.add_item(customer.id, product.id, 0)

    def test_price_snapshot_kept_when_product_price_changes(self, service, db, customer, make_product):
        product = make_product(price="10.00", stock=10)
        service.add_item(customer.id, product.id, 1)

        product.price = Decimal("15.00")
        db.commit()

        cart = service.add_item(customer.id, product.id, 1)
        assert cart.items[0].price == Decimal("10.00")
        assert cart.total_amount == Decimal("20.00")

    def test_add_extends_expiry(self, service, customer, make_product):
        product = make_product(stock=10)
        cart = service.add_item(customer.id, product.id, 1)

        assert cart.expires_at.replace(tzinfo=timezone.utc) > datetime.now(timezone.utc) + timedelta(days=29)

    def test_add_emits_analytics_event(self, service, analytics, customer, make_product):
        product = make_product(stock=10)

        service.add_item(customer.id, product.id, 2)

        analytics.track_event.assert_called_once_with(
            "add_to_cart", customer.id, {"product_id": product.id, "quantity": 2}
        )


class TestUpdateItem:
    def test_update_quantity(self, service, customer, make_product):
        product = make_product(price="5.00", stock=10)
        service.add_item(customer.id, product.id, 1)

        cart = service.update_item(customer.id, product.id, 4)

        assert cart.items[0].quantity == 4
        assert cart.total_amount == Decimal("20.00")
        assert_totals_consistent(cart)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_removes_line(self, service, customer, make_product, quantity):
        product = make_product(stock=10)
        other = make_product(name="Mouse", price="49.50", stock=10)
        service.add_item(customer.id, product.id, 2)
        service.add_item(customer.id, other.id, 1)

        cart = service.update_item(customer.id, product.id, quantity)

        assert [i.product_id for i in cart.items] == [other.id]
        assert cart.total_items == 1
        assert cart.total_amount == Decimal("49.50")

    def test_quantity_above_stock_is_invalid(self, service, customer, make_product):
        product = make_product(stock=3)
        service.add_item(customer.id, product.id, 1)

        with pytest.raises(InvalidQuantityError):
            service.update_item(customer.id, product.id, 4)

        assert service.get_cart(customer.id).items[0].quantity == 1

    def test_without_cart(self, service, customer, make_product):
        product = make_product()

        with pytest.raises(NotFoundError, match="Cart not found"):
            service.update_item(customer.id, product.id, 1)

    def test_item_not_in_cart(self, service, customer, make_product):
        product = make_product()
        other = make_product(name="Mouse")
        service.add_item(customer.id, product.id, 1)

        with pytest.raises(NotFoundError, match="Item not found in cart"):
            service.update_item(customer.id, other.id, 1)


class TestRemoveAndClear:
    def test_remove_item(self, service, customer, make_product):
        product = make_product(stock=10)
        service.add_item(customer.id, product.id, 2)

        cart = service.remove_item(customer.id, product.id)

        assert cart.items == []
        assert cart.total_items == 0
        assert cart.total_amount == Decimal("0.00")

    def test_removing_absent_item_is_noop(self, service, customer, make_product):
        product = make_product(price="3.00", stock=10)
        service.add_item(customer.id, product.id, 2)

        cart = service.remove_item(customer.id, 9999)

        assert len(cart.items) == 1
        assert cart.total_amount == Decimal("6.00")

    def test_remove_without_cart(self, service, customer):
        with pytest.raises(NotFoundError):
            service.remove_item(customer.id, 1)

    def test_clear_keeps_cart_record(self, service, customer, make_product):
        product = make_product(stock=10)
        created = service.add_item(customer.id, product.id, 2)

        service.clear_cart(customer.id)

        cart = service.get_cart(customer.id)
        assert cart.id == created.id
        assert cart.is_active
        assert cart.items == []
        assert cart.total_items == 0
        assert cart.total_amount == Decimal("0.00")

    def test_clear_without_cart(self, service, customer):
        assert service.clear_cart(customer.id) is None


class TestValidateCart:
    def test_no_cart_is_valid(self, service, customer):
        assert service.validate_cart(customer.id) == {"valid": True, "issues": []}

    def test_consistent_cart_is_valid(self, service, customer, make_product):
        product = make_product(stock=10)
        service.add_item(customer.id, product.id, 2)

        assert service.validate_cart(customer.id) == {"valid": True, "issues": []}

    def test_inactive_product_is_dropped(self, service, db, customer, make_product):
        gone = make_product(name="Widget", price="10.00", stock=10)
        kept = make_product(name="Mouse", price="2.00", stock=10)
        service.add_item(customer.id, gone.id, 1)
        service.add_item(customer.id, kept.id, 1)

        gone.is_active = False
        db.commit()

        result = service.validate_cart(customer.id)

        assert result == {"valid": False, "issues": ["Product Widget is no longer available"]}
        cart = service.get_cart(customer.id)
        assert [i.product_id for i in cart.items] == [kept.id]
        assert cart.total_amount == Decimal("2.00")

    def test_deleted_product_reported_as_unknown(self, service, db, customer, make_product):
        product = make_product(stock=10)
        service.add_item(customer.id, product.id, 1)

        db.delete(product)
        db.commit()

        result = service.validate_cart(customer.id)

        assert result["issues"] == ["Product Unknown is no longer available"]
        assert service.get_cart(customer.id).items == []

    def test_quantity_clamped_to_stock(self, service, db, customer, make_product):
        product = make_product(name="Monitor", price="100.00", stock=5)
        service.add_item(customer.id, product.id, 4)

        product.stock = 2
        db.commit()

        result = service.validate_cart(customer.id)

        assert result == {"valid": False, "issues": ["Only 2 units of Monitor available"]}
        cart = service.get_cart(customer.id)
        assert cart.items[0].quantity == 2
        assert cart.total_items == 2
        assert cart.total_amount == Decimal("200.00")

    def test_sold_out_product_is_dropped(self, service, db, customer, make_product):
        product = make_product(name="Monitor", stock=5)
        service.add_item(customer.id, product.id, 1)

        product.stock = 0
        db.commit()

        result = service.validate_cart(customer.id)

        assert result["issues"] == ["Only 0 units of Monitor available"]
        assert service.get_cart(customer.id).items == []

    def test_stale_price_refreshed(self, service, db, customer, make_product):
        product = make_product(name="Mouse", price="49.50", stock=5)
        service.add_item(customer.id, product.id, 2)

        product.price = Decimal("39.99")
        db.commit()

        result = service.validate_cart(customer.id)

        assert result == {
            "valid": False,
            "issues": ["Price of Mouse has changed from 49.50 to 39.99"],
        }
        cart = service.get_cart(customer.id)
        assert cart.items[0].price == Decimal("39.99")
        assert cart.total_amount == Decimal("79.98")
        assert_totals_consistent(cart)
