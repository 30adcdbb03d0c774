import pytest
from freshcart.cart.cart import LineMeasure, ShoppingCart
from freshcart.cart.events import CartCleared, CartLineAdded, CartLineRemoved
from freshcart.catalogue.pricing import PricedCatalogItem
from freshcart.errors import EmptyCartError, InsufficientStockError, InvalidUnitError, NotAuthenticatedError
from freshcart.order.request import OrderRequest
from protean.exceptions import ValidationError


def _priced(**overrides):
    defaults = {
        "id": "item-apples",
        "name": "Apples",
        "unit_kind": "discrete",
        "price_unit": 0.5,
        "price_kilogram": 0.0,
        "price_pound": 0.0,
        "stock_quantity": 10.0,
        "reorder_threshold": 2.0,
        "cost_basis": 0.2,
        "is_listed": True,
    }
    defaults.update(overrides)
    return PricedCatalogItem(**defaults)


def _tomatoes(stock):
    return _priced(
        id="item-tomatoes",
        name="Tomatoes",
        unit_kind="weighted",
        price_unit=0.0,
        price_kilogram=4.0,
        price_pound=1.9,
        stock_quantity=stock,
    )


class TestLineMeasure:
    def test_weighted_by_kilogram(self):
        measure = LineMeasure(kind="weighted", unit="kilogram")
        assert measure.to_canonical(2) == pytest.approx(4.40924)

    def test_discrete_by_kilogram_is_rejected(self):
        with pytest.raises(ValidationError):
            LineMeasure(kind="discrete", unit="kilogram")


class TestAdd:
    def test_first_add_creates_line(self):
        cart = ShoppingCart.create(buyer_id="buyer-1")
        cart.add(_priced(), "unit")

        assert len(cart.lines) == 1
        line = cart.lines[0]
        assert line.quantity == 1
        assert line.unit_price == 0.5
        assert line.measure.unit == "unit"
        assert isinstance(cart._events[-1], CartLineAdded)

    def test_same_item_and_unit_merges(self):
        cart = ShoppingCart.create()
        cart.add(_priced(), "unit")
        cart.add(_priced(), "unit")

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 2

    def test_different_units_are_separate_lines(self):
        cart = ShoppingCart.create()
        cart.add(_tomatoes(10.0), "kilogram")
        cart.add(_tomatoes(10.0), "pound")

        assert sorted(line.measure.unit for line in cart.lines) == ["kilogram", "pound"]

    def test_unit_price_captured_at_add_time(self):
        cart = ShoppingCart.create()
        cart.add(_priced(price_unit=0.5), "unit")
        cart.add(_priced(price_unit=0.9), "unit")

        assert cart.lines[0].unit_price == 0.5
        assert cart.total() == pytest.approx(1.0)

    def test_discounted_price_is_captured(self):
        cart = ShoppingCart.create()
        cart.add(_priced(price_unit=7.0, discount_fraction=0.3, reference_price=10.0), "unit")
        assert cart.lines[0].unit_price == 7.0

    def test_incompatible_unit(self):
        cart = ShoppingCart.create()
        with pytest.raises(InvalidUnitError):
            cart.add(_priced(), "kilogram")
        assert len(cart.lines) == 0

    def test_cannot_exceed_stock(self):
        cart = ShoppingCart.create()
        item = _priced(stock_quantity=2.0)
        cart.add(item, "unit")
        cart.add(item, "unit")

        with pytest.raises(InsufficientStockError):
            cart.add(item, "unit")
        assert cart.lines[0].quantity == 2

    def test_kilogram_larger_than_stock_fails_immediately(self):
        cart = ShoppingCart.create()
        with pytest.raises(InsufficientStockError):
            cart.add(_tomatoes(2.0), "kilogram")
        assert len(cart.lines) == 0

    def test_second_kilogram_exceeds_stock(self):
        cart = ShoppingCart.create()
        cart.add(_tomatoes(4.0), "kilogram")

        with pytest.raises(InsufficientStockError):
            cart.add(_tomatoes(4.0), "kilogram")
        assert cart.lines[0].quantity == 1

    def test_reservation_counts_every_unit(self):
        cart = ShoppingCart.create()
        cart.add(_tomatoes(3.5), "kilogram")
        cart.add(_tomatoes(3.5), "pound")

        assert cart.reserved_quantity("item-tomatoes") == pytest.approx(3.20462)
        with pytest.raises(InsufficientStockError):
            cart.add(_tomatoes(3.5), "pound")


class TestRemove:
    def test_remove_decrements(self):
        cart = ShoppingCart.create()
        cart.add(_priced(), "unit")
        cart.add(_priced(), "unit")

        assert cart.remove("item-apples", "unit") is True
        assert cart.lines[0].quantity == 1
        assert isinstance(cart._events[-1], CartLineRemoved)

    def test_remove_last_unit_drops_line(self):
        cart = ShoppingCart.create()
        cart.add(_priced(), "unit")
        cart.remove("item-apples", "unit")
        assert len(cart.lines) == 0

    def test_remove_missing_line_is_noop(self):
        cart = ShoppingCart.create()
        cart.add(_tomatoes(10.0), "kilogram")

        assert cart.remove("item-tomatoes", "pound") is False
        assert cart.remove("item-unknown", "unit") is False
        assert cart.lines[0].quantity == 1

    def test_clear(self):
        cart = ShoppingCart.create()
        cart.add(_priced(), "unit")
        cart.add(_tomatoes(10.0), "pound")
        cart.clear()

        assert len(cart.lines) == 0
        assert cart._events[-1].lines_removed == 2
        assert isinstance(cart._events[-1], CartCleared)


class TestTotal:
    def test_total_sums_subtotals(self):
        cart = ShoppingCart.create()
        cart.add(_priced(price_unit=5.0), "unit")
        cart.add(_priced(price_unit=5.0), "unit")
        cart.add(_tomatoes(10.0), "pound")

        assert cart.total() == pytest.approx(11.9)

    def test_empty_cart_total(self):
        assert ShoppingCart.create().total() == 0


class TestSubmit:
    def test_submit_builds_order_request(self):
        cart = ShoppingCart.create(buyer_id="buyer-1")
        cart.add(_priced(price_unit=5.0), "unit")
        cart.add(_priced(price_unit=5.0), "unit")
        cart.add(_tomatoes(10.0), "kilogram")

        request = cart.submit(payment_method_id="pm-cash")

        assert isinstance(request, OrderRequest)
        assert request.buyer_id == "buyer-1"
        assert request.total == pytest.approx(14.0)
        assert request.total == pytest.approx(request.computed_total)
        assert request.status == "Pending"
        assert request.payment_status == "Pending"
        assert [line.measurement_unit for line in request.lines] == ["unit", "kilogram"]

    def test_submit_does_not_clear(self):
        cart = ShoppingCart.create(buyer_id="buyer-1")
        cart.add(_priced(), "unit")
        cart.submit()
        assert len(cart.lines) == 1

    def test_request_is_immutable(self):
        cart = ShoppingCart.create(buyer_id="buyer-1")
        cart.add(_priced(), "unit")
        request = cart.submit()
        with pytest.raises(AttributeError):
            request.total = 0

    def test_empty_cart(self):
        with pytest.raises(EmptyCartError):
            ShoppingCart.create(buyer_id="buyer-1").submit()

    def test_guest_cart_needs_buyer(self):
        cart = ShoppingCart.create()
        cart.add(_priced(), "unit")
        with pytest.raises(NotAuthenticatedError):
            cart.submit()

    def test_guest_cart_with_buyer_argument(self):
        cart = ShoppingCart.create()
        cart.add(_priced(), "unit")
        assert cart.submit(buyer_id="buyer-9").buyer_id == "buyer-9"

    def test_other_buyers_cart(self):
        cart = ShoppingCart.create(buyer_id="buyer-1")
        cart.add(_priced(), "unit")
        with pytest.raises(ValidationError):
            cart.submit(buyer_id="buyer-2")
