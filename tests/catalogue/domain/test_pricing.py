"""Freshness discount and unit price resolution."""

from datetime import UTC, datetime, timedelta

import pytest
import structlog
from freshcart.catalogue.pricing import (
    PricedCatalogItem,
    apply_freshness_discount,
    days_to_expiry,
    resolve_price,
    unit_margin,
)
from freshcart.errors import InvalidUnitError
from protean import current_domain

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _make_item(**overrides):
    defaults = {
        "id": "item-001",
        "name": "Strawberries",
        "unit_kind": "discrete",
        "price_unit": 10.0,
        "price_kilogram": 0.0,
        "price_pound": 0.0,
        "stock_quantity": 20.0,
        "reorder_threshold": 5.0,
        "cost_basis": 6.0,
        "is_listed": True,
    }
    defaults.update(overrides)
    return PricedCatalogItem(**defaults)


class TestFreshnessDiscount:
    def test_item_expiring_tomorrow_is_discounted(self):
        item = _make_item(expiry_date=NOW + timedelta(days=1))
        priced = apply_freshness_discount(item, NOW)

        assert priced.price_unit == pytest.approx(7.0)
        assert priced.discount_fraction == 0.3
        assert priced.reference_price == 10.0

    def test_no_expiry_passes_through(self):
        priced = apply_freshness_discount(_make_item(), NOW)
        assert priced.price_unit == 10.0
        assert priced.discount_fraction is None
        assert priced.reference_price is None

    def test_expiry_beyond_window_is_not_discounted(self):
        priced = apply_freshness_discount(_make_item(expiry_date=NOW + timedelta(days=3)), NOW)
        assert priced.discount_fraction is None

    def test_exactly_two_days_is_not_discounted(self):
        priced = apply_freshness_discount(_make_item(expiry_date=NOW + timedelta(days=2)), NOW)
        assert priced.discount_fraction is None

    def test_just_inside_window_is_discounted(self):
        priced = apply_freshness_discount(_make_item(expiry_date=NOW + timedelta(days=1, hours=23)), NOW)
        assert priced.discount_fraction == 0.3

    def test_expired_item_is_not_discounted(self):
        priced = apply_freshness_discount(_make_item(expiry_date=NOW - timedelta(hours=1)), NOW)
        assert priced.discount_fraction is None

    def test_expiring_right_now_is_not_discounted(self):
        priced = apply_freshness_discount(_make_item(expiry_date=NOW), NOW)
        assert priced.discount_fraction is None

    def test_discount_is_idempotent(self):
        item = _make_item(expiry_date=NOW + timedelta(hours=12))
        once = apply_freshness_discount(item, NOW)
        twice = apply_freshness_discount(once, NOW)
        assert twice == once
        assert twice.price_unit == pytest.approx(7.0)

    def test_weighted_prices_are_discounted_too(self):
        item = _make_item(
            unit_kind="weighted",
            price_unit=0.0,
            price_kilogram=4.0,
            price_pound=2.0,
            expiry_date=NOW + timedelta(days=1),
        )
        priced = apply_freshness_discount(item, NOW)

        assert priced.price_kilogram == pytest.approx(2.8)
        assert priced.price_pound == pytest.approx(1.4)
        assert priced.reference_price_kilogram == 4.0
        assert priced.reference_price_pound == 2.0

    def test_naive_expiry_is_treated_as_utc(self):
        naive = (NOW + timedelta(days=1)).replace(tzinfo=None)
        priced = apply_freshness_discount(_make_item(expiry_date=naive), NOW)
        assert priced.discount_fraction == 0.3

    def test_input_item_is_not_modified(self):
        item = _make_item(expiry_date=NOW + timedelta(days=1))
        apply_freshness_discount(item, NOW)
        assert item.price_unit == 10.0
        assert item.discount_fraction is None

    def test_configured_window_and_discount(self, monkeypatch):
        custom = current_domain.config["custom"]
        monkeypatch.setitem(custom, "FRESHNESS_WINDOW_DAYS", 4)
        monkeypatch.setitem(custom, "FRESHNESS_DISCOUNT", 0.5)

        priced = apply_freshness_discount(_make_item(expiry_date=NOW + timedelta(days=3)), NOW)
        assert priced.price_unit == pytest.approx(5.0)

    def test_malformed_discount_keeps_default(self, monkeypatch):
        captured = structlog.testing.CapturingLogger()
        monkeypatch.setattr("freshcart.domain.logger", captured)
        monkeypatch.setitem(current_domain.config["custom"], "FRESHNESS_DISCOUNT", "half off")

        priced = apply_freshness_discount(_make_item(expiry_date=NOW + timedelta(days=1)), NOW)
        assert priced.discount_fraction == 0.3
        assert [call.kwargs["key"] for call in captured.calls] == ["FRESHNESS_DISCOUNT"]


class TestDaysToExpiry:
    def test_fractional_days(self):
        assert days_to_expiry(NOW + timedelta(hours=36), NOW) == pytest.approx(1.5)


class TestResolvePrice:
    def test_discrete_uses_unit_price(self):
        assert resolve_price(_make_item(), "unit") == 10.0

    def test_weighted_by_kilogram(self):
        item = _make_item(unit_kind="weighted", price_kilogram=4.0, price_pound=1.9)
        assert resolve_price(item, "kilogram") == 4.0

    def test_weighted_by_pound(self):
        item = _make_item(unit_kind="weighted", price_kilogram=4.0, price_pound=1.9)
        assert resolve_price(item, "pound") == 1.9

    def test_bundle_uses_unit_price(self):
        assert resolve_price(_make_item(unit_kind="bundle", price_unit=15.0), "unit") == 15.0

    def test_incompatible_unit(self):
        with pytest.raises(InvalidUnitError):
            resolve_price(_make_item(), "pound")


class TestUnitMargin:
    def test_discrete_margin(self):
        assert unit_margin(_make_item(), "unit") == pytest.approx(4.0)

    def test_kilogram_margin_scales_cost(self):
        item = _make_item(unit_kind="weighted", price_kilogram=5.0, price_pound=2.5, cost_basis=1.0)
        assert unit_margin(item, "kilogram") == pytest.approx(5.0 - 2.20462)
        assert unit_margin(item, "pound") == pytest.approx(1.5)
