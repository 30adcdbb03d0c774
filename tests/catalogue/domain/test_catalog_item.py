import pytest
from freshcart.catalogue.events import (
    CatalogItemAdded,
    CatalogItemUpdated,
    LowStockDetected,
    StockAdjusted,
    StockCommitted,
    StockReleased,
    StockReserved,
)
from freshcart.catalogue.item import CatalogItem
from freshcart.errors import InsufficientStockError, ReservationNotFoundError
from protean.exceptions import ValidationError


def _make_item(**overrides):
    defaults = {
        "name": "Avocado",
        "unit_kind": "discrete",
        "stock_quantity": 10.0,
        "price_unit": 1.5,
        "reorder_threshold": 2.0,
    }
    defaults.update(overrides)
    return CatalogItem.create(**defaults)


class TestCatalogItemCreation:
    def test_create_sets_fields(self):
        item = _make_item()
        assert item.name == "Avocado"
        assert item.unit_kind == "discrete"
        assert item.stock_quantity == 10.0
        assert item.is_listed is True
        assert item.created_at is not None

    def test_create_raises_added_event(self):
        item = _make_item()
        assert isinstance(item._events[0], CatalogItemAdded)

    def test_unknown_unit_kind_rejected(self):
        with pytest.raises(ValidationError):
            _make_item(unit_kind="liquid")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _make_item(price_unit=-1.0)


class TestUpdateDetails:
    def test_changes_fields_and_raises_event(self):
        item = _make_item()
        item._events.clear()
        item.update_details(price_unit=2.0, category="Fruit")

        assert item.price_unit == 2.0
        assert item.category == "Fruit"
        assert isinstance(item._events[-1], CatalogItemUpdated)

    def test_no_change_raises_nothing(self):
        item = _make_item()
        item._events.clear()
        item.update_details(price_unit=1.5)
        assert item._events == []

    def test_stock_is_not_editable_here(self):
        item = _make_item()
        with pytest.raises(ValidationError) as exc:
            item.update_details(stock_quantity=3.0)
        assert "fields" in exc.value.messages

    def test_unit_kind_locked_while_reserved(self):
        item = _make_item()
        item.reserve_stock("ord-1", 1)
        with pytest.raises(ValidationError):
            item.update_details(unit_kind="bundle")


class TestStockReservation:
    def test_reserve_debits_stock(self):
        item = _make_item()
        item.reserve_stock("ord-1", 3)

        assert item.stock_quantity == 7.0
        assert len(item.active_reservations) == 1
        assert any(isinstance(e, StockReserved) for e in item._events)

    def test_reserve_exact_remaining_stock(self):
        item = _make_item(stock_quantity=4.40924)
        item.reserve_stock("ord-1", 2 * 2.20462)
        assert item.stock_quantity == pytest.approx(0.0)

    def test_reserve_more_than_available_fails_untouched(self):
        item = _make_item(stock_quantity=2.0)
        with pytest.raises(InsufficientStockError) as exc:
            item.reserve_stock("ord-1", 2.5)

        assert item.stock_quantity == 2.0
        assert item.reservations == []
        assert exc.value.messages["item_id"] == [str(item.id)]

    def test_reserve_non_positive_quantity(self):
        with pytest.raises(ValidationError):
            _make_item().reserve_stock("ord-1", 0)

    def test_low_stock_detected(self):
        item = _make_item(stock_quantity=3.0)
        item.reserve_stock("ord-1", 1)
        assert item.is_low_on_stock
        assert any(isinstance(e, LowStockDetected) for e in item._events)

    def test_release_restores_stock(self):
        item = _make_item()
        item.reserve_stock("ord-1", 4)
        item.release_stock("ord-1", 4)

        assert item.stock_quantity == 10.0
        assert item.reservations == []
        assert any(isinstance(e, StockReleased) for e in item._events)

    def test_release_without_reservation(self):
        with pytest.raises(ReservationNotFoundError):
            _make_item().release_stock("ord-1", 1)

    def test_release_twice_fails(self):
        item = _make_item()
        item.reserve_stock("ord-1", 2)
        item.release_stock("ord-1", 2)
        with pytest.raises(ReservationNotFoundError):
            item.release_stock("ord-1", 2)

    def test_release_matches_quantity(self):
        item = _make_item()
        item.reserve_stock("ord-1", 2)
        with pytest.raises(ReservationNotFoundError):
            item.release_stock("ord-1", 3)

    def test_commit_makes_reservations_final(self):
        item = _make_item()
        item.reserve_stock("ord-1", 2)
        item.reserve_stock("ord-1", 1)
        item.reserve_stock("ord-2", 1)

        assert item.commit_reservations("ord-1") == 2
        assert item.stock_quantity == 6.0
        assert len(item.active_reservations) == 1
        committed = [e for e in item._events if isinstance(e, StockCommitted)]
        assert committed[-1].quantity == 3

    def test_committed_reservation_cannot_be_released(self):
        item = _make_item()
        item.reserve_stock("ord-1", 2)
        item.commit_reservations("ord-1")
        with pytest.raises(ReservationNotFoundError):
            item.release_stock("ord-1", 2)


class TestStockAdjustment:
    def test_adjust_overwrites_stock(self):
        item = _make_item()
        item.adjust_stock(25.0)
        assert item.stock_quantity == 25.0
        adjusted = [e for e in item._events if isinstance(e, StockAdjusted)]
        assert adjusted[-1].previous_quantity == 10.0

    def test_adjust_to_zero_allowed(self):
        item = _make_item()
        item.adjust_stock(0)
        assert item.stock_quantity == 0.0

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            _make_item().adjust_stock(-1)
