"""Pricing engine — unit price resolution and the perishable discount.

Items expiring within the freshness window are sold at a discount. The
discount is computed on every catalogue read and never stored, so an item
crossing the window boundary changes price without any write.

The discount applies to every price of the item (unit, kilogram and pound)
so the rule is identical for all unit kinds.
"""

from dataclasses import asdict, dataclass, replace
from datetime import UTC, datetime

from freshcart.catalogue.units import (
    POUNDS_PER_KILOGRAM,
    MeasurementUnit,
    UnitKind,
    compatible_units,
    ensure_compatible,
)
from freshcart.domain import custom_setting

FRESHNESS_WINDOW_DAYS = 2.0
FRESHNESS_DISCOUNT = 0.3

_SECONDS_PER_DAY = 24 * 3600


@dataclass(frozen=True)
class PricedCatalogItem:
    """A catalogue item as listed to buyers, with any freshness discount applied."""

    id: str
    name: str
    unit_kind: str
    price_unit: float
    price_kilogram: float
    price_pound: float
    stock_quantity: float
    reorder_threshold: float
    cost_basis: float
    is_listed: bool
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    expiry_date: datetime | None = None
    discount_fraction: float | None = None
    reference_price: float | None = None
    reference_price_kilogram: float | None = None
    reference_price_pound: float | None = None

    @classmethod
    def from_item(cls, item) -> "PricedCatalogItem":
        return cls(
            id=str(item.id),
            name=item.name,
            unit_kind=item.unit_kind,
            price_unit=item.price_unit or 0.0,
            price_kilogram=item.price_kilogram or 0.0,
            price_pound=item.price_pound or 0.0,
            stock_quantity=item.stock_quantity or 0.0,
            reorder_threshold=item.reorder_threshold or 0.0,
            cost_basis=item.cost_basis or 0.0,
            is_listed=bool(item.is_listed),
            description=item.description,
            category=item.category,
            image_url=item.image_url,
            expiry_date=item.expiry_date,
        )

    @property
    def is_discounted(self) -> bool:
        return self.discount_fraction is not None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["expiry_date"] = self.expiry_date.isoformat() if self.expiry_date else None
        return data


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def days_to_expiry(expiry_date: datetime, now: datetime) -> float:
    return (_as_utc(expiry_date) - _as_utc(now)).total_seconds() / _SECONDS_PER_DAY


def resolve_price(item, measurement_unit) -> float:
    """Price of one ``measurement_unit`` of ``item``.

    Raises InvalidUnitError when the unit does not apply to the item's kind,
    e.g. a kilogram price for a discrete item.
    """
    unit = ensure_compatible(item.unit_kind, measurement_unit)
    if UnitKind(item.unit_kind) == UnitKind.WEIGHTED:
        if unit == MeasurementUnit.KILOGRAM:
            return item.price_kilogram or 0.0
        return item.price_pound or 0.0
    return item.price_unit or 0.0


def apply_freshness_discount(item, now: datetime | None = None) -> PricedCatalogItem:
    """Return ``item`` as listed at ``now``: discounted if it expires within the window."""
    priced = item if isinstance(item, PricedCatalogItem) else PricedCatalogItem.from_item(item)
    if priced.is_discounted or priced.expiry_date is None:
        return priced

    now = now or datetime.now(UTC)
    window = custom_setting("FRESHNESS_WINDOW_DAYS", FRESHNESS_WINDOW_DAYS)
    discount = custom_setting("FRESHNESS_DISCOUNT", FRESHNESS_DISCOUNT)

    remaining = days_to_expiry(priced.expiry_date, now)
    if not 0 < remaining < window:
        return priced

    factor = 1 - discount
    return replace(
        priced,
        discount_fraction=discount,
        reference_price=priced.price_unit,
        reference_price_kilogram=priced.price_kilogram,
        reference_price_pound=priced.price_pound,
        price_unit=priced.price_unit * factor,
        price_kilogram=priced.price_kilogram * factor,
        price_pound=priced.price_pound * factor,
    )


def unit_margin(item, measurement_unit) -> float:
    """Selling price minus cost for one ``measurement_unit``.

    Cost basis of weighted items is per pound, so it is scaled up for
    kilogram prices.
    """
    unit = ensure_compatible(item.unit_kind, measurement_unit)
    cost = item.cost_basis or 0.0
    if unit == MeasurementUnit.KILOGRAM:
        cost *= POUNDS_PER_KILOGRAM
    return resolve_price(item, unit) - cost


def unit_margins(item) -> dict[str, float]:
    """Margin for every unit the item is sold by, keyed by unit name."""
    return {unit.value: unit_margin(item, unit) for unit in compatible_units(item.unit_kind)}
