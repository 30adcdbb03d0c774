"""Unit kinds, measurement units and canonical stock conversion.

Stock is tracked in an item's canonical unit: pounds for weighted items,
a plain count for discrete items and bundles.
"""

from enum import Enum

from protean.exceptions import ValidationError

from freshcart.errors import InvalidUnitError

POUNDS_PER_KILOGRAM = 2.20462


class UnitKind(Enum):
    DISCRETE = "discrete"
    WEIGHTED = "weighted"
    BUNDLE = "bundle"


class MeasurementUnit(Enum):
    UNIT = "unit"
    KILOGRAM = "kilogram"
    POUND = "pound"


_COMPATIBLE_UNITS = {
    UnitKind.DISCRETE: (MeasurementUnit.UNIT,),
    UnitKind.BUNDLE: (MeasurementUnit.UNIT,),
    UnitKind.WEIGHTED: (MeasurementUnit.KILOGRAM, MeasurementUnit.POUND),
}

_POUND_FACTORS = {
    MeasurementUnit.UNIT: 1.0,
    MeasurementUnit.POUND: 1.0,
    MeasurementUnit.KILOGRAM: POUNDS_PER_KILOGRAM,
}


def compatible_units(unit_kind) -> tuple:
    return _COMPATIBLE_UNITS[UnitKind(unit_kind)]


def native_unit(unit_kind) -> MeasurementUnit:
    """The unit stock is counted in: pounds for weighted items, units otherwise."""
    if UnitKind(unit_kind) == UnitKind.WEIGHTED:
        return MeasurementUnit.POUND
    return MeasurementUnit.UNIT


def ensure_compatible(unit_kind, measurement_unit) -> MeasurementUnit:
    """Return the parsed unit, or raise InvalidUnitError if it does not fit the kind."""
    try:
        unit = MeasurementUnit(measurement_unit)
    except ValueError:
        raise InvalidUnitError({"measurement_unit": [f"Unknown measurement unit: {measurement_unit}"]}) from None

    kind = UnitKind(unit_kind)
    if unit not in _COMPATIBLE_UNITS[kind]:
        allowed = ", ".join(u.value for u in _COMPATIBLE_UNITS[kind])
        raise InvalidUnitError(
            {"measurement_unit": [f"{kind.value.capitalize()} items are sold by {allowed}, not {unit.value}"]}
        )
    return unit


def to_canonical(unit_kind, measurement_unit, quantity: float = 1.0) -> float:
    """Convert ``quantity`` expressed in ``measurement_unit`` to the item's canonical unit."""
    unit = ensure_compatible(unit_kind, measurement_unit)
    return quantity * _POUND_FACTORS[unit]


def parse_unit_kind(unit_kind) -> UnitKind:
    try:
        return UnitKind(unit_kind)
    except ValueError:
        allowed = ", ".join(kind.value for kind in UnitKind)
        raise ValidationError({"unit_kind": [f"Unknown unit kind {unit_kind!r}, expected one of {allowed}"]}) from None
