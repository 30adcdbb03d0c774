"""Rider aggregate (CQRS) — a delivery rider registered by the store operator.

A rider's identity may be supplied by the external auth provider, so the
rider record and the rider's login share one id.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String

from freshcart.domain import freshcart
from freshcart.rider.events import RiderRegistered, RiderStatusChanged


class VehicleKind(Enum):
    MOTORCYCLE = "motorcycle"
    BICYCLE = "bicycle"
    CAR = "car"


class RiderStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


def _parse(enum_cls, value, field_name):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError({field_name: [f"{value!r} is not one of {allowed}"]}) from None


@freshcart.aggregate
class Rider:
    full_name = String(required=True, max_length=255)
    id_number = String(required=True, max_length=50)
    phone = String(max_length=30)
    email = String(max_length=254)
    vehicle_kind = String(required=True, choices=VehicleKind)
    plate_number = String(max_length=20)
    status = String(choices=RiderStatus, default=RiderStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def motor_vehicles_need_a_plate(self):
        if self.vehicle_kind and self.vehicle_kind != VehicleKind.BICYCLE.value and not self.plate_number:
            raise ValidationError({"plate_number": ["Plate number is required unless riding a bicycle"]})

    @invariant.post
    def email_must_look_like_an_address(self):
        if self.email and (self.email.count("@") != 1 or "." not in self.email.split("@")[1]):
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @classmethod
    def register(cls, full_name, id_number, vehicle_kind, plate_number=None, phone=None, email=None, rider_id=None):
        now = datetime.now(UTC)
        identity = {"id": rider_id} if rider_id else {}
        rider = cls(
            full_name=full_name,
            id_number=id_number,
            vehicle_kind=_parse(VehicleKind, vehicle_kind, "vehicle_kind").value,
            plate_number=plate_number,
            phone=phone,
            email=email,
            status=RiderStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
            **identity,
        )
        rider.raise_(
            RiderRegistered(
                rider_id=str(rider.id),
                full_name=rider.full_name,
                vehicle_kind=rider.vehicle_kind,
                registered_at=now,
            )
        )
        return rider

    @property
    def is_active(self) -> bool:
        return self.status == RiderStatus.ACTIVE.value

    def change_status(self, new_status):
        target = _parse(RiderStatus, new_status, "status")
        if target.value == self.status:
            return

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            RiderStatusChanged(
                rider_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )


@freshcart.repository(part_of=Rider)
class RiderRepository:
    def all_by_name(self, status=None) -> list[Rider]:
        query = self._dao.query
        if status:
            query = query.filter(status=_parse(RiderStatus, status, "status").value)
        return list(query.order_by("full_name").limit(None).all().items)
