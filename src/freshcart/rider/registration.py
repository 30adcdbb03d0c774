"""Rider registration and activation."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from freshcart.domain import freshcart
from freshcart.errors import RiderUnavailableError
from freshcart.rider.rider import Rider, RiderStatus

logger = structlog.get_logger(__name__)


@freshcart.command(part_of="Rider")
class RegisterRider:
    """Register a rider. ``rider_id`` is the auth provider's user id when known."""

    rider_id = Identifier()
    full_name = String(required=True, max_length=255)
    id_number = String(required=True, max_length=50)
    phone = String(max_length=30)
    email = String(max_length=254)
    vehicle_kind = String(required=True, max_length=20)
    plate_number = String(max_length=20)


@freshcart.command(part_of="Rider")
class ChangeRiderStatus:
    rider_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@freshcart.command_handler(part_of=Rider)
class RiderRegistrationHandler:
    @handle(RegisterRider)
    def register_rider(self, command):
        repo = current_domain.repository_for(Rider)
        if command.rider_id:
            try:
                repo.get(command.rider_id)
            except ObjectNotFoundError:
                pass
            else:
                raise ValidationError({"rider_id": [f"Rider {command.rider_id} is already registered"]})

        rider = Rider.register(
            full_name=command.full_name,
            id_number=command.id_number,
            vehicle_kind=command.vehicle_kind,
            plate_number=command.plate_number,
            phone=command.phone,
            email=command.email,
            rider_id=command.rider_id,
        )
        repo.add(rider)
        logger.info("Rider registered", rider_id=str(rider.id), vehicle_kind=rider.vehicle_kind)
        return str(rider.id)

    @handle(ChangeRiderStatus)
    def change_rider_status(self, command):
        repo = current_domain.repository_for(Rider)
        rider = repo.get(command.rider_id)
        rider.change_status(command.status)
        repo.add(rider)
        logger.info("Rider status changed", rider_id=str(rider.id), status=rider.status)


def list_riders(status=None) -> list[Rider]:
    return current_domain.repository_for(Rider).all_by_name(status=status)


def ensure_rider_available(rider_id) -> Rider:
    """Return the rider if it exists and is Active, else raise RiderUnavailableError."""
    try:
        rider = current_domain.repository_for(Rider).get(rider_id)
    except ObjectNotFoundError:
        raise RiderUnavailableError({"rider_id": [f"Rider {rider_id} does not exist"]}) from None
    if rider.status != RiderStatus.ACTIVE.value:
        raise RiderUnavailableError({"rider_id": [f"Rider {rider.full_name} is not active"]})
    return rider
