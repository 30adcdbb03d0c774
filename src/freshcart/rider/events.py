"""Domain events for the Rider aggregate."""

from protean.fields import DateTime, Identifier, String

from freshcart.domain import freshcart


@freshcart.event(part_of="Rider")
class RiderRegistered:
    __version__ = 1

    rider_id = Identifier(required=True)
    full_name = String(required=True)
    vehicle_kind = String(required=True)
    registered_at = DateTime(required=True)


@freshcart.event(part_of="Rider")
class RiderStatusChanged:
    """A rider was activated or deactivated by the store operator."""

    __version__ = 1

    rider_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
