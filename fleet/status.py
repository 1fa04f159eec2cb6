"""Status enums for vehicles and trips."""

from enum import Enum


class VehicleStatus(str, Enum):
    """Operational state of a vehicle. Members compare equal to the stored text."""

    AVAILABLE = "Available"
    ON_TRIP = "On Trip"
    IN_SHOP = "In Shop"
    SUSPENDED = "Suspended"


class TripStatus(str, Enum):
    """Lifecycle state of a trip."""

    DRAFT = "Draft"
    DISPATCHED = "Dispatched"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
