"""Immutable record snapshots for the fleet collections.

Every business field is optional: the store is loosely typed and a missing
value is a valid state. Numeric fields hold ``None`` when absent so that
"missing" and "zero" stay distinguishable until display.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Vehicle:
    """A fleet asset."""

    id: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    name: Optional[str] = None
    model: Optional[str] = None
    license_plate: Optional[str] = None
    vehicle_type: Optional[str] = None
    max_load_capacity: Optional[float] = None  # kg
    odometer: Optional[float] = None  # km
    status: Optional[str] = None
    region: Optional[str] = None
    image: Optional[str] = None


@dataclass(frozen=True)
class Trip:
    """A dispatched (or planned) cargo movement."""

    id: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    trip_number: Optional[str] = None
    cargo_details: Optional[str] = None
    cargo_weight: Optional[float] = None  # kg
    trip_status: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None


@dataclass(frozen=True)
class MaintenanceLog:
    """A service performed on a vehicle.

    ``vehicle_license_plate`` refers to a vehicle by value, not by id. See
    :mod:`fleet.relations`.
    """

    id: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    vehicle_license_plate: Optional[str] = None
    maintenance_type: Optional[str] = None
    service_date: Optional[datetime] = None
    description: Optional[str] = None
    service_cost: Optional[float] = None
    mechanic_name: Optional[str] = None
    vehicle_status_after_service: Optional[str] = None


@dataclass(frozen=True)
class Expense:
    """An operational expense (fuel, tolls, parts...)."""

    id: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    expense_date: Optional[datetime] = None
    expense_category: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    quantity: Optional[float] = None
    unit_of_measure: Optional[str] = None

    @property
    def unit_cost(self) -> Optional[float]:
        """Amount per unit, or None unless both amount and a non-zero quantity exist."""
        if self.amount is None or not self.quantity:
            return None
        return self.amount / self.quantity


@dataclass(frozen=True)
class Driver:
    """A licensed driver."""

    id: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    license_number: Optional[str] = None
    license_expiry_date: Optional[datetime] = None
    license_status: Optional[str] = None
    safety_score: Optional[float] = None  # 0-100
    trip_completion_rate: Optional[float] = None  # percent
    duty_status: Optional[str] = None

    @property
    def full_name(self) -> str:
        """First and last name, skipping whichever is missing."""
        return " ".join(p for p in (self.first_name, self.last_name) if p)
