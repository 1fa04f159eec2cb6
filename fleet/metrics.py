"""Aggregation engine: derived fleet KPIs.

Every function here is pure. Numeric policy:

- missing numbers count as 0 in sums (see ``sum_with_default``)
- integer metrics round half-up
- money and ratio metrics are returned as strings with exactly two decimals
- every division has a zero guard; nothing here raises on empty input
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .calculations import (
    format_fixed,
    parse_number,
    percentage,
    rounded_average,
    safe_ratio,
    sum_with_default,
)
from .filters import Extractors, get_field
from .records import Expense, MaintenanceLog, Trip, Vehicle
from .status import TripStatus, VehicleStatus

UNKNOWN_CATEGORY = "Unknown"

# =============================================================================
# Classifications
# =============================================================================


def status_is(*statuses: str, field_name: str = "status") -> Callable[[Any], bool]:
    """Predicate: the record's status field equals one of ``statuses`` exactly."""
    wanted = {getattr(s, "value", s) for s in statuses}
    return lambda record: get_field(record, field_name) in wanted


def category_contains(needle: str, field_name: str = "expense_category") -> Callable[[Any], bool]:
    """Predicate: case-insensitive substring match on a category field."""
    folded = needle.casefold()

    def matches(record: Any) -> bool:
        value = get_field(record, field_name)
        return value is not None and folded in str(value).casefold()

    return matches


is_active = status_is(VehicleStatus.ON_TRIP)
is_available = status_is(VehicleStatus.AVAILABLE)
is_in_shop = status_is(VehicleStatus.IN_SHOP)
is_fuel_expense = category_contains("fuel")
is_pending_trip = status_is(TripStatus.DRAFT, TripStatus.DISPATCHED, field_name="trip_status")


def count_matching(records: Iterable[Any], predicate: Callable[[Any], bool]) -> int:
    return sum(1 for r in records if predicate(r))


# =============================================================================
# Generic sums
# =============================================================================


def field_total(records: Iterable[Any], name: str, extractors: Optional[Extractors] = None) -> float:
    """Sum a numeric field; missing or malformed values contribute 0."""
    return sum_with_default(records, lambda r: parse_number(get_field(r, name, extractors)))


def field_average(records: Sequence[Any], name: str, extractors: Optional[Extractors] = None) -> int:
    """Rounded average of a numeric field over all records (empty gives 0)."""
    return rounded_average(field_total(records, name, extractors), len(records))


# =============================================================================
# Vehicles
# =============================================================================


def active_vehicles(vehicles: Iterable[Vehicle]) -> int:
    return count_matching(vehicles, is_active)


def utilization_rate(vehicles: Sequence[Vehicle]) -> int:
    """Percentage of vehicles currently on a trip, 0 for an empty fleet."""
    return percentage(active_vehicles(vehicles), len(vehicles))


def total_odometer(vehicles: Iterable[Vehicle]) -> float:
    return field_total(vehicles, "odometer")


def average_odometer(vehicles: Sequence[Vehicle]) -> int:
    return field_average(vehicles, "odometer")


def total_load_capacity(vehicles: Iterable[Vehicle]) -> float:
    return field_total(vehicles, "max_load_capacity")


def average_load_capacity(vehicles: Sequence[Vehicle]) -> int:
    return field_average(vehicles, "max_load_capacity")


# =============================================================================
# Maintenance and expenses
# =============================================================================


def total_maintenance_cost(logs: Iterable[MaintenanceLog]) -> float:
    return field_total(logs, "service_cost")


def average_maintenance_cost(logs: Sequence[MaintenanceLog]) -> int:
    return field_average(logs, "service_cost")


def total_expenses(expenses: Iterable[Expense]) -> float:
    return field_total(expenses, "amount")


def average_expense(expenses: Sequence[Expense]) -> int:
    return field_average(expenses, "amount")


def fuel_expenses(expenses: Iterable[Expense]) -> Tuple[Expense, ...]:
    return tuple(e for e in expenses if is_fuel_expense(e))


def total_fuel_cost(expenses: Iterable[Expense]) -> float:
    return total_expenses(fuel_expenses(expenses))


def fuel_liters(expenses: Iterable[Expense]) -> float:
    """Quantity summed over fuel expenses (assumed to be liters)."""
    return field_total(fuel_expenses(expenses), "quantity")


def total_operational_cost(logs: Iterable[MaintenanceLog], expenses: Iterable[Expense]) -> float:
    return total_maintenance_cost(logs) + total_expenses(expenses)


def cost_per_km(operational_cost: float, distance_km: float) -> str:
    """Operational cost per kilometre, "0.00" when no distance was driven."""
    return format_fixed(safe_ratio(operational_cost, distance_km))


def fuel_efficiency(distance_km: float, liters: float) -> str:
    """Kilometres per liter, "0.00" when no fuel was recorded."""
    return format_fixed(safe_ratio(distance_km, liters))


# =============================================================================
# Distributions
# =============================================================================


@dataclass(frozen=True)
class CategoryShare:
    value: str
    count: int
    percentage: int


def category_distribution(
    records: Sequence[Any],
    name: str,
    extractors: Optional[Extractors] = None,
    unknown: str = UNKNOWN_CATEGORY,
) -> List[CategoryShare]:
    """
    Count and percentage per distinct value of ``name``.

    Records without a value are bucketed under ``unknown``. Counts always sum
    to ``len(records)``; rounded percentages may not sum to exactly 100.
    """
    counts: Dict[str, int] = {}
    for record in records:
        value = get_field(record, name, extractors)
        key = str(value) if value not in (None, "") else unknown
        counts[key] = counts.get(key, 0) + 1
    total = len(records)
    return [CategoryShare(value, count, percentage(count, total)) for value, count in counts.items()]


def status_counts(
    records: Iterable[Any], name: str, statuses: Iterable[str], extractors: Optional[Extractors] = None
) -> Dict[str, int]:
    """Exact-match count for each of ``statuses`` (zero when absent)."""
    counts = {str(getattr(s, "value", s)): 0 for s in statuses}
    for record in records:
        value = get_field(record, name, extractors)
        if isinstance(value, str) and value in counts:
            counts[value] += 1
    return counts


def trip_status_counts(trips: Iterable[Trip]) -> Dict[str, int]:
    return status_counts(trips, "trip_status", TripStatus)


# =============================================================================
# Summaries
# =============================================================================


@dataclass(frozen=True)
class MaintenanceSummary:
    """Service history totals for one vehicle."""

    log_count: int
    total_cost: float
    last_service_date: Optional[datetime]


def summarize_maintenance(logs: Sequence[MaintenanceLog]) -> MaintenanceSummary:
    dates = [log.service_date for log in logs if log.service_date is not None]
    return MaintenanceSummary(
        log_count=len(logs),
        total_cost=total_maintenance_cost(logs),
        last_service_date=_latest(dates),
    )


def _latest(dates: List[datetime]) -> Optional[datetime]:
    if not dates:
        return None
    # Mixed naive/aware timestamps cannot be compared directly
    return max(dates, key=lambda d: d.replace(tzinfo=None))


@dataclass(frozen=True)
class FleetSummary:
    """Every KPI shown on the analytics and home dashboards."""

    total_vehicles: int
    active_vehicles: int
    available_vehicles: int
    in_shop_vehicles: int
    utilization_rate: int
    total_odometer: float
    average_odometer: int
    total_load_capacity: float
    average_load_capacity: int
    trip_status_counts: Dict[str, int]
    pending_trips: int
    maintenance_count: int
    total_maintenance_cost: float
    average_maintenance_cost: int
    expense_count: int
    total_expenses: float
    total_fuel_cost: float
    fuel_liters: float
    total_operational_cost: float
    cost_per_km: str
    fuel_efficiency: str
    vehicle_type_distribution: List[CategoryShare] = field(default_factory=list)


def summarize_fleet(
    vehicles: Sequence[Vehicle],
    trips: Sequence[Trip],
    logs: Sequence[MaintenanceLog],
    expenses: Sequence[Expense],
) -> FleetSummary:
    """Compute the dashboard KPIs from already-filtered collections."""
    odometer = total_odometer(vehicles)
    liters = fuel_liters(expenses)
    operational = total_operational_cost(logs, expenses)
    return FleetSummary(
        total_vehicles=len(vehicles),
        active_vehicles=active_vehicles(vehicles),
        available_vehicles=count_matching(vehicles, is_available),
        in_shop_vehicles=count_matching(vehicles, is_in_shop),
        utilization_rate=utilization_rate(vehicles),
        total_odometer=odometer,
        average_odometer=average_odometer(vehicles),
        total_load_capacity=total_load_capacity(vehicles),
        average_load_capacity=average_load_capacity(vehicles),
        trip_status_counts=trip_status_counts(trips),
        pending_trips=count_matching(trips, is_pending_trip),
        maintenance_count=len(logs),
        total_maintenance_cost=total_maintenance_cost(logs),
        average_maintenance_cost=average_maintenance_cost(logs),
        expense_count=len(expenses),
        total_expenses=total_expenses(expenses),
        total_fuel_cost=total_fuel_cost(expenses),
        fuel_liters=liters,
        total_operational_cost=operational,
        cost_per_km=cost_per_km(operational, odometer),
        fuel_efficiency=fuel_efficiency(odometer, liters),
        vehicle_type_distribution=category_distribution(vehicles, "vehicle_type"),
    )
