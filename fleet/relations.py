"""MaintenanceLog -> Vehicle relation by license plate.

Logs reference a vehicle by plate text, not by id. Nothing enforces that the
plate exists or that it is unique over time, so lookups return every match
and an unknown plate simply yields nothing.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .records import MaintenanceLog, Vehicle


def logs_for_plate(logs: Iterable[MaintenanceLog], plate: Optional[str]) -> Tuple[MaintenanceLog, ...]:
    """Maintenance logs recorded against ``plate`` (exact match)."""
    if not plate:
        return ()
    return tuple(log for log in logs if log.vehicle_license_plate == plate)


def logs_for_vehicle(logs: Iterable[MaintenanceLog], vehicle: Optional[Vehicle]) -> Tuple[MaintenanceLog, ...]:
    """Maintenance logs whose plate matches the vehicle's current plate."""
    if vehicle is None:
        return ()
    return logs_for_plate(logs, vehicle.license_plate)


def vehicles_for_plate(vehicles: Iterable[Vehicle], plate: Optional[str]) -> Tuple[Vehicle, ...]:
    """All vehicles carrying ``plate``; more than one is possible."""
    if not plate:
        return ()
    return tuple(v for v in vehicles if v.license_plate == plate)


def group_logs_by_plate(logs: Iterable[MaintenanceLog]) -> Dict[str, List[MaintenanceLog]]:
    """Index logs by plate, dropping logs without one."""
    grouped: Dict[str, List[MaintenanceLog]] = {}
    for log in logs:
        if log.vehicle_license_plate:
            grouped.setdefault(log.vehicle_license_plate, []).append(log)
    return grouped
