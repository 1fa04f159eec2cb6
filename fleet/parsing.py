"""Convert raw store dictionaries (camelCase keys) into record objects."""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

import structlog

from . import config
from .calculations import parse_number, parse_timestamp
from .errors import MalformedRecord
from .records import Driver, Expense, MaintenanceLog, Trip, Vehicle

logger = structlog.get_logger(__name__)

R = TypeVar("R")

TEXT = "text"
NUMBER = "number"
TIMESTAMP = "timestamp"

# store key -> (attribute, kind)
FieldMap = Dict[str, tuple]

_COMMON: FieldMap = {
    "_createdDate": ("created_date", TIMESTAMP),
    "_updatedDate": ("updated_date", TIMESTAMP),
}

VEHICLE_FIELDS: FieldMap = {
    **_COMMON,
    "name": ("name", TEXT),
    "model": ("model", TEXT),
    "licensePlate": ("license_plate", TEXT),
    "vehicleType": ("vehicle_type", TEXT),
    "maxLoadCapacity": ("max_load_capacity", NUMBER),
    "odometer": ("odometer", NUMBER),
    "status": ("status", TEXT),
    "region": ("region", TEXT),
    "vehicleImage": ("image", TEXT),
}

TRIP_FIELDS: FieldMap = {
    **_COMMON,
    "tripNumber": ("trip_number", TEXT),
    "cargoDetails": ("cargo_details", TEXT),
    "cargoWeight": ("cargo_weight", NUMBER),
    "tripStatus": ("trip_status", TEXT),
    "startLocation": ("start_location", TEXT),
    "endLocation": ("end_location", TEXT),
    "scheduledStartTime": ("scheduled_start", TIMESTAMP),
    "scheduledEndTime": ("scheduled_end", TIMESTAMP),
    "actualStartTime": ("actual_start", TIMESTAMP),
    "actualEndTime": ("actual_end", TIMESTAMP),
}

MAINTENANCE_LOG_FIELDS: FieldMap = {
    **_COMMON,
    "vehicleLicensePlate": ("vehicle_license_plate", TEXT),
    "maintenanceType": ("maintenance_type", TEXT),
    "serviceDate": ("service_date", TIMESTAMP),
    "description": ("description", TEXT),
    "serviceCost": ("service_cost", NUMBER),
    "mechanicName": ("mechanic_name", TEXT),
    "vehicleStatusAfterService": ("vehicle_status_after_service", TEXT),
}

EXPENSE_FIELDS: FieldMap = {
    **_COMMON,
    "expenseDate": ("expense_date", TIMESTAMP),
    "expenseCategory": ("expense_category", TEXT),
    "description": ("description", TEXT),
    "amount": ("amount", NUMBER),
    "quantity": ("quantity", NUMBER),
    "unitOfMeasure": ("unit_of_measure", TEXT),
}

DRIVER_FIELDS: FieldMap = {
    **_COMMON,
    "firstName": ("first_name", TEXT),
    "lastName": ("last_name", TEXT),
    "driverPhoto": ("photo", TEXT),
    "phoneNumber": ("phone_number", TEXT),
    "email": ("email", TEXT),
    "licenseNumber": ("license_number", TEXT),
    "licenseExpiryDate": ("license_expiry_date", TIMESTAMP),
    "licenseStatus": ("license_status", TEXT),
    "safetyScore": ("safety_score", NUMBER),
    "tripCompletionRate": ("trip_completion_rate", NUMBER),
    "dutyStatus": ("duty_status", TEXT),
}

RECORD_TYPES: Dict[str, tuple] = {
    config.VEHICLES: (Vehicle, VEHICLE_FIELDS),
    config.TRIPS: (Trip, TRIP_FIELDS),
    config.MAINTENANCE_LOGS: (MaintenanceLog, MAINTENANCE_LOG_FIELDS),
    config.EXPENSES: (Expense, EXPENSE_FIELDS),
    config.DRIVERS: (Driver, DRIVER_FIELDS),
}


def _parse_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


_PARSERS: Dict[str, Callable[[Any], Any]] = {
    TEXT: _parse_text,
    NUMBER: parse_number,
    TIMESTAMP: parse_timestamp,
}


def parse_record(
    collection: str,
    dct: Dict[str, Any],
    record_type: Optional[Type[R]] = None,
    fields: Optional[FieldMap] = None,
) -> Optional[R]:
    """
    Build a record from a store dictionary.

    Unparseable values are dropped to None (logged as MalformedRecord) and
    never raised. Returns None, with a warning, when the item is not a
    mapping or has no ``_id``.
    """
    if record_type is None or fields is None:
        record_type, fields = RECORD_TYPES[collection]

    if not isinstance(dct, Mapping):
        logger.warning("record_skipped", collection=collection, reason="not a mapping")
        return None
    record_id = dct.get("_id")
    if record_id is None or record_id == "":
        logger.warning("record_skipped", collection=collection, reason="missing _id")
        return None
    record_id = str(record_id)

    kwargs: Dict[str, Any] = {"id": record_id}
    for key, (attr, kind) in fields.items():
        raw = dct.get(key)
        value = _PARSERS[kind](raw)
        if value is None and raw is not None and raw != "":
            issue = MalformedRecord(collection, record_id, key, raw)
            logger.debug("malformed_field", collection=collection, detail=str(issue))
        kwargs[attr] = value
    return record_type(**kwargs)


def parse_records(collection: str, items: Iterable[Dict[str, Any]]) -> List[Any]:
    """Parse a page of store dicts, skipping ones that cannot be identified."""
    records = []
    for dct in items:
        record = parse_record(collection, dct)
        if record is not None:
            records.append(record)
    return records
