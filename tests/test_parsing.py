#!/usr/bin/env python3
"""Tests for store dict -> record parsing."""
from datetime import datetime

from fleet import Driver, Expense, MaintenanceLog, Trip, Vehicle, parse_record, parse_records


class TestParseRecord:
    """Tests for parse_record."""

    def test_vehicle_camel_case_keys(self):
        vehicle = parse_record("vehicles", {
            "_id": "v1",
            "_createdDate": "2024-05-01T10:00:00",
            "name": "Hauler",
            "licensePlate": "AB-100",
            "vehicleType": "Truck",
            "maxLoadCapacity": 18000,
            "odometer": "12500",
            "status": "On Trip",
            "vehicleImage": "https://example.com/v1.png",
        })
        assert isinstance(vehicle, Vehicle)
        assert vehicle.id == "v1"
        assert vehicle.created_date == datetime(2024, 5, 1, 10, 0)
        assert vehicle.license_plate == "AB-100"
        assert vehicle.max_load_capacity == 18000
        assert vehicle.odometer == 12500
        assert vehicle.image == "https://example.com/v1.png"

    def test_each_collection_has_a_record_type(self):
        assert isinstance(parse_record("trips", {"_id": "t"}), Trip)
        assert isinstance(parse_record("maintenancelogs", {"_id": "m"}), MaintenanceLog)
        assert isinstance(parse_record("expenses", {"_id": "e"}), Expense)
        assert isinstance(parse_record("drivers", {"_id": "d"}), Driver)

    def test_missing_fields_are_none(self):
        vehicle = parse_record("vehicles", {"_id": "v1"})
        assert vehicle.odometer is None
        assert vehicle.name is None

    def test_malformed_number_becomes_none(self):
        expense = parse_record("expenses", {"_id": "e1", "amount": "twelve", "quantity": 3})
        assert expense.amount is None
        assert expense.quantity == 3

    def test_trip_timestamps(self):
        trip = parse_record("trips", {
            "_id": "t1",
            "scheduledStartTime": "2025-02-01T06:00:00",
            "actualEndTime": "garbage",
        })
        assert trip.scheduled_start == datetime(2025, 2, 1, 6, 0)
        assert trip.actual_end is None

    def test_numeric_id_is_text(self):
        assert parse_record("vehicles", {"_id": 7}).id == "7"

    def test_missing_id_is_skipped(self):
        assert parse_record("vehicles", {"name": "Ghost"}) is None


class TestParseRecords:
    """Tests for parse_records."""

    def test_skips_unidentifiable_records(self):
        records = parse_records("vehicles", [{"_id": "a"}, {"name": "no id"}, {"_id": "b"}])
        assert [r.id for r in records] == ["a", "b"]

    def test_skips_items_that_are_not_mappings(self):
        records = parse_records("trips", [{"_id": "t1"}, None, "junk", 42, ["t2"]])
        assert [r.id for r in records] == ["t1"]
