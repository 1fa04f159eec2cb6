#!/usr/bin/env python3
"""Tests for status enums."""

from fleet import TripStatus, VehicleStatus


class TestVehicleStatus:
    """Tests for VehicleStatus."""

    def test_compares_equal_to_stored_text(self):
        assert VehicleStatus.ON_TRIP == "On Trip"
        assert VehicleStatus.IN_SHOP == "In Shop"

    def test_lookup_by_value(self):
        assert VehicleStatus("Suspended") is VehicleStatus.SUSPENDED


class TestTripStatus:
    """Tests for TripStatus."""

    def test_all_lifecycle_states(self):
        assert [s.value for s in TripStatus] == ["Draft", "Dispatched", "Completed", "Cancelled"]
