#!/usr/bin/env python3
"""Tests for the predicate composer."""
import itertools

import pytest

from fleet import FilterSpec, Vehicle, VehicleStatus, compose_predicate, distinct_values, filter_records
from fleet.filters import (
    DRIVER_FILTERS,
    EXPENSE_FILTERS,
    VEHICLE_FILTERS,
    equality_clause,
    get_field,
    search_clause,
)


@pytest.fixture
def vehicles():
    return [
        Vehicle(id="v1", name="Hauler One", model="Actros", license_plate="AB-100",
                vehicle_type="Truck", status="On Trip", region="North"),
        Vehicle(id="v2", name="City Van", model="Sprinter", license_plate="CD-200",
                vehicle_type="Van", status="Available", region="South"),
        Vehicle(id="v3", name="Hauler Two", model=None, license_plate="AB-300",
                vehicle_type="Truck", status="In Shop", region="North"),
        Vehicle(id="v4"),
    ]


class TestSearchClause:
    """Tests for the free-text clause."""

    def test_empty_search_matches_everything(self, vehicles):
        for text in (None, ""):
            clause = search_clause(text, ("name",))
            assert all(clause(v) for v in vehicles)

    def test_case_insensitive_substring(self, vehicles):
        clause = search_clause("HAULER", ("name", "license_plate", "model"))
        assert [v.id for v in vehicles if clause(v)] == ["v1", "v3"]

    def test_any_field_matches(self, vehicles):
        clause = search_clause("sprint", ("name", "license_plate", "model"))
        assert [v.id for v in vehicles if clause(v)] == ["v2"]

    def test_absent_field_contributes_false(self, vehicles):
        clause = search_clause("actros", ("model",))
        assert clause(vehicles[2]) is False
        assert clause(vehicles[3]) is False


class TestEqualityClause:
    """Tests for categorical equality clauses."""

    def test_all_sentinel_matches_everything(self, vehicles):
        clause = equality_clause("status", "all")
        assert all(clause(v) for v in vehicles)

    def test_none_matches_everything(self, vehicles):
        assert all(equality_clause("status", None)(v) for v in vehicles)

    def test_exact_match_not_substring(self, vehicles):
        clause = equality_clause("vehicle_type", "Tru")
        assert not any(clause(v) for v in vehicles)
        clause = equality_clause("vehicle_type", "Truck")
        assert [v.id for v in vehicles if clause(v)] == ["v1", "v3"]

    def test_case_sensitive(self, vehicles):
        assert not any(equality_clause("region", "north")(v) for v in vehicles)

    def test_enum_expected_value(self, vehicles):
        clause = equality_clause("status", VehicleStatus.ON_TRIP)
        assert [v.id for v in vehicles if clause(v)] == ["v1"]

    def test_missing_field_does_not_match(self, vehicles):
        assert equality_clause("region", "North")(vehicles[3]) is False


class TestComposePredicate:
    """Tests for compose_predicate / filter_records."""

    def test_search_and_filters_are_conjoined(self, vehicles):
        spec = FilterSpec(
            search_text="hauler",
            search_fields=("name",),
            equality_filters={"status": "In Shop", "region": "North"},
        )
        assert [v.id for v in filter_records(vehicles, spec)] == ["v3"]

    def test_empty_spec_keeps_everything_in_order(self, vehicles):
        assert filter_records(vehicles, FilterSpec()) == tuple(vehicles)

    def test_result_is_immutable_view(self, vehicles):
        assert isinstance(filter_records(vehicles, FilterSpec()), tuple)

    def test_clause_order_does_not_matter(self, vehicles):
        filters = {"vehicle_type": "Truck", "region": "North", "status": "all"}
        expected = None
        for order in itertools.permutations(filters):
            spec = FilterSpec("hauler", ("name",), {k: filters[k] for k in order})
            ids = [v.id for v in filter_records(vehicles, spec)]
            if expected is None:
                expected = ids
            assert ids == expected
        assert expected == ["v1", "v3"]

    def test_search_before_or_after_equality(self, vehicles):
        equality_only = FilterSpec(equality_filters={"vehicle_type": "Truck"})
        search_only = FilterSpec("one", ("name",))
        both = FilterSpec("one", ("name",), {"vehicle_type": "Truck"})

        a = filter_records(filter_records(vehicles, equality_only), search_only)
        b = filter_records(filter_records(vehicles, search_only), equality_only)
        assert a == b == filter_records(vehicles, both)

    def test_custom_extractors(self):
        records = [{"meta": {"tag": "x"}}, {"meta": {"tag": "y"}}]
        extractors = {"tag": lambda r: r["meta"]["tag"]}
        predicate = compose_predicate(FilterSpec(equality_filters={"tag": "y"}), extractors)
        assert [predicate(r) for r in records] == [False, True]

    def test_dict_records(self):
        records = [{"status": "Available"}, {"status": "On Trip"}, {}]
        spec = FilterSpec(equality_filters={"status": "On Trip"})
        assert filter_records(records, spec) == ({"status": "On Trip"},)


class TestDistinctValues:
    """Tests for distinct_values."""

    def test_first_seen_order_without_empties(self, vehicles):
        assert distinct_values(vehicles, "vehicle_type") == ["Truck", "Van"]
        assert distinct_values(vehicles, "region") == ["North", "South"]

    def test_only_loaded_records_are_considered(self, vehicles):
        assert distinct_values(vehicles[:1], "status") == ["On Trip"]

    def test_empty_strings_are_skipped(self):
        records = [Vehicle(id="a", region=""), Vehicle(id="b", region="West")]
        assert distinct_values(records, "region") == ["West"]

    def test_get_field_missing_attribute(self):
        assert get_field(Vehicle(id="a"), "no_such_field") is None


class TestScreenFilters:
    """Tests for per-screen presets."""

    def test_spec_defaults_unselected_fields_to_all(self):
        spec = VEHICLE_FILTERS.spec("van", status="Available")
        assert spec.search_fields == ("name", "license_plate", "model")
        assert spec.equality_filters == {
            "vehicle_type": "all",
            "status": "Available",
            "region": "all",
        }

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            EXPENSE_FILTERS.spec(None, status="x")

    def test_options(self, vehicles):
        options = VEHICLE_FILTERS.options(vehicles)
        assert options["status"] == ["On Trip", "Available", "In Shop"]

    def test_driver_search_fields(self):
        from fleet import Driver

        drivers = [
            Driver(id="d1", first_name="Ada", email="ada@example.com", duty_status="On Duty"),
            Driver(id="d2", last_name="Hopper", license_number="LIC-9", duty_status="Off Duty"),
        ]
        assert [d.id for d in filter_records(drivers, DRIVER_FILTERS.spec("lic-9"))] == ["d2"]
        spec = DRIVER_FILTERS.spec(None, duty_status="On Duty")
        assert [d.id for d in filter_records(drivers, spec)] == ["d1"]
