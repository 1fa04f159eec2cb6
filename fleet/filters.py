"""Compose free-text search and categorical filters into one predicate.

Screens describe what to filter with a FilterSpec; field names are resolved
through an extractor map, so the same code serves every record kind.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from . import config

Extractor = Callable[[Any], Any]
Extractors = Mapping[str, Extractor]


@dataclass(frozen=True)
class FilterSpec:
    """Declarative filter for one listing.

    ``equality_filters`` maps a field name to the value it must equal, or to
    ``"all"`` (or None) to leave that field unfiltered.
    """

    search_text: Optional[str] = None
    search_fields: Tuple[str, ...] = ()
    equality_filters: Mapping[str, Optional[str]] = field(default_factory=dict)


def get_field(record: Any, name: str, extractors: Optional[Extractors] = None) -> Any:
    """Read a field from a record, returning None when it is absent."""
    if extractors and name in extractors:
        return extractors[name](record)
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _text(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    return value if isinstance(value, str) else str(value)


def search_clause(
    search_text: Optional[str], search_fields: Sequence[str], extractors: Optional[Extractors] = None
) -> Callable[[Any], bool]:
    """Case-insensitive substring match against any of the search fields."""
    if not search_text:
        return lambda record: True
    needle = search_text.casefold()

    def matches(record: Any) -> bool:
        for name in search_fields:
            value = get_field(record, name, extractors)
            if value is not None and needle in _text(value).casefold():
                return True
        return False

    return matches


def equality_clause(
    name: str, expected: Optional[str], extractors: Optional[Extractors] = None
) -> Callable[[Any], bool]:
    """Exact match on one field; the "all" sentinel matches everything."""
    if expected is None or expected == config.ALL:
        return lambda record: True
    expected_text = _text(expected)

    def matches(record: Any) -> bool:
        value = get_field(record, name, extractors)
        return value is not None and _text(value) == expected_text

    return matches


def compose_predicate(
    spec: FilterSpec, extractors: Optional[Extractors] = None
) -> Callable[[Any], bool]:
    """Build the conjunction of the search clause and every equality clause."""
    clauses = [search_clause(spec.search_text, spec.search_fields, extractors)]
    clauses.extend(
        equality_clause(name, expected, extractors)
        for name, expected in spec.equality_filters.items()
    )
    return lambda record: all(clause(record) for clause in clauses)


def filter_records(
    records: Iterable[Any], spec: FilterSpec, extractors: Optional[Extractors] = None
) -> Tuple[Any, ...]:
    """Records matching ``spec``, in their original order."""
    predicate = compose_predicate(spec, extractors)
    return tuple(r for r in records if predicate(r))


def distinct_values(
    records: Iterable[Any], name: str, extractors: Optional[Extractors] = None
) -> List[str]:
    """
    Non-empty values of a field, in first-seen order.

    Only the records passed in are inspected: for a paginated listing this is
    whatever has been loaded so far, not every value in the remote collection.
    """
    seen = {}
    for record in records:
        value = get_field(record, name, extractors)
        if value is None:
            continue
        text = _text(value)
        if text:
            seen.setdefault(text, None)
    return list(seen)


@dataclass(frozen=True)
class ScreenFilters:
    """Search fields and categorical filter fields offered by one listing screen."""

    collection: str
    search_fields: Tuple[str, ...]
    filter_fields: Tuple[str, ...]

    def spec(self, search_text: Optional[str] = None, **selected: Optional[str]) -> FilterSpec:
        unknown = set(selected) - set(self.filter_fields)
        if unknown:
            raise ValueError(f"Unknown filter field(s) for {self.collection}: {sorted(unknown)}")
        return FilterSpec(
            search_text=search_text,
            search_fields=self.search_fields,
            equality_filters={f: selected.get(f) or config.ALL for f in self.filter_fields},
        )

    def options(self, records: Iterable[Any]) -> dict:
        """Distinct values per filter field among the loaded records."""
        records = list(records)
        return {f: distinct_values(records, f) for f in self.filter_fields}


VEHICLE_FILTERS = ScreenFilters(
    config.VEHICLES,
    search_fields=("name", "license_plate", "model"),
    filter_fields=("vehicle_type", "status", "region"),
)
TRIP_FILTERS = ScreenFilters(
    config.TRIPS,
    search_fields=("trip_number", "start_location", "end_location", "cargo_details"),
    filter_fields=("trip_status",),
)
MAINTENANCE_FILTERS = ScreenFilters(
    config.MAINTENANCE_LOGS,
    search_fields=("vehicle_license_plate", "maintenance_type", "mechanic_name", "description"),
    filter_fields=("maintenance_type", "vehicle_status_after_service"),
)
EXPENSE_FILTERS = ScreenFilters(
    config.EXPENSES,
    search_fields=("description", "expense_category"),
    filter_fields=("expense_category",),
)
DRIVER_FILTERS = ScreenFilters(
    config.DRIVERS,
    search_fields=("first_name", "last_name", "email", "license_number"),
    filter_fields=("duty_status", "license_status"),
)

SCREEN_FILTERS = {
    s.collection: s
    for s in (VEHICLE_FILTERS, TRIP_FILTERS, MAINTENANCE_FILTERS, EXPENSE_FILTERS, DRIVER_FILTERS)
}
