"""
Fleet operations core: loading, filtering and summarizing fleet records.

This package provides:
- Records: Vehicle, Trip, MaintenanceLog, Expense, Driver snapshots
- CollectionLoader: incremental, de-duplicating page loader per collection
- FilterSpec / compose_predicate: search + categorical filters as one predicate
- metrics: utilization, cost-per-km, fuel efficiency and other KPIs
- Dashboard: concurrent multi-collection load with completeness tracking
"""

from .status import VehicleStatus, TripStatus
from .records import Vehicle, Trip, MaintenanceLog, Expense, Driver
from .errors import FetchFailure, NotFound, MalformedRecord, PageResult
from .store import Page, EntityStore, YamlEntityStore, fetch_record
from .parsing import parse_record, parse_records
from .loader import CollectionLoader, CancelToken, LoadState, LoadedCollection
from .filters import (
    FilterSpec,
    ScreenFilters,
    compose_predicate,
    filter_records,
    distinct_values,
    SCREEN_FILTERS,
)
from .metrics import FleetSummary, CategoryShare, summarize_fleet
from .dashboard import (
    Dashboard,
    DashboardData,
    RecordDetail,
    VehicleDetail,
    load_record_detail,
    load_vehicle_detail,
)

__all__ = [
    "VehicleStatus",
    "TripStatus",
    "Vehicle",
    "Trip",
    "MaintenanceLog",
    "Expense",
    "Driver",
    "FetchFailure",
    "NotFound",
    "MalformedRecord",
    "PageResult",
    "Page",
    "EntityStore",
    "YamlEntityStore",
    "fetch_record",
    "parse_record",
    "parse_records",
    "CollectionLoader",
    "CancelToken",
    "LoadState",
    "LoadedCollection",
    "FilterSpec",
    "ScreenFilters",
    "compose_predicate",
    "filter_records",
    "distinct_values",
    "SCREEN_FILTERS",
    "FleetSummary",
    "CategoryShare",
    "summarize_fleet",
    "Dashboard",
    "DashboardData",
    "RecordDetail",
    "VehicleDetail",
    "load_record_detail",
    "load_vehicle_detail",
]
