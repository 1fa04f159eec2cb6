"""Load several collections concurrently and summarize them together.

All page requests for a dashboard are issued before any is awaited, and no
metric is computed until every collection has finished. A collection that
failed to load marks the whole result incomplete instead of being summarized
from partial data.

Detail screens look records up by id and keep "not found" apart from a
failed store.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import structlog

from . import config
from .errors import FetchFailure, PageResult
from .filters import VEHICLE_FILTERS, FilterSpec, filter_records
from .loader import CancelToken, CollectionLoader, LoadedCollection
from .metrics import FleetSummary, MaintenanceSummary, summarize_fleet, summarize_maintenance
from .records import MaintenanceLog, Vehicle
from .relations import logs_for_vehicle
from .store import EntityStore, fetch_record

logger = structlog.get_logger(__name__)

DASHBOARD_COLLECTIONS = (config.VEHICLES, config.TRIPS, config.MAINTENANCE_LOGS, config.EXPENSES)


@dataclass(frozen=True)
class DashboardData:
    collections: Dict[str, LoadedCollection]
    summary: Optional[FleetSummary]
    missing: Tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.missing

    @property
    def errors(self) -> Dict[str, FetchFailure]:
        return {c: lc.error for c, lc in self.collections.items() if lc.error is not None}


class Dashboard:
    """One loader per collection for a dashboard screen."""

    def __init__(
        self,
        store: EntityStore,
        collections: Sequence[str] = DASHBOARD_COLLECTIONS,
        page_size: Optional[int] = None,
    ):
        self.loaders: Dict[str, CollectionLoader] = {
            c: CollectionLoader(store, c, page_size) for c in collections
        }
        self._missing: Tuple[str, ...] = tuple(collections)

    async def load(self, cancel: Optional[CancelToken] = None) -> Dict[str, LoadedCollection]:
        """Reload every collection in full, concurrently, then join."""
        names = list(self.loaders)
        results = await asyncio.gather(
            *(_reload(self.loaders[name], cancel) for name in names)
        )
        self._missing = tuple(
            name for name, result in zip(names, results) if not _finished(self.loaders[name], result)
        )
        if self._missing:
            logger.warning("dashboard_incomplete", missing=list(self._missing))
        return self.snapshots()

    def snapshots(self) -> Dict[str, LoadedCollection]:
        return {name: loader.snapshot() for name, loader in self.loaders.items()}

    def vehicle_filter_options(self) -> dict:
        """Distinct type/status/region among the loaded vehicles."""
        return VEHICLE_FILTERS.options(self.loaders[config.VEHICLES].items)

    def summarize(self, vehicle_filter: Optional[FilterSpec] = None) -> DashboardData:
        """
        KPIs over the loaded collections.

        ``vehicle_filter`` narrows the vehicles only; trips, maintenance logs
        and expenses are always summarized in full. Returns ``summary=None``
        when any collection is missing.
        """
        collections = self.snapshots()
        if self._missing:
            return DashboardData(collections, None, self._missing)
        vehicles = collections[config.VEHICLES].items
        if vehicle_filter is not None:
            vehicles = filter_records(vehicles, vehicle_filter)
        summary = summarize_fleet(
            vehicles,
            collections[config.TRIPS].items,
            collections[config.MAINTENANCE_LOGS].items,
            collections[config.EXPENSES].items,
        )
        return DashboardData(collections, summary)

    def dispose(self) -> None:
        for loader in self.loaders.values():
            loader.dispose()


async def _reload(loader: CollectionLoader, cancel: Optional[CancelToken]) -> PageResult:
    result = await loader.reset(cancel=cancel)
    if result.ok:
        result = await loader.load_all(cancel)
    return result


def _finished(loader: CollectionLoader, result: PageResult) -> bool:
    return result.ok and not result.skipped and not loader.has_more


@dataclass(frozen=True)
class RecordDetail:
    """One record looked up by id for a detail screen."""

    collection: str
    record: Optional[Any] = None
    error: Optional[FetchFailure] = None

    @property
    def found(self) -> bool:
        return self.record is not None


async def load_record_detail(store: EntityStore, collection: str, record_id: str) -> RecordDetail:
    """Look up one record; a missing record and a failed store are kept apart."""
    try:
        record = await fetch_record(store, collection, record_id)
    except FetchFailure as e:
        return RecordDetail(collection, error=e)
    return RecordDetail(collection, record)


@dataclass(frozen=True)
class VehicleDetail:
    """A vehicle and its service history, looked up by plate."""

    vehicle: Optional[Vehicle]
    maintenance_logs: Tuple[MaintenanceLog, ...] = ()
    maintenance: Optional[MaintenanceSummary] = None
    errors: Dict[str, FetchFailure] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.vehicle is not None

    @property
    def complete(self) -> bool:
        return not self.errors


async def load_vehicle_detail(
    store: EntityStore, vehicle_id: str, page_size: Optional[int] = None
) -> VehicleDetail:
    """Fetch a vehicle and all maintenance logs concurrently, then relate them."""
    logs_loader = CollectionLoader(store, config.MAINTENANCE_LOGS, page_size)

    lookup, logs_result = await asyncio.gather(
        load_record_detail(store, config.VEHICLES, vehicle_id), logs_loader.load_all()
    )
    vehicle = lookup.record

    errors: Dict[str, FetchFailure] = {}
    if lookup.error is not None:
        errors[config.VEHICLES] = lookup.error
    if not logs_result.ok and logs_result.error is not None:
        errors[config.MAINTENANCE_LOGS] = logs_result.error

    if vehicle is None or config.MAINTENANCE_LOGS in errors:
        return VehicleDetail(vehicle=vehicle, errors=errors)

    logs = logs_for_vehicle(logs_loader.items, vehicle)
    logs = tuple(sorted(logs, key=_service_sort_key, reverse=True))
    return VehicleDetail(
        vehicle=vehicle,
        maintenance_logs=logs,
        maintenance=summarize_maintenance(logs),
        errors=errors,
    )


def _service_sort_key(log: MaintenanceLog):
    # Undated logs sort last when newest-first
    if log.service_date is None:
        return (0, "")
    return (1, log.service_date.replace(tzinfo=None).isoformat())
