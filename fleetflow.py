#!/usr/bin/env python3
"""
Command-line views over a fleet record store.

Commands:
  vehicles     - List vehicles (search, type/status/region filters)
  trips        - List trips (search, status filter)
  maintenance  - List maintenance logs (search, type/status filters)
  expenses     - List expenses with totals (search, category filter)
  drivers      - List drivers (search, duty/license status filters)
  vehicle      - Show one vehicle with its maintenance history
  trip         - Show one trip
  driver       - Show one driver
  maintenance-log - Show one maintenance log
  analytics    - Fleet KPIs across all collections
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path
from tabulate import tabulate
from typing import Dict, List, Optional, Sequence

from fleet import config, metrics
from fleet.dashboard import Dashboard, load_record_detail, load_vehicle_detail
from fleet.filters import SCREEN_FILTERS, ScreenFilters, filter_records
from fleet.loader import CollectionLoader
from fleet.logging import setup_logging
from fleet.records import Driver, Expense, MaintenanceLog, Trip, Vehicle
from fleet.store import YamlEntityStore

# =============================================================================
# Formatting helpers
# =============================================================================


def format_number(value: Optional[float], unit: str = "") -> str:
    """Format a quantity for display; missing stays distinct from zero."""
    if value is None:
        return "-"
    text = f"{value:,.0f}"
    return f"{text} {unit}" if unit else text


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%b %d, %Y") if value is not None else "-"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_filters(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Turn ``field=value`` arguments into a dict."""
    selected = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Filter must look like field=value, got '{pair}'")
        selected[name.strip()] = value.strip()
    return selected


# =============================================================================
# Table rows
# =============================================================================


def make_vehicle_table(vehicles: Sequence[Vehicle]) -> List[List[str]]:
    return [
        [
            v.id,
            v.name or "-",
            v.license_plate or "-",
            v.vehicle_type or "-",
            v.status or "-",
            v.region or "-",
            format_number(v.max_load_capacity, "kg"),
            format_number(v.odometer, "km"),
        ]
        for v in vehicles
    ]


def make_trip_table(trips: Sequence[Trip]) -> List[List[str]]:
    return [
        [
            t.trip_number or "-",
            t.trip_status or "-",
            f"{t.start_location or '?'} -> {t.end_location or '?'}",
            format_number(t.cargo_weight, "kg"),
            format_date(t.scheduled_start),
            truncate(t.cargo_details),
        ]
        for t in trips
    ]


def make_maintenance_table(logs: Sequence[MaintenanceLog]) -> List[List[str]]:
    return [
        [
            format_date(log.service_date),
            log.vehicle_license_plate or "-",
            log.maintenance_type or "-",
            log.mechanic_name or "-",
            format_cost(log.service_cost),
            log.vehicle_status_after_service or "-",
            truncate(log.description),
        ]
        for log in logs
    ]


def make_expense_table(expenses: Sequence[Expense]) -> List[List[str]]:
    rows = []
    for e in expenses:
        quantity = "-"
        if e.quantity is not None and e.unit_of_measure:
            quantity = f"{e.quantity:g} {e.unit_of_measure}"
        unit_cost = "-"
        if e.unit_cost is not None:
            unit_cost = f"${e.unit_cost:.2f} / {e.unit_of_measure or 'unit'}"
        rows.append(
            [
                format_date(e.expense_date),
                e.expense_category or "-",
                truncate(e.description),
                format_cost(e.amount),
                quantity,
                unit_cost,
            ]
        )
    return rows


def make_driver_table(drivers: Sequence[Driver]) -> List[List[str]]:
    return [
        [
            d.full_name or "-",
            d.duty_status or "-",
            d.license_status or "-",
            f"{d.safety_score:g}/100" if d.safety_score is not None else "-",
            f"{d.trip_completion_rate:g}%" if d.trip_completion_rate is not None else "-",
            d.email or "-",
        ]
        for d in drivers
    ]


LISTINGS = {
    "vehicles": (
        config.VEHICLES,
        make_vehicle_table,
        ["Id", "Name", "Plate", "Type", "Status", "Region", "Capacity", "Odometer"],
    ),
    "trips": (
        config.TRIPS,
        make_trip_table,
        ["Trip", "Status", "Route", "Cargo", "Scheduled", "Details"],
    ),
    "maintenance": (
        config.MAINTENANCE_LOGS,
        make_maintenance_table,
        ["Date", "Plate", "Type", "Mechanic", "Cost", "Status After", "Description"],
    ),
    "expenses": (
        config.EXPENSES,
        make_expense_table,
        ["Date", "Category", "Description", "Amount", "Quantity", "Unit Cost"],
    ),
    "drivers": (
        config.DRIVERS,
        make_driver_table,
        ["Name", "Duty", "License", "Safety", "Completion", "Email"],
    ),
}


# =============================================================================
# Listing commands
# =============================================================================


async def load_pages(loader: CollectionLoader, pages: int):
    """Load the first page, then up to ``pages - 1`` more. Returns the last result."""
    result = await loader.reset()
    loaded = 1
    while result.ok and loader.has_more and (pages <= 0 or loaded < pages):
        result = await loader.load_more()
        loaded += 1
    return result


def cmd_list(args):
    """List one collection with search and categorical filters."""
    collection, make_table, headers = LISTINGS[args.command]
    screen: ScreenFilters = SCREEN_FILTERS[collection]

    try:
        selected = parse_filters(args.filter)
        spec = screen.spec(args.search, **selected)
    except ValueError as e:
        print(f"Error: {e}")
        print(f"Available filters: {', '.join(screen.filter_fields)}")
        return 1

    store = YamlEntityStore.from_file(args.store_file)
    loader = CollectionLoader(store, collection, args.page_size)
    result = asyncio.run(load_pages(loader, args.pages))
    if result.error is not None:
        print(f"Error: {result.error}")
        if not loader.items:
            return 1

    visible = filter_records(loader.items, spec)

    print(f"Showing {len(visible)} of {len(loader.items)} {args.command} records")
    if args.search:
        print(f"Search: {args.search}")
    for name, value in selected.items():
        print(f"Filter: {name} = {value}")
    options = screen.options(loader.items)
    for name, values in options.items():
        if values:
            print(f"  {name} (loaded): {', '.join(values)}")
    if collection == config.EXPENSES:
        print(f"Total expenses: {format_cost(metrics.total_expenses(visible))}")
        print(f"Average expense: {format_cost(metrics.average_expense(visible))}")
    print()

    if visible:
        print(tabulate(make_table(visible), headers=headers, tablefmt="simple"))
    else:
        print("No records match the current search and filters.")

    if loader.has_more:
        print()
        print("More records available (use --pages or --all).")
    return 0 if result.error is None else 1


# =============================================================================
# Vehicle detail command
# =============================================================================


def cmd_vehicle(args):
    """Show a vehicle with maintenance history matched by license plate."""
    store = YamlEntityStore.from_file(args.store_file)
    detail = asyncio.run(load_vehicle_detail(store, args.vehicle_id, args.page_size))

    for collection, error in detail.errors.items():
        print(f"Error loading {collection}: {error}")
    if not detail.found:
        if not detail.errors:
            print(f"Vehicle '{args.vehicle_id}' not found")
        return 1

    v = detail.vehicle
    print(f"Vehicle: {v.name or v.id}")
    print(f"Model: {v.model or '-'}  Plate: {v.license_plate or '-'}  Status: {v.status or '-'}")
    print(f"Type: {v.vehicle_type or '-'}  Region: {v.region or '-'}")
    print(f"Capacity: {format_number(v.max_load_capacity, 'kg')}")
    print(f"Odometer: {format_number(v.odometer, 'km')}")
    print()

    if detail.maintenance is None:
        print("Maintenance history unavailable.")
        return 1

    summary = detail.maintenance
    print(f"Services: {summary.log_count}")
    print(f"Total maintenance cost: {format_cost(summary.total_cost)}")
    print(f"Last service: {format_date(summary.last_service_date)}")
    print()
    if detail.maintenance_logs:
        headers = ["Date", "Plate", "Type", "Mechanic", "Cost", "Status After", "Description"]
        print(
            tabulate(
                make_maintenance_table(detail.maintenance_logs), headers=headers, tablefmt="simple"
            )
        )
    else:
        print("No maintenance history found.")
    return 0


# =============================================================================
# Record detail commands
# =============================================================================


def format_datetime(value: Optional[datetime]) -> str:
    return value.strftime("%b %d, %Y %H:%M") if value is not None else "-"


def make_trip_detail(trip: Trip) -> List[List[str]]:
    return [
        ["Status", trip.trip_status or "-"],
        ["Route", f"{trip.start_location or '?'} -> {trip.end_location or '?'}"],
        ["Cargo", trip.cargo_details or "-"],
        ["Cargo weight", format_number(trip.cargo_weight, "kg")],
        ["Scheduled start", format_datetime(trip.scheduled_start)],
        ["Scheduled end", format_datetime(trip.scheduled_end)],
        ["Actual start", format_datetime(trip.actual_start)],
        ["Actual end", format_datetime(trip.actual_end)],
    ]


def make_driver_detail(driver: Driver) -> List[List[str]]:
    return [
        ["Duty status", driver.duty_status or "-"],
        ["Phone", driver.phone_number or "-"],
        ["Email", driver.email or "-"],
        ["License number", driver.license_number or "-"],
        ["License status", driver.license_status or "-"],
        ["License expires", format_date(driver.license_expiry_date)],
        ["Safety score", f"{driver.safety_score:g}/100" if driver.safety_score is not None else "-"],
        [
            "Trip completion",
            f"{driver.trip_completion_rate:g}%" if driver.trip_completion_rate is not None else "-",
        ],
    ]


def make_maintenance_detail(log: MaintenanceLog) -> List[List[str]]:
    return [
        ["Vehicle plate", log.vehicle_license_plate or "-"],
        ["Service date", format_date(log.service_date)],
        ["Mechanic", log.mechanic_name or "-"],
        ["Cost", format_cost(log.service_cost)],
        ["Status after service", log.vehicle_status_after_service or "-"],
        ["Description", log.description or "-"],
    ]


DETAILS = {
    "trip": (config.TRIPS, "Trip", lambda t: t.trip_number, make_trip_detail),
    "driver": (config.DRIVERS, "Driver", lambda d: d.full_name, make_driver_detail),
    "maintenance-log": (
        config.MAINTENANCE_LOGS,
        "Maintenance",
        lambda log: log.maintenance_type,
        make_maintenance_detail,
    ),
}


def cmd_record(args):
    """Show one trip, driver or maintenance log by id."""
    collection, label, title, make_rows = DETAILS[args.command]
    store = YamlEntityStore.from_file(args.store_file)
    detail = asyncio.run(load_record_detail(store, collection, args.record_id))

    if detail.error is not None:
        print(f"Error loading {collection}: {detail.error}")
        return 1
    if not detail.found:
        print(f"{label} '{args.record_id}' not found")
        return 1

    print(f"{label}: {title(detail.record) or detail.record.id}")
    print()
    print(tabulate(make_rows(detail.record), tablefmt="plain"))
    return 0


# =============================================================================
# Analytics command
# =============================================================================


def make_summary_rows(summary: metrics.FleetSummary) -> List[List[str]]:
    s = summary
    return [
        ["Total vehicles", str(s.total_vehicles)],
        ["Active fleet (On Trip)", str(s.active_vehicles)],
        ["Available", str(s.available_vehicles)],
        ["In shop", str(s.in_shop_vehicles)],
        ["Utilization rate", f"{s.utilization_rate}%"],
        ["Pending trips", str(s.pending_trips)],
        *[[f"Trips: {status}", str(count)] for status, count in s.trip_status_counts.items()],
        ["Total operational cost", format_cost(s.total_operational_cost)],
        ["Maintenance cost", format_cost(s.total_maintenance_cost)],
        ["Avg maintenance cost", format_cost(s.average_maintenance_cost)],
        ["Fuel cost", format_cost(s.total_fuel_cost)],
        ["Fuel consumed", format_number(s.fuel_liters, "L")],
        ["Cost per km", f"${s.cost_per_km}"],
        ["Fuel efficiency", f"{s.fuel_efficiency} km/L"],
        ["Total expenses", f"{format_cost(s.total_expenses)} ({s.expense_count} records)"],
        ["Total odometer", format_number(s.total_odometer, "km")],
        ["Average odometer", format_number(s.average_odometer, "km")],
        ["Average capacity", format_number(s.average_load_capacity, "kg")],
    ]


def cmd_analytics(args):
    """Fleet KPIs over vehicles, trips, maintenance logs and expenses."""
    store = YamlEntityStore.from_file(args.store_file)
    dashboard = Dashboard(store, page_size=args.page_size)
    asyncio.run(dashboard.load())

    spec = SCREEN_FILTERS[config.VEHICLES].spec(
        None, vehicle_type=args.type, status=args.status, region=args.region
    )
    data = dashboard.summarize(spec)
    if not data.complete:
        for collection, error in data.errors.items():
            print(f"Error loading {collection}: {error}")
        print(f"Analytics incomplete: missing {', '.join(data.missing)}")
        return 1

    print("Fleet analytics")
    for name in ("type", "status", "region"):
        value = getattr(args, name)
        if value:
            print(f"Filter: {name} = {value}")
    print()
    print(tabulate(make_summary_rows(data.summary), headers=["Metric", "Value"], tablefmt="simple"))

    distribution = data.summary.vehicle_type_distribution
    if distribution:
        print()
        print("Fleet composition by vehicle type:")
        rows = [[share.value, share.count, f"{share.percentage}%"] for share in distribution]
        print(tabulate(rows, headers=["Type", "Vehicles", "Share"], tablefmt="simple"))
    return 0


# =============================================================================
# Main
# =============================================================================


def main():
    parser = argparse.ArgumentParser(
        description="Fleet operations viewer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fleet.yaml vehicles --search hauler --filter status="On Trip"
  %(prog)s fleet.yaml vehicles --pages 2
  %(prog)s fleet.yaml expenses --filter expense_category=Fuel --all
  %(prog)s fleet.yaml vehicle v-001
  %(prog)s fleet.yaml driver d-001
  %(prog)s fleet.yaml analytics --region North
""",
    )
    parser.add_argument(
        "store_file",
        type=Path,
        help="Path to record store YAML file",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=config.PAGE_SIZE,
        help=f"Records per page (default: {config.PAGE_SIZE})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("vehicles", "List vehicles"),
        ("trips", "List trips"),
        ("maintenance", "List maintenance logs"),
        ("expenses", "List expenses"),
        ("drivers", "List drivers"),
    ):
        listing = subparsers.add_parser(name, help=help_text)
        listing.add_argument(
            "--search",
            type=str,
            help="Case-insensitive text to look for in the searchable fields",
        )
        listing.add_argument(
            "--filter",
            action="append",
            metavar="FIELD=VALUE",
            help="Exact-match filter, repeatable (e.g., status=Available)",
        )
        listing.add_argument(
            "--pages",
            type=int,
            default=1,
            help="Number of pages to load (default: 1)",
        )
        listing.add_argument(
            "--all",
            dest="pages",
            action="store_const",
            const=0,
            help="Load every page",
        )

    vehicle_parser = subparsers.add_parser("vehicle", help="Show one vehicle")
    vehicle_parser.add_argument("vehicle_id", type=str, help="Vehicle record id")

    for name, help_text in (
        ("trip", "Show one trip"),
        ("driver", "Show one driver"),
        ("maintenance-log", "Show one maintenance log"),
    ):
        detail_parser = subparsers.add_parser(name, help=help_text)
        detail_parser.add_argument("record_id", type=str, help="Record id")

    analytics_parser = subparsers.add_parser("analytics", help="Fleet KPIs")
    analytics_parser.add_argument("--type", type=str, help="Only vehicles of this type")
    analytics_parser.add_argument("--status", type=str, help="Only vehicles with this status")
    analytics_parser.add_argument("--region", type=str, help="Only vehicles in this region")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if not args.store_file.exists():
        print(f"Error: File not found: {args.store_file}")
        return 1

    if args.command in LISTINGS:
        return cmd_list(args)
    elif args.command == "vehicle":
        return cmd_vehicle(args)
    elif args.command in DETAILS:
        return cmd_record(args)
    elif args.command == "analytics":
        return cmd_analytics(args)

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
