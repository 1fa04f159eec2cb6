"""Environment-driven settings."""

import os

PAGE_SIZE = int(os.environ.get("FLEET_PAGE_SIZE", "12"))
STORE_FILE = os.environ.get("FLEET_STORE_FILE", "fleet.yaml")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Collection ids served by the record store
VEHICLES = "vehicles"
TRIPS = "trips"
MAINTENANCE_LOGS = "maintenancelogs"
EXPENSES = "expenses"
DRIVERS = "drivers"

# Sentinel meaning "do not filter on this field"
ALL = "all"
