"""Shared fixtures: in-memory record stores."""

import asyncio

import pytest

from fleet.store import Page


class FakeStore:
    """In-memory store that records every request it receives."""

    def __init__(self, collections=None, fail_at=None, overlap=0):
        self.collections = collections or {}
        self.fail_at = set(fail_at or ())  # (collection, skip) pairs that raise
        self.overlap = overlap  # repeat this many records of the previous page
        self.calls = []

    async def get_all(self, collection_id, filters=(), options=None):
        options = options or {}
        skip = options.get("skip", 0)
        limit = options.get("limit", 50)
        self.calls.append((collection_id, skip, limit))
        if (collection_id, skip) in self.fail_at:
            raise ConnectionError(f"store unavailable for {collection_id}")
        items = self.collections.get(collection_id, [])
        start = max(0, skip - self.overlap) if skip else 0
        page = items[start:skip + limit]
        end = skip + limit
        return Page(items=list(page), has_next=end < len(items), next_skip=end)

    async def get_by_id(self, collection_id, record_id):
        if (collection_id, record_id) in self.fail_at:
            raise ConnectionError("store unavailable")
        for item in self.collections.get(collection_id, []):
            if isinstance(item, dict) and item.get("_id") == record_id:
                return item
        return None


class GatedStore(FakeStore):
    """FakeStore whose page requests block until ``release()`` is called."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()
        self.started = 0

    def release(self):
        self.gate.set()

    async def get_all(self, collection_id, filters=(), options=None):
        self.started += 1
        await self.gate.wait()
        return await super().get_all(collection_id, filters, options)


def make_vehicles(count, on_trip=0, **fields):
    """``count`` vehicle dicts, the first ``on_trip`` of them On Trip."""
    return [
        {
            "_id": f"v{i}",
            "name": f"Truck {i}",
            "licensePlate": f"PL-{i:03d}",
            "status": "On Trip" if i < on_trip else "Available",
            **fields,
        }
        for i in range(count)
    ]


@pytest.fixture
def fleet_data():
    return {
        "vehicles": [
            {"_id": "v1", "name": "Hauler One", "model": "Actros", "licensePlate": "AB-100",
             "vehicleType": "Truck", "status": "On Trip", "region": "North",
             "odometer": 300, "maxLoadCapacity": 18000},
            {"_id": "v2", "name": "City Van", "model": "Sprinter", "licensePlate": "CD-200",
             "vehicleType": "Van", "status": "Available", "region": "South",
             "odometer": 200, "maxLoadCapacity": 3000},
        ],
        "trips": [
            {"_id": "t1", "tripNumber": "TR-1", "tripStatus": "Completed"},
            {"_id": "t2", "tripNumber": "TR-2", "tripStatus": "Dispatched"},
            {"_id": "t3", "tripNumber": "TR-3", "tripStatus": "Draft"},
        ],
        "maintenancelogs": [
            {"_id": "m1", "vehicleLicensePlate": "AB-100", "maintenanceType": "Oil change",
             "serviceDate": "2025-01-10", "serviceCost": 150},
            {"_id": "m2", "vehicleLicensePlate": "AB-100", "maintenanceType": "Brakes",
             "serviceDate": "2025-03-02", "serviceCost": 450},
            {"_id": "m3", "vehicleLicensePlate": "CD-200", "maintenanceType": "Tires",
             "serviceDate": "2025-02-01", "serviceCost": 400},
        ],
        "expenses": [
            {"_id": "e1", "expenseCategory": "Fuel", "amount": 100, "quantity": 50,
             "unitOfMeasure": "liters"},
            {"_id": "e2", "expenseCategory": "Tolls", "amount": 20},
        ],
    }


@pytest.fixture
def store(fleet_data):
    return FakeStore(fleet_data)
