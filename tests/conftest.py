import asyncio
import os
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest

os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'salon_daygrid_test.db'}"
)

DAY = date(2026, 3, 10)


def default_resources() -> list[dict]:
    return [
        {"id": 11, "name": "Anna", "color": None},
        {"id": 12, "name": "Ben", "color": "#1e88e5"},
        {"id": 13, "name": "Caro", "color": "not-a-colour"},
    ]


def default_services() -> list[dict]:
    return [
        {"id": 21, "name": "Haarschnitt", "price": "35.00", "duration_min": 60},
        {"id": 22, "name": "Farbe", "price": "80.00", "duration_min": 90},
    ]


def default_bookings() -> list[dict]:
    return [
        {
            "id": 1,
            "stylist_id": 11,
            "customer_first_name": "Kunde",
            "customer_last_name": "A",
            "service_name": "Haarschnitt",
            "start_dt": "2026-03-10T09:00:00",
            "duration_min": 60,
        },
        {
            "id": 2,
            "stylist_id": 12,
            "customer_first_name": "Kunde",
            "customer_last_name": "B",
            "service_name": "Farbe",
            "start_dt": "2026-03-10T10:30:00",
            "duration_min": 90,
        },
        {
            "id": 3,
            "stylist_id": 13,
            "customer_first_name": "Kunde",
            "customer_last_name": "C",
            "service_name": "Bartpflege",
            "start_dt": "2026-03-10T13:00:00",
            "duration_min": 30,
        },
    ]


class FakeScheduleStore:
    """In-memory store that records every call in order."""

    def __init__(self, resources=None, services=None, bookings=None):
        self.resources = default_resources() if resources is None else resources
        self.services = default_services() if services is None else services
        self.bookings = default_bookings() if bookings is None else bookings
        self.calls: list[tuple] = []
        self.fail: set[str] = set()
        self.move_gate: asyncio.Event | None = None
        self.next_customer_id = 100
        self.next_booking_id = 500
        self.customers: dict[int, tuple[str, str]] = {}

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail:
            raise RuntimeError(f"{name} failed")

    async def fetch_resources(self) -> list[dict]:
        self._record("fetch_resources")
        return [dict(r) for r in self.resources]

    async def fetch_services(self) -> list[dict]:
        self._record("fetch_services")
        return [dict(s) for s in self.services]

    async def fetch_bookings_for_date(self, day: date) -> list[dict]:
        self._record("fetch_bookings_for_date", day)
        return [dict(b) for b in self.bookings if b["start_dt"].startswith(day.isoformat())]

    async def create_customer(self, first_name: str, last_name: str) -> int:
        self._record("create_customer", first_name, last_name)
        customer_id = self.next_customer_id
        self.next_customer_id += 1
        self.customers[customer_id] = (first_name, last_name)
        return customer_id

    async def create_booking(self, customer_id, resource_id, service_id, start_dt, duration_min, price, status):
        self._record(
            "create_booking", customer_id, resource_id, service_id, start_dt, duration_min, price, status
        )
        booking_id = self.next_booking_id
        self.next_booking_id += 1
        first, last = self.customers.get(customer_id, ("", ""))
        service = next(s for s in self.services if s["id"] == service_id)
        self.bookings.append(
            {
                "id": booking_id,
                "stylist_id": resource_id,
                "customer_first_name": first,
                "customer_last_name": last,
                "service_name": service["name"],
                "start_dt": start_dt.isoformat(),
                "duration_min": duration_min,
            }
        )
        return booking_id

    async def update_booking_resource_and_time(self, booking_id: int, resource_id: int, start_dt: datetime) -> None:
        self.calls.append(("update_booking_resource_and_time", booking_id, resource_id, start_dt))
        if self.move_gate is not None:
            await self.move_gate.wait()
        if "update_booking_resource_and_time" in self.fail:
            raise RuntimeError("update_booking_resource_and_time failed")
        for row in self.bookings:
            if row["id"] == booking_id:
                row["stylist_id"] = resource_id
                row["start_dt"] = start_dt.isoformat()


@pytest.fixture
def day() -> date:
    return DAY


@pytest.fixture
def make_store():
    def _make(**kwargs) -> FakeScheduleStore:
        return FakeScheduleStore(**kwargs)

    return _make


@pytest.fixture
def store(make_store) -> FakeScheduleStore:
    return make_store()
