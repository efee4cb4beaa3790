from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Sequence

import structlog
from pydantic import ValidationError

from daygrid.config import FALLBACK_PALETTE
from daygrid.errors import LoadFailure
from daygrid.models import Booking, Resource, Service
from daygrid.placement import derive_palette, parse_hex_color
from daygrid.schemas import BookingRow, ResourceRow, ServiceRow
from daygrid.store import ScheduleStore

logger = structlog.get_logger("daygrid.state")


@dataclass
class DayScheduleState:
    """Everything the grid shows for one day.

    Replaced wholesale on every successful load. Bookings inside it are
    mutated in place by drag and drop.
    """

    day: date
    resources: list[Resource] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)
    bookings: list[Booking] = field(default_factory=list)
    palette: list[str] = field(default_factory=list)

    @classmethod
    def empty(cls, day: date) -> "DayScheduleState":
        return cls(day=day)

    def booking_by_id(self, booking_id: int) -> Booking | None:
        for b in self.bookings:
            if b.id == booking_id:
                return b
        return None

    def bookings_for_resource(self, index: int) -> list[Booking]:
        return [b for b in self.bookings if b.resource_index == index]

    def start_datetime(self, t: time) -> datetime:
        return datetime.combine(self.day, t)

    def move_booking(self, booking: Booking, resource_index: int, start_time: time) -> None:
        if not 0 <= int(resource_index) < len(self.resources):
            raise ValueError("resource_index out of range")
        booking.resource_index = int(resource_index)
        booking.start_time = start_time


def _wall_clock(value: datetime) -> time:
    if value.tzinfo is not None:
        value = value.astimezone()
    return time(value.hour, value.minute)


def _parse_rows(model, rows, what: str) -> list:
    try:
        return [model(**row) for row in (rows or [])]
    except (ValidationError, TypeError) as exc:
        raise LoadFailure(f"malformed {what} row: {exc}") from exc


def build_day_schedule(
    day: date,
    resource_rows: Sequence[dict],
    service_rows: Sequence[dict],
    booking_rows: Sequence[dict],
    fallback_palette: Sequence[str] = FALLBACK_PALETTE,
) -> DayScheduleState:
    resources = [
        Resource(id=r.id, display_name=r.name, color_hex=parse_hex_color(r.color))
        for r in _parse_rows(ResourceRow, resource_rows, "resource")
    ]
    services = [
        Service(id=s.id, name=s.name, price=s.price, duration_min=s.duration_min)
        for s in _parse_rows(ServiceRow, service_rows, "service")
    ]

    index_by_id = {r.id: i for i, r in enumerate(resources)}
    bookings: list[Booking] = []
    for row in _parse_rows(BookingRow, booking_rows, "booking"):
        index = index_by_id.get(row.stylist_id)
        if index is None:
            raise LoadFailure(f"booking {row.id} references unknown stylist {row.stylist_id}")
        bookings.append(
            Booking(
                id=row.id,
                customer_name=row.customer_name,
                service_name=row.service_name,
                resource_index=index,
                start_time=_wall_clock(row.start_dt),
                duration_min=row.duration_min,
            )
        )

    return DayScheduleState(
        day=day,
        resources=resources,
        services=services,
        bookings=bookings,
        palette=derive_palette(resources, fallback_palette),
    )


async def load_day_schedule(
    store: ScheduleStore,
    day: date,
    fallback_palette: Sequence[str] = FALLBACK_PALETTE,
) -> DayScheduleState:
    try:
        resource_rows = await store.fetch_resources()
        service_rows = await store.fetch_services()
        booking_rows = await store.fetch_bookings_for_date(day)
    except Exception as exc:
        logger.warning("day_load_failed", day=day.isoformat(), error=str(exc))
        raise LoadFailure(f"could not load {day.isoformat()}: {exc}") from exc

    try:
        state = build_day_schedule(day, resource_rows, service_rows, booking_rows, fallback_palette)
    except LoadFailure as exc:
        logger.warning("day_load_failed", day=day.isoformat(), error=str(exc))
        raise

    logger.info(
        "day_loaded",
        day=day.isoformat(),
        resources=len(state.resources),
        services=len(state.services),
        bookings=len(state.bookings),
    )
    return state
