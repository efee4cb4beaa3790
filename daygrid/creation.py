from dataclasses import dataclass
from datetime import datetime, time
from typing import Awaitable, Callable

import structlog

from daygrid.config import DEFAULT_DURATION_MIN
from daygrid.errors import CreationFailure, IncompleteBookingDraft
from daygrid.models import Resource, Service
from daygrid.state import DayScheduleState
from daygrid.store import ScheduleStore
from daygrid.timegrid import format_hhmm

logger = structlog.get_logger("daygrid.creation")

NEW_BOOKING_STATUS = "pending"


@dataclass
class BookingDraft:
    resource_index: int = 0
    service_index: int = 0
    start_time: time | None = None
    duration_min: int = DEFAULT_DURATION_MIN
    customer_name: str = ""


@dataclass(frozen=True)
class CreatedBooking:
    customer_id: int
    booking_id: int | None
    start_dt: datetime


def split_customer_name(name: str) -> tuple[str, str]:
    """Split at the first run of whitespace: "Anna von Muster" -> ("Anna", "von Muster")."""
    parts = (name or "").strip().split(maxsplit=1)
    if not parts:
        return "", ""
    return parts[0], (parts[1] if len(parts) > 1 else "")


class BookingCreationFlow:
    def __init__(self, store: ScheduleStore, reload: Callable[[], Awaitable[object]]):
        self.store = store
        self.reload = reload

    def validate(self, state: DayScheduleState, draft: BookingDraft) -> tuple[Resource, Service]:
        if not (draft.customer_name or "").strip():
            raise IncompleteBookingDraft("customer name is required")
        if draft.start_time is None:
            raise IncompleteBookingDraft("start time is required")
        if int(draft.duration_min) <= 0:
            raise IncompleteBookingDraft("duration must be > 0")
        if not 0 <= draft.resource_index < len(state.resources):
            raise IncompleteBookingDraft("select a stylist")
        if not 0 <= draft.service_index < len(state.services):
            raise IncompleteBookingDraft("select a service")
        return state.resources[draft.resource_index], state.services[draft.service_index]

    async def confirm(self, state: DayScheduleState, draft: BookingDraft) -> CreatedBooking:
        resource, service = self.validate(state, draft)
        first_name, last_name = split_customer_name(draft.customer_name)

        try:
            customer_id = await self.store.create_customer(first_name, last_name)
        except Exception as exc:
            logger.warning("customer_create_failed", error=str(exc))
            raise CreationFailure(f"could not create customer: {exc}", stage="customer") from exc

        start_dt = state.start_datetime(draft.start_time)
        try:
            booking_id = await self.store.create_booking(
                customer_id,
                resource.id,
                service.id,
                start_dt,
                int(draft.duration_min),
                service.price,
                NEW_BOOKING_STATUS,
            )
        except Exception as exc:
            # The customer stays in the store; there is no compensating delete.
            logger.warning("orphan_customer", customer_id=customer_id, error=str(exc))
            raise CreationFailure(
                f"could not create booking: {exc}",
                stage="booking",
                orphan_customer_id=customer_id,
            ) from exc

        logger.info(
            "booking_created",
            booking_id=booking_id,
            customer_id=customer_id,
            resource_id=resource.id,
            service_id=service.id,
            start=format_hhmm(draft.start_time),
            duration_min=int(draft.duration_min),
        )
        await self.reload()
        return CreatedBooking(customer_id=customer_id, booking_id=booking_id, start_dt=start_dt)
