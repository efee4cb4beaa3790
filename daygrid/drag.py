import asyncio
from dataclasses import dataclass
from datetime import time
from enum import Enum

import structlog

from daygrid.config import settings
from daygrid.errors import InvalidDragTransition
from daygrid.models import Booking
from daygrid.state import DayScheduleState
from daygrid.store import BestEffort, ScheduleStore
from daygrid.timegrid import TimeGrid, format_hhmm

logger = structlog.get_logger("daygrid.drag")


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESOLVING = "resolving"
    COMMITTED = "committed"
    # Never entered: a failed write leaves the local move in place.
    REVERTED = "reverted"


@dataclass(frozen=True)
class ColumnFrame:
    """Where a resource column sits on screen, header included."""

    resource_index: int
    origin_x: float = 0.0
    origin_y: float = 0.0
    width: float = 180.0
    header_height: float = settings.GRID_HEADER_HEIGHT

    def to_local(self, x: float, y: float) -> tuple[float, float]:
        return x - self.origin_x, y - self.origin_y

    def body_offset(self, x: float, y: float) -> float:
        _, local_y = self.to_local(x, y)
        return local_y - self.header_height


@dataclass(frozen=True)
class DropResult:
    booking: Booking
    resource_index: int
    start_time: time
    persistence: BestEffort


class DragRepositionController:
    """Turns a drop on a resource column into a move of the dragged booking.

    The move is applied to the state at once and persisted with a single
    best-effort write that nobody waits for. If that write fails, the grid
    keeps showing the new position.
    """

    def __init__(self, state: DayScheduleState, store: ScheduleStore, grid: TimeGrid):
        self.state = state
        self.store = store
        self.grid = grid
        self.phase = DragPhase.IDLE
        self._booking_id: int | None = None
        self.pending: set[asyncio.Task] = set()

    @property
    def dragging_booking_id(self) -> int | None:
        return self._booking_id

    def _reset(self) -> None:
        self._booking_id = None
        self.phase = DragPhase.IDLE

    def begin(self, booking_id: int) -> Booking:
        if self.phase in (DragPhase.DRAGGING, DragPhase.RESOLVING):
            raise InvalidDragTransition(f"cannot start a drag while {self.phase.value}")
        booking = self.state.booking_by_id(booking_id)
        if booking is None:
            raise InvalidDragTransition(f"booking {booking_id} is not on the grid")
        self._booking_id = booking.id
        self.phase = DragPhase.DRAGGING
        return booking

    def cancel(self) -> None:
        if self.phase is DragPhase.DRAGGING:
            self._reset()

    def resolve_time(self, column: ColumnFrame, x: float, y: float) -> time:
        return self.grid.from_pixel_offset(column.body_offset(x, y))

    def drop(self, column: ColumnFrame, x: float, y: float) -> DropResult:
        if self.phase is not DragPhase.DRAGGING:
            raise InvalidDragTransition(f"cannot drop while {self.phase.value}")
        self.phase = DragPhase.RESOLVING

        booking = self.state.booking_by_id(self._booking_id)
        if booking is None:
            self._reset()
            raise InvalidDragTransition("dragged booking is no longer loaded")
        if not 0 <= column.resource_index < len(self.state.resources):
            self._reset()
            raise InvalidDragTransition(f"no resource column {column.resource_index}")

        new_time = self.resolve_time(column, x, y)
        resource = self.state.resources[column.resource_index]
        from_index = booking.resource_index
        from_time = booking.start_time

        # The write is scheduled before the local move so a failed dispatch
        # leaves the booking where it was.
        try:
            persistence = BestEffort.spawn(
                self.store.update_booking_resource_and_time(
                    booking.id, resource.id, self.state.start_datetime(new_time)
                ),
                event="booking_move_persist",
                registry=self.pending,
                booking_id=booking.id,
                resource_id=resource.id,
            )
        except RuntimeError as exc:
            self._reset()
            raise InvalidDragTransition(f"move of booking {booking.id} could not be dispatched: {exc}") from exc

        self.state.move_booking(booking, column.resource_index, new_time)
        logger.info(
            "booking_moved",
            booking_id=booking.id,
            from_resource_index=from_index,
            to_resource_id=resource.id,
            from_time=format_hhmm(from_time),
            to_time=format_hhmm(new_time),
        )
        self._booking_id = None
        self.phase = DragPhase.COMMITTED
        return DropResult(
            booking=booking,
            resource_index=column.resource_index,
            start_time=new_time,
            persistence=persistence,
        )
