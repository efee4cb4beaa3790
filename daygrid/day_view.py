from dataclasses import dataclass
from datetime import date
from typing import Sequence

import structlog

from daygrid.config import DURATION_CHOICES, FALLBACK_PALETTE, settings
from daygrid.creation import BookingCreationFlow, BookingDraft, CreatedBooking
from daygrid.drag import ColumnFrame, DragRepositionController, DropResult
from daygrid.errors import CreationFailure, IncompleteBookingDraft, InvalidDragTransition, LoadFailure
from daygrid.models import Booking
from daygrid.placement import place_column
from daygrid.state import DayScheduleState, load_day_schedule
from daygrid.store import ScheduleStore
from daygrid.timegrid import TimeGrid, add_minutes, format_hhmm

logger = structlog.get_logger("daygrid.view")

TIME_LABEL_WIDTH = 80.0
COLUMN_WIDTH = 180.0
COLUMN_GAP = 16.0


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


def render_day_view(state: DayScheduleState, grid: TimeGrid) -> str:
    lines = [f"Day {state.day.isoformat()} ({format_hhmm(grid.day_start)}-{format_hhmm(grid.day_end)})"]

    if not state.resources:
        lines.append("")
        lines.append("No stylists.")
        return "\n".join(lines)

    for index, resource in enumerate(state.resources):
        lines.append("")
        lines.append(f"{resource.display_name} [{state.palette[index]}]")
        placements = place_column(state.bookings, grid, state.palette, index)
        if not placements:
            lines.append("- no bookings")
            continue
        for p in placements:
            b = p.booking
            end = add_minutes(b.start_time, b.duration_min)
            client = b.customer_name.strip() or "-"
            service = b.service_name.strip() or "-"
            lines.append(
                f"- {format_hhmm(b.start_time)}-{format_hhmm(end)} | {client} | {service} "
                f"({b.duration_min}m) | y={p.top:.0f} h={p.height:.0f}"
            )

    return "\n".join(lines)


class DayScheduleView:
    """Interaction surface for one day: load, drag, create, render."""

    def __init__(
        self,
        store: ScheduleStore,
        day: date | None = None,
        grid: TimeGrid | None = None,
        fallback_palette: Sequence[str] = FALLBACK_PALETTE,
        header_height: float | None = None,
    ):
        self.store = store
        self.day = day or date.today()
        self.grid = grid or TimeGrid.from_settings()
        self.fallback_palette = list(fallback_palette)
        self.header_height = float(settings.GRID_HEADER_HEIGHT if header_height is None else header_height)
        self.state = DayScheduleState.empty(self.day)
        self.loading = False
        self.closed = False
        self.draft: BookingDraft | None = None
        self.notifications: list[Notification] = []
        self.drag = DragRepositionController(self.state, store, self.grid)
        self.creation = BookingCreationFlow(store, self._reload_after_create)

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def pop_notifications(self) -> list[Notification]:
        out, self.notifications = self.notifications, []
        return out

    async def enter(self) -> bool:
        return await self.reload()

    async def reload(self) -> bool:
        self.loading = True
        try:
            state = await load_day_schedule(self.store, self.day, self.fallback_palette)
        except LoadFailure:
            # Keep whatever was shown before: empty on first entry, stale later.
            self.notify("error", "Could not load the schedule.")
            return False
        finally:
            self.loading = False
        self.state = state
        self.drag.state = state
        return True

    def close(self) -> None:
        # Writes still in flight are neither awaited nor cancelled.
        self.closed = True
        logger.info("view_closed", day=self.day.isoformat(), pending_writes=len(self.drag.pending))

    def column_frame(self, index: int) -> ColumnFrame:
        return ColumnFrame(
            resource_index=index,
            origin_x=TIME_LABEL_WIDTH + index * (COLUMN_WIDTH + COLUMN_GAP),
            origin_y=0.0,
            width=COLUMN_WIDTH,
            header_height=self.header_height,
        )

    def column_frames(self) -> list[ColumnFrame]:
        return [self.column_frame(i) for i in range(len(self.state.resources))]

    def column_at(self, x: float) -> ColumnFrame | None:
        for frame in self.column_frames():
            if frame.origin_x <= x < frame.origin_x + frame.width:
                return frame
        return None

    def begin_drag(self, booking_id: int) -> Booking | None:
        try:
            return self.drag.begin(booking_id)
        except InvalidDragTransition as exc:
            logger.info("drag_ignored", booking_id=booking_id, reason=str(exc))
            return None

    def drop_at(self, x: float, y: float) -> DropResult | None:
        frame = self.column_at(x)
        if frame is None:
            self.drag.cancel()
            return None
        return self.drop_on_column(frame, x, y)

    def drop_on_column(self, frame: ColumnFrame, x: float, y: float) -> DropResult | None:
        try:
            return self.drag.drop(frame, x, y)
        except InvalidDragTransition as exc:
            logger.info("drop_ignored", reason=str(exc))
            return None

    def open_booking_dialog(self) -> BookingDraft:
        self.draft = BookingDraft()
        return self.draft

    def dialog_choices(self) -> dict:
        """Options offered by the booking dialog: grid start times and durations."""
        return {
            "times": self.grid.slot_times(),
            "durations": list(DURATION_CHOICES),
            "resources": [r.display_name for r in self.state.resources],
            "services": [s.name for s in self.state.services],
        }

    def cancel_booking_dialog(self) -> None:
        self.draft = None

    async def _reload_after_create(self) -> bool:
        self.draft = None
        return await self.reload()

    async def save_booking_dialog(self) -> CreatedBooking | None:
        if self.draft is None:
            return None
        try:
            created = await self.creation.confirm(self.state, self.draft)
        except IncompleteBookingDraft as exc:
            self.notify("warning", str(exc))
            return None
        except CreationFailure:
            self.draft = None
            self.notify("error", "Could not create the booking.")
            return None
        self.notify("info", "Booking created.")
        return created

    def render(self) -> str:
        return render_day_view(self.state, self.grid)
