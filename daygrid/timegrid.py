import math
from dataclasses import dataclass
from datetime import time

from daygrid.config import settings

MINUTES_PER_DAY = 24 * 60


def minutes_of_day(t: time) -> int:
    return t.hour * 60 + t.minute


def time_from_minutes(total: int) -> time:
    total = int(total) % MINUTES_PER_DAY
    return time(total // 60, total % 60)


def add_minutes(t: time, minutes: int) -> time:
    """Wall-clock addition, wrapping at midnight. Used for end-time labels."""
    return time_from_minutes(minutes_of_day(t) + int(minutes))


def format_hhmm(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


@dataclass(frozen=True)
class TimeGrid:
    """Maps time-of-day to vertical slots and pixel offsets.

    The domain is ``[day_start, day_end)`` split into ``slot_count`` slots of
    ``slot_minutes`` each, every slot ``slot_height`` pixels tall. Inputs
    outside the domain are clamped to the first or last slot; precision below
    one slot is dropped (a 09:15 start on a 30 minute grid maps to 09:00).
    """

    day_start: time = time(8, 0)
    day_end: time = time(20, 0)
    slot_minutes: int = 30
    slot_height: float = 60.0

    def __post_init__(self):
        if int(self.slot_minutes) <= 0:
            raise ValueError("slot_minutes must be > 0")
        if float(self.slot_height) <= 0:
            raise ValueError("slot_height must be > 0")
        span = minutes_of_day(self.day_end) - minutes_of_day(self.day_start)
        if span <= 0:
            raise ValueError("day_end must be after day_start")
        if span % int(self.slot_minutes) != 0:
            raise ValueError("day length must be a multiple of slot_minutes")

    @classmethod
    def from_settings(cls) -> "TimeGrid":
        return cls(
            day_start=settings.GRID_DAY_START,
            day_end=settings.GRID_DAY_END,
            slot_minutes=settings.GRID_SLOT_MINUTES,
            slot_height=settings.GRID_SLOT_HEIGHT,
        )

    @property
    def slot_count(self) -> int:
        span = minutes_of_day(self.day_end) - minutes_of_day(self.day_start)
        return span // self.slot_minutes

    @property
    def body_height(self) -> float:
        return self.slot_count * self.slot_height

    def _clamp_slot(self, index: int) -> int:
        return max(0, min(int(index), self.slot_count - 1))

    def contains(self, t: time) -> bool:
        return self.day_start <= t < self.day_end

    def slot_start(self, index: int) -> time:
        index = self._clamp_slot(index)
        return time_from_minutes(minutes_of_day(self.day_start) + index * self.slot_minutes)

    def slot_times(self) -> list[time]:
        return [self.slot_start(i) for i in range(self.slot_count)]

    def to_slot_index(self, t: time) -> int:
        offset = minutes_of_day(t) - minutes_of_day(self.day_start)
        # Floor division, so times before day_start go negative and clamp to 0.
        return self._clamp_slot(offset // self.slot_minutes)

    def to_pixel_offset(self, t: time) -> float:
        return self.to_slot_index(t) * self.slot_height

    def from_pixel_offset(self, y: float) -> time:
        return self.slot_start(math.floor(y / self.slot_height))

    def snap(self, t: time) -> time:
        return self.slot_start(self.to_slot_index(t))

    def height_for(self, duration_min: int) -> float:
        return (duration_min / self.slot_minutes) * self.slot_height
