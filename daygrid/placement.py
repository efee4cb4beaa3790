import re
from dataclasses import dataclass
from typing import Sequence

from daygrid.config import FALLBACK_PALETTE
from daygrid.models import Booking, Resource
from daygrid.timegrid import TimeGrid

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class Placement:
    booking: Booking
    column: int
    top: float
    height: float
    color: str


def parse_hex_color(value) -> str | None:
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not _HEX_COLOR_RE.match(raw):
        return None
    return raw.upper()


def resource_color(
    resources: Sequence[Resource],
    index: int,
    fallback: Sequence[str] = FALLBACK_PALETTE,
) -> str:
    if 0 <= index < len(resources) and resources[index].color_hex:
        return resources[index].color_hex
    return fallback[index % len(fallback)]


def derive_palette(
    resources: Sequence[Resource],
    fallback: Sequence[str] = FALLBACK_PALETTE,
) -> list[str]:
    """One colour per resource, in column order."""
    if not fallback:
        raise ValueError("fallback palette must not be empty")
    return [resource_color(resources, i, fallback) for i in range(len(resources))]


def place_booking(booking: Booking, grid: TimeGrid, palette: Sequence[str]) -> Placement:
    return Placement(
        booking=booking,
        column=booking.resource_index,
        top=grid.to_pixel_offset(booking.start_time),
        height=grid.height_for(booking.duration_min),
        color=palette[booking.resource_index % len(palette)],
    )


def place_column(bookings: Sequence[Booking], grid: TimeGrid, palette: Sequence[str], column: int) -> list[Placement]:
    # No collision layout: cards sharing a slot are stacked in list order.
    return [place_booking(b, grid, palette) for b in bookings if b.resource_index == column]
