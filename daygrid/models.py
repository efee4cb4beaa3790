from dataclasses import dataclass
from datetime import time
from decimal import Decimal


@dataclass(frozen=True)
class Resource:
    id: int
    display_name: str
    color_hex: str | None = None


@dataclass(frozen=True)
class Service:
    id: int
    name: str
    price: Decimal
    duration_min: int


@dataclass(eq=False)
class Booking:
    """A booking card on the grid.

    ``resource_index`` and ``start_time`` are mutated in place when the card
    is dropped on another column; identity is kept, so compare by ``is``.
    """

    id: int
    customer_name: str
    service_name: str
    resource_index: int
    start_time: time
    duration_min: int
