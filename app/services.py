from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .models import Booking, Customer, Service, Stylist
from .schemas import BOOKING_STATUSES


def to_local_naive(value: datetime) -> datetime:
    # Wall-clock time is stored as given; aware values lose their offset.
    if value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def list_stylists(db: Session) -> list[Stylist]:
    return list(db.execute(select(Stylist).order_by(Stylist.id.asc())).scalars())


def get_stylist(db: Session, stylist_id: int) -> Stylist | None:
    return db.get(Stylist, stylist_id)


def create_stylist(db: Session, name: str, color: str | None = None) -> Stylist:
    normalized_color = (color or "").strip() or None
    obj = Stylist(name=name.strip(), color=normalized_color)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def list_services(db: Session) -> list[Service]:
    return list(db.execute(select(Service).order_by(Service.id.asc())).scalars())


def get_or_create_service(
    db: Session, name: str, price: Decimal, duration_min: int
) -> Service:
    normalized_name = name.strip()
    obj = db.execute(
        select(Service).where(Service.name == normalized_name)
    ).scalar_one_or_none()
    if obj:
        return obj
    if int(duration_min) <= 0:
        raise ValueError("duration_min must be > 0")
    obj = Service(name=normalized_name, price=Decimal(price), duration_min=int(duration_min))
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def create_customer(db: Session, first_name: str, last_name: str = "") -> Customer:
    normalized_first = (first_name or "").strip()
    if not normalized_first:
        raise ValueError("first_name is required")
    obj = Customer(first_name=normalized_first, last_name=(last_name or "").strip())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def create_booking(
    db: Session,
    customer_id: int,
    stylist_id: int,
    service_id: int,
    start_dt: datetime,
    duration_min: int,
    price: Decimal,
    status: str = "pending",
) -> Booking:
    normalized_status = (status or "pending").strip().lower()
    if normalized_status not in BOOKING_STATUSES:
        raise ValueError("Invalid booking status")

    resolved_duration = int(duration_min or settings.DEFAULT_BOOKING_DURATION_MIN)
    if resolved_duration <= 0 or resolved_duration > int(settings.MAX_BOOKING_DURATION_MIN):
        raise ValueError("duration_min out of range")

    if db.get(Customer, customer_id) is None:
        raise ValueError("Customer not found")
    if get_stylist(db, stylist_id) is None:
        raise ValueError("Stylist not found")
    if db.get(Service, service_id) is None:
        raise ValueError("Service not found")

    booking = Booking(
        customer_id=customer_id,
        stylist_id=stylist_id,
        service_id=service_id,
        start_dt=to_local_naive(start_dt),
        duration_min=resolved_duration,
        price=Decimal(price),
        status=normalized_status,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def list_bookings_for_day(db: Session, day: date) -> list[Booking]:
    start, end = day_bounds(day)
    q = (
        db.query(Booking)
        .filter(Booking.start_dt >= start, Booking.start_dt < end)
        .filter(Booking.status != "canceled")
    )
    return q.order_by(Booking.start_dt.asc(), Booking.id.asc()).all()


def move_booking(
    db: Session, booking_id: int, stylist_id: int, start_dt: datetime
) -> Booking | None:
    booking = db.get(Booking, booking_id)
    if booking is None:
        return None
    if get_stylist(db, stylist_id) is None:
        raise ValueError("Stylist not found")

    # Last write wins; concurrent moves are applied in receipt order.
    booking.stylist_id = stylist_id
    booking.start_dt = to_local_naive(start_dt)
    db.commit()
    db.refresh(booking)
    return booking
