import argparse
import sys
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.db import Base, SessionLocal, engine  # noqa: E402
from app.services import (  # noqa: E402
    create_booking,
    create_customer,
    create_stylist,
    get_or_create_service,
    list_bookings_for_day,
    list_stylists,
)

STYLISTS = [
    ("Anna", None),
    ("Ben", "#1E88E5"),
    ("Caro", None),
]

SERVICES = [
    ("Haarschnitt", Decimal("35.00"), 60),
    ("Farbe", Decimal("80.00"), 90),
    ("Bartpflege", Decimal("15.00"), 30),
]

# (stylist position, customer, service, start, duration)
SAMPLE_BOOKINGS = [
    (0, ("Kunde", "A"), "Haarschnitt", time(9, 0), 60),
    (1, ("Kunde", "B"), "Farbe", time(10, 30), 90),
    (2, ("Kunde", "C"), "Bartpflege", time(13, 0), 30),
]


def seed_catalog(db):
    stylists = list_stylists(db)
    if not stylists:
        stylists = [create_stylist(db, name, color) for name, color in STYLISTS]
    services = {
        name: get_or_create_service(db, name, price, duration)
        for name, price, duration in SERVICES
    }
    return stylists, services


def seed_bookings(db, day: date, stylists, services) -> int:
    if list_bookings_for_day(db, day):
        return 0
    for position, (first, last), service_name, start, duration in SAMPLE_BOOKINGS:
        customer = create_customer(db, first, last)
        service = services[service_name]
        create_booking(
            db,
            customer_id=customer.id,
            stylist_id=stylists[position % len(stylists)].id,
            service_id=service.id,
            start_dt=datetime.combine(day, start),
            duration_min=duration,
            price=service.price,
        )
    return len(SAMPLE_BOOKINGS)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo stylists, services and bookings")
    parser.add_argument("--day", type=date.fromisoformat, default=date.today())
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        stylists, services = seed_catalog(db)
        created = seed_bookings(db, args.day, stylists, services)
    if created:
        print(f"Seeded {created} bookings for {args.day.isoformat()}.")
    else:
        print(f"{args.day.isoformat()} already has bookings; nothing seeded.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
