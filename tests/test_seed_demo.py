import runpy
from datetime import date
from pathlib import Path

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from app.db import Base
from app.models import Booking, Customer, Service, Stylist

SEED_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "seed_demo.py"


def make_session(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test_seed_demo.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_seeding_twice_does_not_duplicate(tmp_path):
    seed = runpy.run_path(str(SEED_SCRIPT))
    day = date(2026, 3, 10)

    with make_session(tmp_path) as db:
        stylists, services = seed["seed_catalog"](db)
        assert seed["seed_bookings"](db, day, stylists, services) == 3

        stylists, services = seed["seed_catalog"](db)
        assert seed["seed_bookings"](db, day, stylists, services) == 0

        assert _count(db, Stylist) == 3
        assert _count(db, Service) == 3
        assert _count(db, Customer) == 3
        assert _count(db, Booking) == 3

        assert seed["seed_bookings"](db, date(2026, 3, 11), stylists, services) == 3
        assert _count(db, Booking) == 6
