from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .db import get_db
from .models import Booking
from .schemas import (
    BookingCreate,
    BookingDetailOut,
    BookingMove,
    BookingOut,
    CustomerCreate,
    CustomerOut,
    ServiceOut,
    StylistOut,
)
from .services import (
    create_booking,
    create_customer,
    list_bookings_for_day,
    list_services,
    list_stylists,
    move_booking,
)

router = APIRouter(prefix="/api")


def _to_booking_out(b: Booking) -> BookingOut:
    return BookingOut(
        id=b.id,
        customer_id=b.customer_id,
        stylist_id=b.stylist_id,
        service_id=b.service_id,
        start_dt=b.start_dt,
        duration_min=int(b.duration_min),
        price=b.price,
        status=b.status,
    )


def _to_booking_detail_out(b: Booking) -> BookingDetailOut:
    return BookingDetailOut(
        id=b.id,
        stylist_id=b.stylist_id,
        customer_first_name=b.customer.first_name,
        customer_last_name=b.customer.last_name or "",
        service_name=b.service.name,
        start_dt=b.start_dt,
        duration_min=int(b.duration_min),
        status=b.status,
    )


@router.get("/stylists", response_model=List[StylistOut])
def get_stylists(db: Session = Depends(get_db)):
    return [StylistOut(id=s.id, name=s.name, color=s.color) for s in list_stylists(db)]


@router.get("/services", response_model=List[ServiceOut])
def get_services(db: Session = Depends(get_db)):
    return [
        ServiceOut(id=s.id, name=s.name, price=s.price, duration_min=int(s.duration_min))
        for s in list_services(db)
    ]


@router.get("/bookings", response_model=List[BookingDetailOut])
def get_bookings(
    day: date = Query(...),
    db: Session = Depends(get_db),
):
    return [_to_booking_detail_out(b) for b in list_bookings_for_day(db, day)]


@router.post("/customers", response_model=CustomerOut)
def add_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    try:
        c = create_customer(db, first_name=payload.first_name, last_name=payload.last_name)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return CustomerOut(id=c.id, first_name=c.first_name, last_name=c.last_name)


@router.post("/bookings", response_model=BookingOut)
def add_booking(payload: BookingCreate, db: Session = Depends(get_db)):
    try:
        b = create_booking(
            db=db,
            customer_id=payload.customer_id,
            stylist_id=payload.stylist_id,
            service_id=payload.service_id,
            start_dt=payload.start_dt,
            duration_min=payload.duration_min,
            price=payload.price,
            status=payload.status,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return _to_booking_out(b)


@router.patch("/bookings/{booking_id}", response_model=BookingOut)
def patch_booking(
    booking_id: int,
    payload: BookingMove,
    db: Session = Depends(get_db),
):
    try:
        b = move_booking(db, booking_id, stylist_id=payload.stylist_id, start_dt=payload.start_dt)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if not b:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return _to_booking_out(b)
