from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, validator

BOOKING_STATUSES = {"pending", "confirmed", "canceled", "done"}


class StylistOut(BaseModel):
    id: int
    name: str
    color: str | None = None


class ServiceOut(BaseModel):
    id: int
    name: str
    price: Decimal
    duration_min: int


class CustomerCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=80)
    last_name: str = Field(default="", max_length=120)


class CustomerOut(BaseModel):
    id: int
    first_name: str
    last_name: str


class BookingCreate(BaseModel):
    customer_id: int
    stylist_id: int
    service_id: int
    start_dt: datetime
    duration_min: int = Field(gt=0)
    price: Decimal = Field(ge=0)
    status: str = "pending"

    @validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = (value or "").strip().lower()
        if normalized not in BOOKING_STATUSES:
            raise ValueError("Invalid booking status")
        return normalized


class BookingMove(BaseModel):
    stylist_id: int
    start_dt: datetime


class BookingOut(BaseModel):
    id: int
    customer_id: int
    stylist_id: int
    service_id: int
    start_dt: datetime
    duration_min: int
    price: Decimal
    status: str


class BookingDetailOut(BaseModel):
    id: int
    stylist_id: int
    customer_first_name: str
    customer_last_name: str
    service_name: str
    start_dt: datetime
    duration_min: int
    status: str
