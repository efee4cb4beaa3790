from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, validator


class ResourceRow(BaseModel):
    id: int
    name: str = Field(min_length=1)
    color: str | None = None


class ServiceRow(BaseModel):
    id: int
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    duration_min: int = Field(gt=0)


class BookingRow(BaseModel):
    id: int
    stylist_id: int
    customer_first_name: str = ""
    customer_last_name: str = ""
    service_name: str = ""
    start_dt: datetime
    duration_min: int = Field(gt=0)

    @validator("customer_first_name", "customer_last_name", "service_name", pre=True)
    @classmethod
    def blank_if_missing(cls, value):
        return "" if value is None else value

    @property
    def customer_name(self) -> str:
        return f"{self.customer_first_name} {self.customer_last_name}".strip()
