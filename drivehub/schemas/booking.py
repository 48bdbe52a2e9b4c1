"""
Pydantic schemas for Booking operations
"""
from __future__ import annotations
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from drivehub.db.models import PaymentMode

REQUIRED_FIELDS = (
    "name", "contact", "aadhar", "license",
    "pickup", "drop", "pickup_date", "return_date",
)


def normalize_verification_flag(value: Any) -> bool:
    """
    Collapse the verification flag to a real boolean.

    Form-encoded clients send the string "true"; JSON clients send true.
    Anything else, including "True" or "1", counts as not verified.
    """
    return value is True or value == "true"


class BookingSubmission(BaseModel):
    """Text fields of a booking form, normalized at the API boundary"""
    name: Optional[str] = None
    contact: Optional[str] = None
    aadhar: Optional[str] = None
    license: Optional[str] = None
    pickup: Optional[str] = None
    drop: Optional[str] = None
    pickup_date: Optional[str] = None
    return_date: Optional[str] = None
    payment_mode: Optional[str] = None
    txn_id: Optional[str] = None
    id_verified: bool = False

    @field_validator(
        "name", "contact", "aadhar", "license", "pickup", "drop",
        "pickup_date", "return_date", "payment_mode", "txn_id",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("id_verified", mode="before")
    @classmethod
    def normalize_flag(cls, value: Any) -> bool:
        return normalize_verification_flag(value)

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or empty"""
        return [field for field in REQUIRED_FIELDS if not getattr(self, field)]


class BookingOut(BaseModel):
    """Schema for booking response (camelCase on the wire)"""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    booking_id: str
    name: str
    contact: str
    aadhar: str
    aadhar_photo: str
    license: str
    license_photo: str
    pickup: str
    drop: str
    pickup_date: datetime
    return_date: datetime
    payment_mode: PaymentMode
    txn_id: Optional[str] = None
    id_verified: bool
    created_at: datetime


class BookingCreatedResponse(BaseModel):
    """Schema for booking creation response"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = "Booking created"
    booking_id: str
    booking: BookingOut


class BookingDetailResponse(BaseModel):
    booking: BookingOut


class BookingListResponse(BaseModel):
    bookings: List[BookingOut]
