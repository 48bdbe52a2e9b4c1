"""
Database models for DriveHub application
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum

from drivehub.db.session import Base


def utcnow() -> datetime:
    """Naive UTC timestamp with microsecond precision"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Enums
class PaymentMode(str, PyEnum):
    """Payment mode enumeration"""
    UPI = "UPI"
    CASH = "Cash"


# Models
class Booking(Base):
    """Vehicle rental booking with identity documents"""
    __tablename__ = 'bookings'

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(String(32), unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    contact = Column(String, nullable=False)
    aadhar = Column(String, nullable=False)
    aadhar_photo = Column(String, nullable=False)  # stored-file reference
    license = Column(String, nullable=False)
    license_photo = Column(String, nullable=False)  # stored-file reference
    pickup = Column(String, nullable=False)
    drop = Column(String, nullable=False)
    pickup_date = Column(DateTime, nullable=False)
    return_date = Column(DateTime, nullable=False)
    payment_mode = Column(
        Enum(PaymentMode, values_callable=lambda modes: [m.value for m in modes]),
        default=PaymentMode.UPI,
        nullable=False
    )
    txn_id = Column(String, nullable=True)  # UPI transaction reference
    id_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Booking {self.booking_id}>"
