"""
Persistence for Booking records
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from drivehub.db.models import Booking


class BookingStore:
    """Create and query bookings; records are never updated or deleted"""

    def __init__(self, max_list_size: int = 200):
        self.max_list_size = max_list_size

    @staticmethod
    def create(db: Session, booking: Booking) -> Booking:
        """
        Insert a booking.

        A duplicate booking_id raises sqlalchemy IntegrityError; the session is
        rolled back before the error propagates.
        """
        db.add(booking)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(booking)
        return booking

    @staticmethod
    def exists(db: Session, booking_id: str) -> bool:
        return db.query(Booking.id).filter(Booking.booking_id == booking_id).first() is not None

    @staticmethod
    def get_by_booking_id(db: Session, booking_id: str) -> Optional[Booking]:
        """Get booking by its public id"""
        return db.query(Booking).filter(Booking.booking_id == booking_id).first()

    def list_recent(self, db: Session, limit: Optional[int] = None) -> List[Booking]:
        """Newest bookings first, never more than max_list_size"""
        if limit is None or limit > self.max_list_size:
            limit = self.max_list_size
        limit = max(limit, 1)

        return (
            db.query(Booking)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(limit)
            .all()
        )
