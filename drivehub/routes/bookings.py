"""
Booking endpoints
  POST /api/bookings               – submit a booking form with two document photos
  GET  /api/bookings/{booking_id}  – single booking
  GET  /api/bookings               – most recent bookings, newest first
"""
import asyncio
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from drivehub.core.errors import NotFound
from drivehub.db.session import get_db
from drivehub.schemas.booking import (
    BookingCreatedResponse,
    BookingDetailResponse,
    BookingListResponse,
    BookingOut,
    BookingSubmission,
)
from drivehub.services.booking_service import BookingIntakeService
from drivehub.services.booking_store import BookingStore
from drivehub.services.file_intake import FileIntakeService

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


def get_intake_service(request: Request) -> BookingIntakeService:
    return request.app.state.intake_service


def get_file_intake(request: Request) -> FileIntakeService:
    return request.app.state.file_intake


def get_store(request: Request) -> BookingStore:
    return request.app.state.booking_store


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    name: Optional[str] = Form(None),
    contact: Optional[str] = Form(None),
    aadhar: Optional[str] = Form(None),
    license: Optional[str] = Form(None),
    pickup: Optional[str] = Form(None),
    drop: Optional[str] = Form(None),
    pickupDate: Optional[str] = Form(None),
    returnDate: Optional[str] = Form(None),
    paymentMode: Optional[str] = Form(None),
    txnId: Optional[str] = Form(None),
    idVerified: Optional[str] = Form(None),
    aadharPhoto: Optional[List[UploadFile]] = File(None),
    licensePhoto: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    intake: BookingIntakeService = Depends(get_intake_service),
    file_intake: FileIntakeService = Depends(get_file_intake),
):
    """
    Create a booking from a multipart form.
    Both aadharPhoto and licensePhoto are required, one image each of at most
    5 MB, and idVerified must be "true".
    """
    submission = BookingSubmission(
        name=name,
        contact=contact,
        aadhar=aadhar,
        license=license,
        pickup=pickup,
        drop=drop,
        pickup_date=pickupDate,
        return_date=returnDate,
        payment_mode=paymentMode,
        txn_id=txnId,
        id_verified=idVerified,
    )
    documents = {
        "aadharPhoto": await file_intake.read_upload("aadharPhoto", aadharPhoto),
        "licensePhoto": await file_intake.read_upload("licensePhoto", licensePhoto),
    }

    # Database commits and storage writes block, keep them off the event loop
    booking = await asyncio.to_thread(intake.submit, db, submission, documents)

    return {
        "message": "Booking created",
        "booking_id": booking.booking_id,
        "booking": BookingOut.model_validate(booking),
    }


@router.get("/{booking_id}", response_model=BookingDetailResponse)
def get_booking(
    booking_id: str,
    db: Session = Depends(get_db),
    store: BookingStore = Depends(get_store),
):
    """Return a single booking by its public id"""
    booking = store.get_by_booking_id(db, booking_id)
    if not booking:
        raise NotFound()
    return {"booking": BookingOut.model_validate(booking)}


@router.get("", response_model=BookingListResponse)
def list_bookings(
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    store: BookingStore = Depends(get_store),
):
    """List recent bookings, newest first (at most 200)"""
    bookings = store.list_recent(db, limit)
    return {"bookings": [BookingOut.model_validate(b) for b in bookings]}
