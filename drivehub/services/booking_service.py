"""
Booking intake workflow: validate a submission, store its documents and
persist the booking
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from drivehub.core.config import Settings
from drivehub.core.errors import (
    InvalidFields,
    MissingDocuments,
    MissingFields,
    PersistenceError,
    VerificationRequired,
)
from drivehub.core.logging_config import get_logger
from drivehub.db.models import Booking, PaymentMode
from drivehub.schemas.booking import BookingSubmission
from drivehub.services.booking_store import BookingStore
from drivehub.services.file_intake import DOCUMENT_SLOTS, FileIntakeService, IncomingFile
from drivehub.utils.id_generator import generate_booking_id

logger = get_logger(__name__)


def parse_timestamp(field_name: str, value: str) -> datetime:
    """
    Parse an ISO-8601 date or datetime.

    Aware values are converted to UTC; naive values are taken as UTC.
    The result is naive so it round-trips through every database backend.
    """
    raw = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidFields(f"Invalid {field_name}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_payment_mode(value: Optional[str]) -> PaymentMode:
    if value is None:
        return PaymentMode.UPI
    try:
        return PaymentMode(value)
    except ValueError:
        raise InvalidFields("Invalid paymentMode")


class BookingIntakeService:
    """Runs a booking submission through its gates and persists it"""

    def __init__(self, settings: Settings, file_intake: FileIntakeService, store: BookingStore):
        self.id_prefix = settings.BOOKING_ID_PREFIX
        self.max_attempts = max(settings.BOOKING_ID_MAX_ATTEMPTS, 1)
        self.file_intake = file_intake
        self.store = store

    def submit(
        self,
        db: Session,
        submission: BookingSubmission,
        documents: Dict[str, Optional[IncomingFile]]
    ) -> Booking:
        """
        Validate and persist a booking

        Args:
            db: Database session
            submission: Normalized form fields
            documents: Uploaded files keyed by slot (aadharPhoto, licensePhoto)

        Returns:
            The created Booking

        Raises:
            UnsupportedMediaType, PayloadTooLarge: a document was rejected
            MissingFields, VerificationRequired, MissingDocuments: a gate failed
            InvalidFields: dates or payment mode could not be normalized
            PersistenceError: the record could not be saved
        """
        # Bad files are rejected before anything else runs
        for slot, upload in documents.items():
            if upload is not None:
                self.file_intake.validate(slot, upload)

        missing = submission.missing_fields()
        if missing:
            logger.info(f"Booking rejected, missing fields: {missing}")
            raise MissingFields()

        if not submission.id_verified:
            logger.info("Booking rejected, identity not verified")
            raise VerificationRequired()

        if any(documents.get(slot) is None for slot in DOCUMENT_SLOTS):
            logger.info("Booking rejected, documents missing")
            raise MissingDocuments()

        pickup_date = parse_timestamp("pickupDate", submission.pickup_date)
        return_date = parse_timestamp("returnDate", submission.return_date)
        payment_mode = parse_payment_mode(submission.payment_mode)
        txn_id = submission.txn_id if payment_mode == PaymentMode.UPI else None

        # Stored files are left in place if persistence fails below
        references = {
            slot: self.file_intake.store(slot, documents[slot])
            for slot in DOCUMENT_SLOTS
        }

        fields = dict(
            name=submission.name,
            contact=submission.contact,
            aadhar=submission.aadhar,
            aadhar_photo=references["aadharPhoto"],
            license=submission.license,
            license_photo=references["licensePhoto"],
            pickup=submission.pickup,
            drop=submission.drop,
            pickup_date=pickup_date,
            return_date=return_date,
            payment_mode=payment_mode,
            txn_id=txn_id,
            id_verified=True,
        )
        return self._persist(db, fields)

    def _persist(self, db: Session, fields: dict) -> Booking:
        """Insert with a fresh booking id, regenerating it on collision"""
        for attempt in range(1, self.max_attempts + 1):
            booking_id = generate_booking_id(self.id_prefix)
            try:
                booking = self.store.create(db, Booking(booking_id=booking_id, **fields))
                logger.info(f"Booking created: {booking.booking_id}")
                return booking
            except IntegrityError as e:
                if not self._is_id_collision(db, booking_id):
                    logger.error(f"Booking integrity error: {str(e)}", exc_info=True)
                    raise PersistenceError()
                logger.warning(f"Booking id collision on {booking_id} (attempt {attempt}/{self.max_attempts})")
            except SQLAlchemyError as e:
                logger.error(f"Booking error: {str(e)}", exc_info=True)
                raise PersistenceError()

        logger.error(f"Could not allocate a unique booking id after {self.max_attempts} attempts")
        raise PersistenceError()

    def _is_id_collision(self, db: Session, booking_id: str) -> bool:
        try:
            return self.store.exists(db, booking_id)
        except SQLAlchemyError:
            return False
