"""
Error kinds raised by the booking components.

Each kind carries the HTTP status it maps to and the message shown to the
client. The application exception handler turns them into
``{"error": <message>}`` responses.
"""
from enum import Enum
from typing import Optional

from fastapi import status


class ErrorKind(str, Enum):
    """Error taxonomy for the booking API"""
    MISSING_FIELDS = "MissingFields"
    INVALID_FIELDS = "InvalidFields"
    VERIFICATION_REQUIRED = "VerificationRequired"
    MISSING_DOCUMENTS = "MissingDocuments"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    TOO_MANY_FILES = "TooManyFiles"
    STORAGE_ERROR = "StorageError"
    PERSISTENCE_ERROR = "PersistenceError"
    NOT_FOUND = "NotFound"


STATUS_CODES = {
    ErrorKind.MISSING_FIELDS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_FIELDS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VERIFICATION_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MISSING_DOCUMENTS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PAYLOAD_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TOO_MANY_FILES: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.PERSISTENCE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


class DriveHubError(Exception):
    """Base class for all expected booking errors"""

    kind: ErrorKind
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @property
    def public_message(self) -> str:
        """Message safe to return to the client"""
        if self.status_code >= 500:
            return "Server error"
        return self.message


class MissingFields(DriveHubError):
    kind = ErrorKind.MISSING_FIELDS
    default_message = "Missing required fields"


class InvalidFields(DriveHubError):
    kind = ErrorKind.INVALID_FIELDS
    default_message = "Invalid field values"


class VerificationRequired(DriveHubError):
    kind = ErrorKind.VERIFICATION_REQUIRED
    default_message = "Aadhaar must be verified before booking"


class MissingDocuments(DriveHubError):
    kind = ErrorKind.MISSING_DOCUMENTS
    default_message = "Aadhaar and License photos are required"


class UnsupportedMediaType(DriveHubError):
    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE
    default_message = "Only image uploads allowed"


class PayloadTooLarge(DriveHubError):
    kind = ErrorKind.PAYLOAD_TOO_LARGE
    default_message = "File too large"


class TooManyFiles(DriveHubError):
    kind = ErrorKind.TOO_MANY_FILES
    default_message = "Only one file allowed per document"


class StorageError(DriveHubError):
    kind = ErrorKind.STORAGE_ERROR
    default_message = "Could not store document"


class PersistenceError(DriveHubError):
    kind = ErrorKind.PERSISTENCE_ERROR
    default_message = "Could not save booking"


class NotFound(DriveHubError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Booking not found"
