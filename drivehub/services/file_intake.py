"""
File intake for identity-document photos
"""
from dataclasses import dataclass
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from drivehub.core.config import Settings
from drivehub.core.errors import PayloadTooLarge, StorageError, TooManyFiles, UnsupportedMediaType
from drivehub.core.logging_config import get_logger
from drivehub.utils.id_generator import generate_stored_name
from drivehub.utils.storage import FileStorage

logger = get_logger(__name__)

DOCUMENT_SLOTS = ("aadharPhoto", "licensePhoto")


@dataclass
class IncomingFile:
    """An uploaded part read into memory"""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class FileIntakeService:
    """Validates and stores identity-document images"""

    ALLOWED_MIME_PREFIX = "image/"

    def __init__(self, settings: Settings, storage: FileStorage):
        self.max_file_size = settings.MAX_UPLOAD_SIZE
        self.storage = storage

    async def read_upload(self, field_name: str, parts: Optional[List[UploadFile]]) -> Optional[IncomingFile]:
        """
        Read the single UploadFile of a document slot into memory.

        At most max_file_size + 1 bytes are read, which is enough to tell an
        oversize payload apart without buffering all of it.

        Returns:
            IncomingFile, or None when the slot is absent or empty

        Raises:
            TooManyFiles: the slot carries more than one file
        """
        uploads = [part for part in parts or [] if getattr(part, "filename", None)]
        if not uploads:
            return None
        if len(uploads) > 1:
            logger.warning(f"Rejected {field_name}: {len(uploads)} files sent for one slot")
            for part in uploads:
                await part.close()
            raise TooManyFiles()

        upload = uploads[0]

        content = await upload.read(self.max_file_size + 1)
        await upload.close()
        logger.debug(f"Read {len(content)} bytes for {field_name} ({upload.content_type})")
        return IncomingFile(
            filename=upload.filename,
            content_type=upload.content_type or "",
            content=content,
        )

    def validate(self, field_name: str, upload: IncomingFile) -> None:
        """
        Check content type and size

        Raises:
            UnsupportedMediaType: content type is not image/*
            PayloadTooLarge: more than max_file_size bytes
        """
        if not upload.content_type.lower().startswith(self.ALLOWED_MIME_PREFIX):
            logger.warning(f"Rejected {field_name}: unsupported content type {upload.content_type!r}")
            raise UnsupportedMediaType()

        if upload.size > self.max_file_size:
            logger.warning(f"Rejected {field_name}: {upload.size} bytes exceeds {self.max_file_size}")
            raise PayloadTooLarge()

    def store(self, field_name: str, upload: IncomingFile) -> str:
        """Persist an already validated file, returning its reference"""
        stored_name = generate_stored_name(upload.filename, upload.content_type)
        try:
            reference = self.storage.save(upload.content, stored_name, upload.content_type)
        except (BotoCoreError, ClientError, OSError) as e:
            logger.error(f"Could not store {field_name}: {str(e)}", exc_info=True)
            raise StorageError()
        logger.info(f"Stored {field_name} as {reference}")
        return reference

    def accept(self, field_name: str, upload: IncomingFile) -> str:
        """Validate then store a single document"""
        self.validate(field_name, upload)
        return self.store(field_name, upload)
