import asyncio
import io
import re
from pathlib import Path
from unittest.mock import patch

import pytest
from starlette.datastructures import Headers, UploadFile

from drivehub.core.errors import PayloadTooLarge, StorageError, TooManyFiles, UnsupportedMediaType
from drivehub.services.file_intake import FileIntakeService, IncomingFile
from drivehub.utils.id_generator import generate_booking_id, generate_stored_name, image_extension
from drivehub.utils.storage import FileStorage


@pytest.fixture
def intake(settings):
    return FileIntakeService(settings, FileStorage(settings))


def _upload(content, filename="photo.jpg", content_type="image/jpeg"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_accept_stores_under_generated_name(intake, settings, jpeg_bytes):
    upload_dir = Path(settings.UPLOAD_DIR)
    assert not upload_dir.exists()

    reference = intake.accept("aadharPhoto", IncomingFile("scan.JPG", "image/jpeg", jpeg_bytes))

    assert re.match(r"^/uploads/\d+-[A-Za-z0-9_-]{8}\.jpg$", reference)
    stored = upload_dir / reference.rsplit("/", 1)[1]
    assert stored.read_bytes() == jpeg_bytes


def test_rejects_non_image(intake, settings):
    with pytest.raises(UnsupportedMediaType):
        intake.accept("licensePhoto", IncomingFile("doc.pdf", "application/pdf", b"%PDF"))
    assert not Path(settings.UPLOAD_DIR).exists()


def test_rejects_oversize(intake, settings):
    content = b"\x00" * (settings.MAX_UPLOAD_SIZE + 1)
    with pytest.raises(PayloadTooLarge):
        intake.accept("aadharPhoto", IncomingFile("big.png", "image/png", content))
    assert not Path(settings.UPLOAD_DIR).exists()


def test_accepts_exactly_max_size(intake, settings):
    content = b"\x00" * settings.MAX_UPLOAD_SIZE
    assert intake.accept("aadharPhoto", IncomingFile("max.png", "image/png", content))


def test_read_upload_absent_parts(intake):
    assert asyncio.run(intake.read_upload("aadharPhoto", None)) is None
    assert asyncio.run(intake.read_upload("aadharPhoto", [_upload(b"", filename="")])) is None


def test_read_upload_caps_bytes_read(intake, settings):
    content = b"\x01" * (settings.MAX_UPLOAD_SIZE + 100)
    incoming = asyncio.run(intake.read_upload("aadharPhoto", [_upload(content)]))

    assert incoming.filename == "photo.jpg"
    assert incoming.content_type == "image/jpeg"
    assert incoming.size == settings.MAX_UPLOAD_SIZE + 1


def test_read_upload_rejects_second_file_in_slot(intake, jpeg_bytes):
    parts = [
        _upload(b"%PDF", filename="notes.pdf", content_type="application/pdf"),
        _upload(jpeg_bytes),
    ]
    with pytest.raises(TooManyFiles):
        asyncio.run(intake.read_upload("aadharPhoto", parts))


def test_storage_failure_becomes_storage_error(intake, jpeg_bytes):
    with patch.object(intake.storage, "save", side_effect=OSError("disk full")):
        with pytest.raises(StorageError) as exc_info:
            intake.accept("aadharPhoto", IncomingFile("a.jpg", "image/jpeg", jpeg_bytes))

    assert exc_info.value.status_code == 500
    assert exc_info.value.public_message == "Server error"


@pytest.mark.parametrize("filename, suffix", [
    ("photo.jpeg", ".jpeg"),
    ("archive.tar.gz", ""),
    ("no_extension", ""),
    ("weird.j$g", ""),
    (None, ""),
])
def test_generate_stored_name_extension(filename, suffix):
    name = generate_stored_name(filename)
    assert re.match(r"^\d+-[A-Za-z0-9_-]{8}$", name[:len(name) - len(suffix)])
    assert name.endswith(suffix)


def test_generate_booking_id_prefix():
    assert re.match(r"^DH-[A-Za-z0-9_-]{8}$", generate_booking_id("DH"))
    assert generate_booking_id("XY").startswith("XY-")


@pytest.mark.parametrize("filename, content_type, ext", [
    ("scan.PNG", "image/png", ".png"),
    ("scan.jpeg", "image/jpeg", ".jpeg"),
    ("page.html", "image/png", ".png"),
    ("logo.svg", "image/svg+xml", ""),
    ("script.js", "image/x-unknown", ""),
    ("upload", "image/webp; charset=binary", ".webp"),
    (None, "image/jpeg", ".jpg"),
])
def test_image_extension_only_yields_image_types(filename, content_type, ext):
    assert image_extension(filename, content_type) == ext
