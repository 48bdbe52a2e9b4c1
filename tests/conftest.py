import os
import tempfile

# drivehub.main builds a module-level app on import; point it at a throwaway
# database and upload directory before anything imports it.
_BOOT_DIR = tempfile.mkdtemp(prefix="drivehub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_BOOT_DIR, 'boot.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_BOOT_DIR, "uploads")

import pytest
from fastapi.testclient import TestClient

from drivehub.core.config import Settings
from drivehub.db.session import create_db_engine, create_session_factory, init_db
from drivehub.main import create_app

# Not a decodable image; only the declared content type is checked
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        RATE_LIMIT_PER_MINUTE=10000,
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    session = create_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def form_data():
    return {
        "name": "A",
        "contact": "9999999999",
        "aadhar": "1234",
        "license": "LIC1",
        "pickup": "X",
        "drop": "Y",
        "pickupDate": "2024-01-01",
        "returnDate": "2024-01-05",
        "idVerified": "true",
    }


@pytest.fixture
def jpeg_bytes():
    return JPEG_BYTES


@pytest.fixture
def photos():
    return {
        "aadharPhoto": ("aadhar.jpg", JPEG_BYTES, "image/jpeg"),
        "licensePhoto": ("license.jpg", JPEG_BYTES, "image/jpeg"),
    }
