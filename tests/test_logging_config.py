import logging

import pytest

from drivehub.core.logging_config import get_logger, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def test_log_file_receives_records(root_logger, tmp_path):
    log_file = tmp_path / "logs" / "drivehub.log"

    setup_logging(log_level="INFO", log_file=str(log_file))
    get_logger("drivehub.bookings").info("booking intake ready")
    get_logger("drivehub.bookings").debug("not at this level")
    for handler in root_logger.handlers:
        handler.flush()

    contents = log_file.read_text()
    assert "booking intake ready" in contents
    assert "INFO" in contents
    assert "not at this level" not in contents


def test_stdout_only_without_log_file(root_logger):
    setup_logging(log_level="DEBUG")

    assert root_logger.level == logging.DEBUG
    assert [type(h) for h in root_logger.handlers] == [logging.StreamHandler]


def test_unusable_log_file_falls_back_to_stdout(root_logger, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    setup_logging(log_file=str(blocker / "drivehub.log"))

    assert not any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)
    assert len(root_logger.handlers) == 1
