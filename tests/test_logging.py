import logging
from logging.handlers import RotatingFileHandler

import pytest

from toolrelay.config.schema import LoggingConfig
from toolrelay.util.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def test_console_only():
    setup_logging(LoggingConfig(level="debug"))
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING


def test_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "toolrelay.log"
    setup_logging(LoggingConfig(level="INFO", file=str(log_file), max_bytes=1024, backup_count=2))

    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].backupCount == 2

    logging.getLogger("toolrelay.test").info("hello from the test")
    file_handlers[0].flush()
    assert "[INFO] toolrelay.test" in log_file.read_text()


def test_unknown_level_defaults_to_info():
    setup_logging(LoggingConfig(level="chatty"))
    assert logging.getLogger().level == logging.INFO
