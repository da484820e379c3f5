import logging
from pathlib import Path

import pytest

from sheetsync.logging_config import configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_does_not_duplicate_handlers(root_logger, tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "sync.log"

    configure_logging(logging.DEBUG, log_path)
    count = len(root_logger.handlers)
    configure_logging(logging.INFO, log_path)

    assert len(root_logger.handlers) == count
    assert root_logger.level == logging.INFO

    logging.getLogger("sheetsync.test").info("row appended")
    for handler in root_logger.handlers:
        handler.flush()
    assert "[INFO] sheetsync.test: row appended" in log_path.read_text(encoding="utf-8")

