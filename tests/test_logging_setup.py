# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from person_tasks.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    "name, level, shown",
    [
        ("person_tasks.store.record_store", logging.DEBUG, True),
        ("uvicorn.error", logging.INFO, True),
        ("uvicorn.access", logging.INFO, False),
        ("google.auth._default", logging.WARNING, False),
        ("google.auth._default", logging.ERROR, True),
        ("py.warnings", logging.WARNING, False),
    ],
)
def test_console_noise_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_log_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
        logging.getLogger("person_tasks.test").debug("hello file")
        for h in root.handlers:
            h.flush()

        log_file = tmp_path / "logs" / "person_tasks.log"
        assert "hello file" in log_file.read_text("utf-8")
        assert len(root.handlers) == 2
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
