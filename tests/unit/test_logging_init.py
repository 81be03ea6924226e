from __future__ import annotations

import logging
from io import StringIO

import pytest

from sheetbind.logging import init as log_init
from sheetbind.logging.init import LabeledFormatter, get_logger, log_summary, reset_logging, setup_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == "sheetbind"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    assert setup_logging() is first
    assert get_logger() is first
    assert len(first.handlers) == 1


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_sheetbind_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(log_init.SUMMARY_LEVEL, "rows=1")

    lines = captured.getvalue().strip().splitlines()
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY rows=1",
    ]


def test_library_loggers_inherit_configuration(capsys):
    setup_logging()
    logging.getLogger("sheetbind.excel.reader").info("from the reader")
    log_summary("rows=3")
    out = capsys.readouterr().out
    assert "INFO from the reader" in out
    assert "SUMMARY rows=3" in out


def test_debug_suppressed_by_default(capsys):
    setup_logging()
    logging.getLogger("sheetbind.mapping").debug("hidden")
    assert "hidden" not in capsys.readouterr().out
