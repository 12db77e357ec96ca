"""
Tests for visibility_scorer/utils/logging.py.

What we test
------------
  - Console records go to stderr, never stdout.
  - log_file adds a file handler and creates its directory.
  - json_format writes one JSON object per record, including extra= fields.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from visibility_scorer.config import LoggingConfig
from visibility_scorer.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_goes_to_stderr(capsys):
    configure_logging(LoggingConfig(level="INFO", log_file=""))
    logging.getLogger("visibility_scorer.test").info("scored page")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[INFO] visibility_scorer.test: scored page" in captured.err


def test_level_filters_records(capsys):
    configure_logging(LoggingConfig(level="ERROR", log_file=""))
    logging.getLogger("visibility_scorer.test").warning("ignored")
    assert capsys.readouterr().err == ""


def test_json_lines_to_file(tmp_path: Path):
    log_path = tmp_path / "logs" / "scorer.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_path), json_format=True))
    logging.getLogger("visibility_scorer.test").info("saved %s", "abc", extra={"entry_id": "abc"})
    for handler in logging.getLogger().handlers:
        handler.flush()

    record = json.loads(log_path.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert record["level"] == "INFO"
    assert record["logger"] == "visibility_scorer.test"
    assert record["msg"] == "saved abc"
    assert record["entry_id"] == "abc"
    assert record["ts"].endswith("Z")
