from __future__ import annotations

import logging
from pathlib import Path

from gitpromote.core.stdlib_logging import configure_stdlib_logging


def test_configure_is_idempotent_per_target():
    first = configure_stdlib_logging(level="INFO")
    second = configure_stdlib_logging(level="DEBUG")

    root = logging.getLogger()
    assert first is second
    assert root.handlers.count(first) == 1
    assert first.level == logging.DEBUG


def test_file_target_replaces_stream_handler(tmp_path: Path):
    stream = configure_stdlib_logging(level="INFO")
    log_file = tmp_path / "logs" / "promote.log"

    handler = configure_stdlib_logging(level="INFO", log_path=log_file)
    logging.getLogger("gitpromote.test").info("promotion started")
    handler.flush()

    assert handler is not stream
    assert stream not in logging.getLogger().handlers
    assert "promotion started" in log_file.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info():
    handler = configure_stdlib_logging(level="chatty")
    assert handler.level == logging.INFO
