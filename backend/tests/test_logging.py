from __future__ import annotations

import json
import logging
import sys

from vibefinder.core.logging import _JsonFormatter, setup_logging


def _record(level: int, message: str, *, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord("vibefinder.test", level, __file__, 12, message, None, exc_info)


def _formatter() -> _JsonFormatter:
    return _JsonFormatter(
        "%(asctime)s %(level)s %(name)s %(message)s",
        static_fields={"service": "vibefinder", "environment": "test"},
    )


def test_json_lines_carry_the_level_name():
    line = json.loads(_formatter().format(_record(logging.WARNING, "geocode failed")))

    assert line["level"] == "WARNING"
    assert line["name"] == "vibefinder.test"
    assert line["message"] == "geocode failed"
    assert line["service"] == "vibefinder"
    assert line["environment"] == "test"


def test_exceptions_are_rendered_into_the_line():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        exc_info = sys.exc_info()

    line = json.loads(_formatter().format(_record(logging.ERROR, "provider crashed", exc_info=exc_info)))

    assert line["level"] == "ERROR"
    assert "RuntimeError: boom" in line["exc_info"]


def test_setup_logging_installs_one_json_handler():
    root = logging.getLogger()
    previous = (root.level, list(root.handlers))
    try:
        setup_logging("debug", environment="test")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, _JsonFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.setLevel(previous[0])
        root.handlers[:] = previous[1]
