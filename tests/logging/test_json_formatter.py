from __future__ import annotations

import json
import logging
import sys

from astrostorm.core.logging import (
    JsonFormatter,
    get_engine_logger,
    setup_logging_from_settings,
)


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="astrostorm.engine.yoga",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_has_core_fields_and_extras() -> None:
    line = JsonFormatter().format(_record("Yogas detected", detected=7, engine="yoga"))
    payload = json.loads(line)

    assert payload["message"] == "Yogas detected"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "astrostorm.engine.yoga"
    assert payload["detected"] == 7
    assert payload["engine"] == "yoga"


def test_non_json_values_are_stringified() -> None:
    payload = json.loads(JsonFormatter().format(_record("x", body=object())))
    assert isinstance(payload["body"], str)


def test_exception_is_included() -> None:
    try:
        raise ValueError("bad cusp")
    except ValueError:
        record = _record("failed")
        record.exc_info = sys.exc_info()
    payload = json.loads(JsonFormatter().format(record))
    assert "bad cusp" in payload["exception"]


def test_engine_logger_tags_layer() -> None:
    adapter = get_engine_logger("dasha")
    assert adapter.logger.name == "astrostorm.engine.dasha"
    assert adapter.extra == {"layer": "engine", "engine": "dasha"}


def test_setup_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("ASTROSTORM_LOG_LEVEL", "debug")
    monkeypatch.setenv("ASTROSTORM_LOG_JSON", "0")
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging_from_settings()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
