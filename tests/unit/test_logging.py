from __future__ import annotations

import json
import logging

from labdesk.utils.logging import JsonFormatter, _json_formatter

EXPECTED_REQUESTED = 4
EXPECTED_SUCCEEDED = 3


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.requested = EXPECTED_REQUESTED
    record.operation = "restore"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["requested"] == EXPECTED_REQUESTED
    assert payload["operation"] == "restore"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"succeeded": EXPECTED_SUCCEEDED}

    payload = json.loads(_json_formatter(record))

    assert payload["succeeded"] == EXPECTED_SUCCEEDED


def test_json_formatter_serializes_id_sets_sorted() -> None:
    record = _record("[SELECTION PRUNED] 3 stale ids")
    record.pruned = frozenset({9, 2, 5})

    payload = JsonFormatter().format(record)

    assert json.loads(payload)["pruned"] == [2, 5, 9]
