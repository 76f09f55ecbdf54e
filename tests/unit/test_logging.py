"""Tests for the JSON log formatter and correlation id plumbing."""

from __future__ import annotations

import json
import logging

from aggregator_service.core.logging import (
    CorrelationIdFilter,
    StructuredLogFormatter,
    correlation_id,
    set_correlation_id,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "aggregator_service.test", logging.INFO, __file__, 10, "Request %s", ("completed",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_extra_fields_become_top_level_keys():
    token = correlation_id.set("")
    try:
        entry = json.loads(StructuredLogFormatter().format(
            _record(request_path="/api/v1/subjects/42/items", status_code=200)
        ))
    finally:
        correlation_id.reset(token)

    assert entry["message"] == "Request completed"
    assert entry["request_path"] == "/api/v1/subjects/42/items"
    assert entry["status_code"] == 200
    assert "correlation_id" not in entry


def test_correlation_id_is_included():
    token = correlation_id.set("")
    try:
        set_correlation_id("req-7")
        record = _record()
        CorrelationIdFilter().filter(record)
        entry = json.loads(StructuredLogFormatter().format(record))
    finally:
        correlation_id.reset(token)

    assert record.correlation_id == "req-7"
    assert entry["correlation_id"] == "req-7"


def test_filter_marks_records_outside_a_request():
    token = correlation_id.set("")
    try:
        record = _record()
        CorrelationIdFilter().filter(record)
    finally:
        correlation_id.reset(token)

    assert record.correlation_id == "-"
