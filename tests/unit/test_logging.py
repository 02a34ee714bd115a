"""Unit tests for logging formatters."""

import json
import logging

from greenroute.core.logging_config import (
    HumanReadableFormatter,
    StructuredFormatter,
    clear_request_id,
    log_fields,
    set_request_id,
)


def make_record(**extra):
    record = logging.LogRecord(
        name="greenroute.services.route_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Route calculated",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_includes_fields_and_request_id():
    """Test JSON output carries extra fields and the correlation ID."""
    set_request_id("req-1")
    try:
        output = StructuredFormatter().format(make_record(**log_fields(route_id="r-1")))
    finally:
        clear_request_id()

    data = json.loads(output)
    assert data["message"] == "Route calculated"
    assert data["level"] == "INFO"
    assert data["request_id"] == "req-1"
    assert data["route_id"] == "r-1"


def test_human_formatter_appends_fields():
    """Test development output ends with key=value fields."""
    output = HumanReadableFormatter().format(make_record(**log_fields(modes=["car"])))

    assert "Route calculated" in output
    assert output.endswith("modes=['car']")


def test_set_request_id_generates_uuid():
    """Test a request ID is generated when none is given."""
    request_id = set_request_id()
    clear_request_id()

    assert len(request_id) == 36
