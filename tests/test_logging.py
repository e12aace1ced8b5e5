"""
Tests for JSON log formatting and request IDs.
"""
import json
import logging
from workhours.utils.ids import new_request_id, request_id
from workhours.utils.logging import JSONFormatter


def test_json_formatter_includes_extras():
    record = logging.LogRecord("workhours.test", logging.INFO, __file__, 1, "hello %s", ("there",), None)
    record.request_id = "abc"
    record.status = 200

    line = json.loads(JSONFormatter().format(record))
    assert line["msg"] == "hello there"
    assert line["level"] == "INFO"
    assert line["service"] == "workhours"
    assert line["request_id"] == "abc"
    assert line["status"] == 200
    assert "path" not in line
    assert line["ts"].endswith("Z")


def test_request_ids():
    rid = new_request_id()
    assert len(rid) == 26
    assert rid != new_request_id()
    assert request_id("  given-id ") == "given-id"
    assert len(request_id(None)) == 26
