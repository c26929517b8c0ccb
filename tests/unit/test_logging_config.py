"""
Unit tests for structured logging.
"""

import json
import logging

from authflow.logging_config import JsonFormatter, RequestIdFilter, configure_logging, req_id_var


def _record(level=logging.INFO, meta=None):
    record = logging.LogRecord("authflow.test", level, __file__, 1, "hello %s", ("world",), None)
    if meta is not None:
        record.meta = meta
    return record


class TestJsonFormatter:
    def test_payload_shape(self):
        token = req_id_var.set("req-9")
        try:
            record = _record(meta={"user_id": "u1"})
            RequestIdFilter().filter(record)
            payload = json.loads(JsonFormatter().format(record))
        finally:
            req_id_var.reset(token)

        assert payload["msg"] == "hello world"
        assert payload["req_id"] == "req-9"
        assert payload["component"] == "authflow.test"
        assert payload["level"] == "INFO"
        assert payload["meta"] == {"user_id": "u1"}
        assert payload["user_id"] == "u1"


class TestConfigureLogging:
    def test_single_json_handler(self):
        """Test that repeated configuration replaces handlers instead of stacking them."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging("debug")
            configure_logging("warning")

            json_handlers = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
            assert len(json_handlers) == 1
            assert root.level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
