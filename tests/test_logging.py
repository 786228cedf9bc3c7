"""Unit tests for lumina.logging: structlog setup and secret masking."""

import logging

import orjson

from lumina.config import LoggingConfig
from lumina.logging import _orjson_renderer, _redact_secrets, configure_from, get_logger, setup_logging


class TestRedactSecrets:
    def test_masks_password_fields(self):
        event = _redact_secrets(None, "info", {"event": "x", "password": "hunter2", "Confirm_Password": "hunter2"})
        assert event["password"] == "***"
        assert event["Confirm_Password"] == "***"
        assert event["event"] == "x"

    def test_masks_secret_header(self):
        event = _redact_secrets(None, "info", {"X-Secret-Key": "k", "api_key": "k"})
        assert event["X-Secret-Key"] == "***"
        assert event["api_key"] == "***"

    def test_leaves_other_fields(self):
        event = _redact_secrets(None, "info", {"mode": "setup_required", 3: "int key"})
        assert event == {"mode": "setup_required", 3: "int key"}


class TestOrjsonRenderer:
    def test_renders_json_line(self):
        line = _orjson_renderer(None, "info", {"event": "gate_opened", "cloud": True})
        assert orjson.loads(line) == {"event": "gate_opened", "cloud": True}

    def test_non_serializable_values_stringified(self):
        line = _orjson_renderer(None, "info", {"event": "e", "err": ValueError("boom")})
        assert orjson.loads(line)["err"] == "boom"


class TestSetupLogging:
    def setup_method(self):
        logging.getLogger().setLevel(logging.DEBUG)

    def test_console_mode(self):
        setup_logging(json_output=False, level="DEBUG")
        get_logger("test.console").info("test_event", key="value")

    def test_json_mode(self):
        setup_logging(json_output=True, level="INFO")
        get_logger("test.json").info("test_event", password="never shown")

    def test_level_applied_to_root(self):
        setup_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_httpx_quieted(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_configure_from_section(self):
        configure_from(LoggingConfig(level="ERROR", format="json"))
        assert logging.getLogger().level == logging.ERROR


class TestGetLogger:
    def test_returns_usable_logger(self):
        log = get_logger("lumina.test")
        for method in ("debug", "info", "warning", "error"):
            assert hasattr(log, method)
