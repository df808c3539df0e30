"""
Unit tests for src/common/logger.py
"""

import json
import logging

import pytest

from src.common.logger import JsonFormatter, get_logger, setup_logging


class TestSearchLogAdapter:
    def test_prefixes_search_and_stage(self, caplog):
        log = get_logger("test.search", search_id="abcdef1234567890", stage="resolver")

        with caplog.at_level(logging.INFO, logger="test.search"):
            log.info("Embedding 3 candidates")

        assert "[search:abcdef12] [resolver] Embedding 3 candidates" in caplog.text

    def test_no_context_no_prefix(self, caplog):
        log = get_logger("test.search")

        with caplog.at_level(logging.INFO, logger="test.search"):
            log.warning("plain")

        assert caplog.records[-1].getMessage() == "plain"

    def test_record_carries_context(self, caplog):
        log = get_logger("test.search", search_id="feedbeef00", stage="ranker")

        with caplog.at_level(logging.INFO, logger="test.search"):
            log.info("ranked")

        record = caplog.records[-1]
        assert record.search_id == "feedbeef00"
        assert record.stage == "ranker"

    def test_bind_keeps_stage(self, caplog):
        log = get_logger("test.search", stage="engine").bind(search_id="1234567890")

        with caplog.at_level(logging.INFO, logger="test.search"):
            log.error("failed")

        assert caplog.records[-1].getMessage() == "[search:12345678] [engine] failed"

    def test_bind_does_not_change_original(self, caplog):
        base = get_logger("test.search", stage="engine")
        base.bind(search_id="1234567890")

        with caplog.at_level(logging.INFO, logger="test.search"):
            base.info("idle")

        assert caplog.records[-1].getMessage() == "[engine] idle"


class TestDebugMode:
    def test_explicit_debug_mode(self):
        log = get_logger("test.search.debug", debug_mode=True)
        assert log.logger.level == logging.DEBUG

    def test_debug_mode_from_env(self, monkeypatch):
        monkeypatch.setenv("DEBUG_MODE", "true")
        assert get_logger("test.search.env").logger.level == logging.DEBUG

    def test_debug_mode_off_by_default(self, monkeypatch):
        monkeypatch.delenv("DEBUG_MODE", raising=False)
        assert get_logger("test.search.quiet").logger.level == logging.NOTSET


class TestJsonFormatter:
    def test_includes_search_context(self, caplog):
        log = get_logger("test.search.json", search_id="abcdef1234567890", stage="explainer")

        with caplog.at_level(logging.INFO, logger="test.search.json"):
            log.info('reason with "quotes"')

        payload = json.loads(JsonFormatter().format(caplog.records[-1]))
        assert payload["level"] == "INFO"
        assert payload["search_id"] == "abcdef1234567890"
        assert payload["stage"] == "explainer"
        assert payload["message"] == '[search:abcdef12] [explainer] reason with "quotes"'

    def test_plain_record_has_no_context_fields(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "hello", None, None)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "hello"
        assert "search_id" not in payload


class TestSetupLogging:
    @pytest.fixture
    def restore_root(self):
        root = logging.getLogger()
        original_handlers = root.handlers[:]
        original_level = root.level
        yield root
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in original_handlers:
            root.addHandler(handler)
        root.setLevel(original_level)

    def test_replaces_root_handlers(self, restore_root):
        setup_logging(level="warning", format="json")

        assert len(restore_root.handlers) == 1
        assert restore_root.level == logging.WARNING
        assert isinstance(restore_root.handlers[0].formatter, JsonFormatter)

    def test_quiets_http_client_loggers(self, restore_root):
        setup_logging(level="debug")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("pymongo").level == logging.WARNING
