"""Tests for structlog configuration and sanitization."""

import json
import logging

from lexicon_hub.utils.logging import (
    REDACTED_VALUE,
    configure_logging,
    get_logger,
    sanitization_processor,
    sanitize_for_logging,
)


class TestSanitization:
    def test_redacts_sensitive_keys(self):
        data = {
            "youdao_api_key": "secret-value",
            "appKey": "app-id",
            "sign": "abc123",
            "password": "pw",
            "query": "cat",
        }

        sanitized = sanitize_for_logging(data)

        assert sanitized["youdao_api_key"] == REDACTED_VALUE
        assert sanitized["appKey"] == REDACTED_VALUE
        assert sanitized["sign"] == REDACTED_VALUE
        assert sanitized["password"] == REDACTED_VALUE
        assert sanitized["query"] == "cat"

    def test_nested_dicts(self):
        sanitized = sanitize_for_logging({"params": {"sign": "x", "q": "cat"}})
        assert sanitized == {"params": {"sign": REDACTED_VALUE, "q": "cat"}}

    def test_does_not_mutate_input(self):
        data = {"secret": "s"}
        sanitize_for_logging(data)
        assert data == {"secret": "s"}

    def test_processor(self):
        event = sanitization_processor(None, "info", {"event": "x", "api_key": "k"})
        assert event == {"event": "x", "api_key": REDACTED_VALUE}


class TestConfigureLogging:
    def test_file_output_is_json_and_redacted(self, tmp_path):
        log_file = tmp_path / "logs" / "lexicon.log"
        configure_logging("INFO", log_file)
        try:
            get_logger("tests.logging").info(
                "lookup.remote.fetched", query="cat", youdao_api_key="leak"
            )
            for handler in logging.getLogger().handlers:
                handler.flush()

            line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
            payload = json.loads(line)
        finally:
            configure_logging("WARNING")

        assert payload["event"] == "lookup.remote.fetched"
        assert payload["query"] == "cat"
        assert payload["youdao_api_key"] == REDACTED_VALUE
        assert payload["level"] == "info"
        assert "timestamp" in payload

    def test_level_filters_records(self, tmp_path):
        log_file = tmp_path / "quiet.log"
        configure_logging("ERROR", log_file)
        try:
            get_logger("tests.logging").info("should.not.appear")
            for handler in logging.getLogger().handlers:
                handler.flush()
        finally:
            configure_logging("WARNING")

        assert "should.not.appear" not in log_file.read_text(encoding="utf-8")

    def test_reconfigure_replaces_handlers(self):
        configure_logging("WARNING")
        count = len(logging.getLogger().handlers)
        configure_logging("WARNING")
        assert len(logging.getLogger().handlers) == count
