"""
Tests for HaliteLogger.

Tests HaliteLogger, its request/response hooks, get_logger and configure_logging.
"""

import json
import logging

import pytest

from conftest import ListHandler
import halite.core.logging.logger as logger_module
from halite.core.headers import Headers
from halite.core.logging import (
    HaliteLogger,
    LogFormat,
    LoggingConfig,
    LogLevel,
    configure_logging,
    get_logger,
)
from halite.core.logging.filters import clear_correlation_id, set_correlation_id
from halite.core.request import Request
from halite.core.response import Response
from halite.utils.sanitizer import MASK


@pytest.fixture(autouse=True)
def reset_global_logger():
    logger_module._default_logger = None
    clear_correlation_id()
    yield
    if logger_module._default_logger is not None:
        logger_module._default_logger.close()
    logger_module._default_logger = None


class TestHaliteLogger:
    """Tests for HaliteLogger class."""

    def test_defaults(self):
        logger = HaliteLogger()
        try:
            assert logger.name == "halite"
            assert logger.config.level == LogLevel.INFO
            assert logger.config.format == LogFormat.TEXT
            assert logger.logger.propagate is False
        finally:
            logger.close()

    def test_reinitialization_replaces_handlers(self):
        first = HaliteLogger(name="halite.reinit")
        second = HaliteLogger(name="halite.reinit")
        try:
            assert len(second.logger.handlers) == 1
        finally:
            first.close()
            second.close()

    def test_console_disabled(self):
        with HaliteLogger(LoggingConfig(enable_console=False), name="halite.quiet") as logger:
            assert logger.logger.handlers == []

    def test_close_is_idempotent(self):
        logger = HaliteLogger(name="halite.close")
        logger.close()
        logger.close()
        assert logger.logger.handlers == []

    def test_extra_fields_masked(self, captured_logger):
        captured_logger.info("Login", user="bob", password="hunter2")
        record = captured_logger.records[0]
        assert record.user == "bob"
        assert record.password == MASK

    def test_levels(self, captured_logger):
        captured_logger.debug("d")
        captured_logger.warning("w")
        captured_logger.error("e")
        captured_logger.critical("c")
        levels = [r.levelno for r in captured_logger.records]
        assert levels == [logging.DEBUG, logging.WARNING, logging.ERROR, logging.CRITICAL]

    def test_exception_has_traceback(self, captured_logger):
        try:
            raise ValueError("boom")
        except ValueError:
            captured_logger.exception("Failed")
        assert captured_logger.records[0].exc_info is not None

    def test_correlation_id_attached(self, captured_logger):
        set_correlation_id("req-1")
        captured_logger.info("with id")
        clear_correlation_id()
        captured_logger.info("without id")

        first, second = captured_logger.records
        assert first.correlation_id == "req-1"
        assert not hasattr(second, "correlation_id")

    def test_file_output_is_json(self, tmp_path):
        path = tmp_path / "logs" / "halite.log"
        config = LoggingConfig.create(format="json", enable_console=False, enable_file=True, file_path=str(path))
        with HaliteLogger(config, name="halite.file") as logger:
            logger.info("Stored", status=201)

        entry = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
        assert entry["message"] == "Stored"
        assert entry["status"] == 201


class TestHooks:
    def test_request_hook(self, captured_logger):
        request = Request(
            "POST",
            "https://user:pw@api.example.com/items?token=abc&page=1",
            Headers({"Authorization": "Bearer abc", "Accept": "*/*"}),
            b"hello",
        )
        captured_logger.request(request)

        record = captured_logger.records[0]
        assert record.getMessage() == "Request"
        assert record.verb == "POST"
        assert record.body_size == 5
        assert record.headers == {"Authorization": MASK, "Accept": "*/*"}
        assert "abc" not in record.uri
        assert "pw" not in record.uri
        assert "page=1" in record.uri

    def test_headers_can_be_left_out(self):
        config = LoggingConfig.create(enable_console=False, log_headers=False)
        with HaliteLogger(config, name="halite.noheaders") as logger:
            handler = ListHandler()
            logger.logger.addHandler(handler)
            logger.request(Request("GET", "http://example.com/", {"Accept": "*/*"}))

        assert handler.records[0].verb == "GET"
        assert not hasattr(handler.records[0], "headers")

    def test_request_hook_does_not_modify_request(self, captured_logger):
        request = Request("GET", "http://example.com/", {"Authorization": "Bearer abc"})
        captured_logger.request(request)
        assert request.headers["Authorization"] == "Bearer abc"

    def test_response_hook(self, captured_logger):
        earlier = Response("http://example.com/a", 302)
        response = Response(
            "http://example.com/b", 200,
            Headers({"Content-Type": "application/json"}), b"{}",
            history=(earlier,),
        )
        captured_logger.response(response)

        record = captured_logger.records[0]
        assert record.getMessage() == "Response"
        assert record.status == 200
        assert record.content_type == "application/json"
        assert record.body_size == 2
        assert record.redirects == 1


class TestGlobalLogger:
    def test_get_logger_is_singleton(self):
        assert get_logger() is get_logger()

    def test_configure_logging_replaces_global(self):
        old = get_logger()
        new = configure_logging(LoggingConfig.create(level="DEBUG", enable_console=False))
        assert new is not old
        assert get_logger() is new
        assert old._closed is True
        assert new.config.level == LogLevel.DEBUG


class TestLoggingConfig:
    def test_create_from_strings(self):
        config = LoggingConfig.create(level="debug", format="COLORED")
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.COLORED

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="file_path"):
            LoggingConfig(enable_file=True)

    @pytest.mark.parametrize("kwargs", [{"max_bytes": 0}, {"backup_count": -1}])
    def test_invalid_rotation(self, kwargs):
        with pytest.raises(ValueError):
            LoggingConfig(**kwargs)

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(level="LOUD")
