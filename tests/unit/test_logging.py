"""Tests for logging setup."""

import json
import logging

import pytest

from clob_stream.config.settings import LoggingConfig
from clob_stream.errors import ConnectionClosedError, DecodeError
from clob_stream.utils.logging import JSONFormatter, log_stream_error, log_with_context, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
def test_json_formatter_includes_context():
    record = logging.LogRecord("clob_stream.stream", logging.WARNING, __file__, 10, "Stream interrupted", None, None)
    record.ctx_feed = "market"

    data = json.loads(JSONFormatter().format(record))

    assert data['level'] == "WARNING"
    assert data['logger'] == "clob_stream.stream"
    assert data['message'] == "Stream interrupted"
    assert data['ctx_feed'] == "market"


@pytest.mark.unit
def test_setup_logging_writes_json_to_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "stream.log"
    handler = setup_logging(LoggingConfig(level="DEBUG", format="json", output=str(log_file)), "test-stream")

    log_with_context(logging.getLogger("clob_stream.test"), logging.INFO, "hello", feed="market")
    handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    hello = [line for line in lines if line['message'] == "hello"][0]
    assert hello['service'] == "test-stream"
    assert hello['ctx_feed'] == "market"
    assert restore_root_logger.level == logging.DEBUG
    handler.close()


@pytest.mark.unit
def test_log_stream_error_records_close_code(caplog):
    logger = logging.getLogger("clob_stream.test")
    with caplog.at_level(logging.DEBUG, logger="clob_stream.test"):
        log_stream_error(logger, "market", ConnectionClosedError(code=1011, reason="internal error"))

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.ctx_feed == "market"
    assert record.ctx_error_type == "ConnectionClosedError"
    assert record.ctx_close_code == 1011
    assert record.ctx_close_reason == "internal error"


@pytest.mark.unit
def test_log_stream_error_keeps_decode_payload_at_debug(caplog):
    logger = logging.getLogger("clob_stream.test")
    with caplog.at_level(logging.DEBUG, logger="clob_stream.test"):
        log_stream_error(logger, "user", DecodeError("Invalid JSON", payload="{bad" * 100))

    record = caplog.records[-1]
    assert record.levelno == logging.DEBUG
    assert record.ctx_error_type == "DecodeError"
    assert len(record.ctx_payload) == DecodeError.MAX_PAYLOAD_PREVIEW
    assert not hasattr(record, 'ctx_close_code')
