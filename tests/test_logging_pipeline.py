"""Tests for structured logging pipeline utilities."""

from __future__ import annotations

import io
import json
import logging
import sys
from logging.handlers import QueueListener
from queue import Queue
from typing import Any, cast

import pytest

from water_credit import logging_pipeline
from water_credit.ledger import TokenLedger


def _capture(listener: QueueListener) -> io.StringIO:
    stream_handler = cast(logging.StreamHandler[Any], listener.handlers[0])
    buffer = io.StringIO()
    stream_handler.setStream(buffer)
    return buffer


def test_configure_structured_logging_emits_json() -> None:
    logger = logging.getLogger("water-credit-test")
    listener = logging_pipeline.configure_structured_logging(
        logger, trace_id="trace-123", level=logging.INFO
    )
    buffer = _capture(listener)

    logger.info("sample", extra={"operation": "mint"})
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue().strip())
    assert payload["message"] == "sample"
    assert payload["level"] == "INFO"
    assert payload["trace_id"] == "trace-123"
    assert payload["context"] == {"operation": "mint"}


def test_record_trace_id_overrides_default() -> None:
    logger = logging.getLogger("water-credit-trace-override")
    listener = logging_pipeline.configure_structured_logging(logger, trace_id="default")
    buffer = _capture(listener)

    logger.info("tagged", extra={"trace_id": "request-7"})
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue())
    assert payload["trace_id"] == "request-7"
    assert "trace_id" not in payload["context"]


def test_configure_structured_logging_generates_trace_id() -> None:
    logger = logging.getLogger("water-credit-auto-trace")
    listener = logging_pipeline.configure_structured_logging(logger)
    buffer = _capture(listener)

    logger.info("auto-trace")
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue())
    assert isinstance(payload["trace_id"], str)
    assert payload["trace_id"]


def test_exceptions_are_serialised() -> None:
    formatter = logging_pipeline.JsonFormatter(default_trace_id="t")
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            "water_credit", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )

    payload = json.loads(formatter.format(record))
    assert payload["message"] == "failed"
    assert "RuntimeError: boom" in payload["exception"]
    assert payload["context"] == {}


def test_ledger_records_flow_through_pipeline() -> None:
    logger = logging.getLogger("water_credit.ledger")
    listener = logging_pipeline.configure_structured_logging(logger, level=logging.INFO)
    buffer = _capture(listener)
    try:
        TokenLedger("admin").add_authority("admin", "utility")
    finally:
        logging_pipeline.shutdown_listeners([listener])
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    payload = json.loads(buffer.getvalue().strip().splitlines()[-1])
    assert payload["logger"] == "water_credit.ledger"
    assert payload["message"] == "Authority added"
    assert payload["context"]["authority"] == "utility"


def test_bounded_queue_drops_when_full() -> None:
    queue: Queue[logging.LogRecord] = Queue(maxsize=1)
    handler = logging_pipeline.BoundedQueueHandler(queue)
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    handler.enqueue(record)
    handler.enqueue(record)
    assert queue.qsize() == 1


def test_shutdown_listeners_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    class _FailingListener(QueueListener):
        def __init__(self) -> None:
            super().__init__(Queue(), logging.StreamHandler())

        def stop(self) -> None:
            raise RuntimeError("stop failure")

    with caplog.at_level(logging.WARNING):
        logging_pipeline.shutdown_listeners([_FailingListener()])

    assert "Failed to stop logging listener" in caplog.text
