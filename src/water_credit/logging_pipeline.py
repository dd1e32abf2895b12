"""Structured logging for hosts that run the ledger as a service or batch."""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from queue import Full, Queue
from typing import Iterable, override
from uuid import uuid4

LOGGER = logging.getLogger(__name__)

PACKAGE_LOGGER_NAME = "water_credit"

# Attributes present on every LogRecord; anything else came in via ``extra``.
_RESERVED_RECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def __init__(self, *, default_trace_id: str | None = None) -> None:
        super().__init__()
        self._default_trace_id = default_trace_id

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        trace_id = getattr(record, "trace_id", None) or self._default_trace_id

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS and key != "trace_id"
        }

        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": trace_id,
            "context": context,
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["exception"] = record.exc_text

        return json.dumps(payload, default=str)


class BoundedQueueHandler(logging.handlers.QueueHandler):
    """Queue handler that drops records when the queue is full."""

    @override
    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except Full:
            self.handleError(record)

    @override
    def handleError(self, record: logging.LogRecord) -> None:
        """Drop the record silently when the queue is full."""

        return


def configure_structured_logging(
    logger: logging.Logger,
    *,
    trace_id: str | None = None,
    level: int = logging.INFO,
    max_queue_size: int = 1024,
) -> logging.handlers.QueueListener:
    """Attach a queue-backed JSON handler to ``logger``.

    Args:
        logger: Target logger to configure.
        trace_id: Optional static trace identifier applied to every record
            unless a record sets its own via ``extra``. A random one is
            generated when omitted.
        level: Logging verbosity level. Defaults to ``logging.INFO``.
        max_queue_size: Records buffered before new ones are dropped.

    Returns:
        The started queue listener; stop it with :func:`shutdown_listeners`.
    """

    logger.setLevel(level)

    record_queue: Queue[logging.LogRecord] = Queue(maxsize=max_queue_size)
    logger.addHandler(BoundedQueueHandler(record_queue))

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        JsonFormatter(default_trace_id=trace_id or str(uuid4()))
    )

    queue_listener = logging.handlers.QueueListener(record_queue, stream_handler)
    queue_listener.start()
    return queue_listener


def configure_plain_logging(logger: logging.Logger, *, level: int) -> None:
    """Attach a human-readable stderr handler to ``logger``."""

    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)


def shutdown_listeners(listeners: Iterable[logging.handlers.QueueListener]) -> None:
    """Stop all queue listeners, logging rather than raising on failure."""

    for listener in listeners:
        try:
            listener.stop()
        except Exception as exc:
            LOGGER.warning("Failed to stop logging listener", exc_info=exc)
