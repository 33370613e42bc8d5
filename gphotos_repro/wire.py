"""Wire log - timestamped OUT/IN dumps of every API request and response, written to stdout."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Iterable

from googleapiclient.http import HttpRequest

WIRE_LOGGER_NAME = "gphotos_repro.wire"


class IsoTimestampFormatter(logging.Formatter):
    """Renders ``%(asctime)s`` as an ISO-8601 UTC instant, e.g. ``2024-05-01T12:00:00.123Z``."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe(payload: Any) -> str:
    """Human-readable dump of a request or response object."""
    if isinstance(payload, HttpRequest):
        text = f"{payload.method} {payload.uri}"
        if payload.body:
            text += f" ({len(payload.body)} byte body)"
        return text
    if isinstance(payload, dict):
        return json.dumps(payload, sort_keys=True)
    if isinstance(payload, (list, tuple)):
        return "[" + ", ".join(describe(p) for p in payload) + "]"
    return str(payload)


class WireLog:
    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def outbound(self, payload: Any) -> None:
        self._logger.info("OUT: %s", describe(payload))

    def inbound(self, payload: Any) -> None:
        self._logger.info("IN : %s", describe(payload))


def setup_wire_logger(
    stream: IO[str] | None = None,
    extra_handlers: Iterable[logging.Handler] = (),
) -> WireLog:
    """Configure the non-propagating wire logger. Replaces any handlers from a previous call."""
    logger = logging.getLogger(WIRE_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = IsoTimestampFormatter("%(asctime)s %(message)s")
    stream_handler = logging.StreamHandler(stream or sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    for handler in extra_handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return WireLog(logger)
