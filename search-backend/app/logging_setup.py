"""Structured logging for the coordinate search service.

JSON lines when ENABLE_JSON_LOGS=1 (default), a short human line otherwise.
Request logs carry request_id/path/method/status/duration_ms; the search
pipeline logs carry sequence/stage/epsg.
"""
from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from time import time

# extra attribute -> short label for the plain formatter (None: JSON only)
_FIELDS = {
    "request_id": "rid",
    "path": "path",
    "method": None,
    "status": "status",
    "duration_ms": None,
    "sequence": "seq",
    "stage": "stage",
    "epsg": "epsg",
}


def _extras(record: logging.LogRecord):
    for attr in _FIELDS:
        if hasattr(record, attr):
            yield attr, getattr(record, attr)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        base.update(_extras(record))
        if record.exc_info and record.exc_info[0] is not None:
            base["exc_type"] = record.exc_info[0].__name__
        return json.dumps(base, ensure_ascii=False)


class _PlainFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [self.formatTime(record, datefmt="%H:%M:%S"), record.levelname[0], f"{record.name}:", record.getMessage()]
        parts += [f"{_FIELDS[attr]}={value}" for attr, value in _extras(record) if _FIELDS[attr]]
        return " ".join(parts)


def configure_logging() -> None:
    if getattr(configure_logging, "_configured", False):  # idempotent
        return
    root = logging.getLogger()
    root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    for h in list(root.handlers):  # uvicorn installs its own
        root.removeHandler(h)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if os.getenv("ENABLE_JSON_LOGS", "1") == "1" else _PlainFormatter())
    root.addHandler(handler)
    configure_logging._configured = True  # type: ignore[attr-defined]


async def logging_middleware(request, call_next):  # pragma: no cover - thin wrapper
    logger = logging.getLogger("request")
    fields = {"request_id": uuid.uuid4().hex[:8], "path": request.url.path, "method": request.method}
    request.state.request_id = fields["request_id"]
    start = time()
    logger.info("request.start", extra=fields)
    status = None
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        logger.info(
            "request.end",
            extra={**fields, "status": status, "duration_ms": round((time() - start) * 1000.0, 2)},
        )


__all__ = ["configure_logging", "logging_middleware"]
