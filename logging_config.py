"""
Logging setup for the exam tracker.

- JSON lines in production, plain text in development
- Every record emitted while serving a request carries that request's id,
  so an engine event can be traced back to the HTTP call that caused it
- EXAM_LOG_LEVEL tunes the exam engine loggers independently of LOG_LEVEL
- One access line per request
"""

from __future__ import annotations

import json
import logging
import time
import uuid

from flask import Flask, g, has_request_context, request

# Loggers owned by the exam engine and its adapters.
EXAM_LOGGERS = (
    "exam_engine",
    "eligibility",
    "exam_settings",
    "stores",
    "db_stores",
    "email_service",
    "scheduler",
    "blueprints.exams",
)


class RequestIdFilter(logging.Filter):
    """Stamp records with the current request id ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            rid = "-"
            if has_request_context():
                rid = getattr(g, "request_id", "-")
            record.request_id = rid
        return True


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if getattr(record, "request_id", "-") != "-":
            entry["request_id"] = record.request_id
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def init_logging(app: Flask) -> None:
    log_format = app.config.get("LOG_FORMAT", "text")
    log_level = app.config.get("LOG_LEVEL", "INFO")

    root = logging.getLogger()
    root.setLevel(_level(log_level))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root.addHandler(handler)

    exam_level = _level(app.config.get("EXAM_LOG_LEVEL") or log_level)
    for name in EXAM_LOGGERS:
        logging.getLogger(name).setLevel(exam_level)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    @app.before_request
    def _attach_request_id():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def _log_request(response):
        duration_ms = (time.time() - getattr(g, "request_start", time.time())) * 1000
        app.logger.info(
            "%s %s %s %.0fms",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-ID"] = getattr(g, "request_id", "-")
        return response


def _level(name) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)
