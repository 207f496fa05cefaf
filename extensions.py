"""
Engine wiring for request handlers and background jobs.

The engine is cheap to build, so one is assembled per call from the
SQLite-backed stores and the settings in the current app config.
"""

from __future__ import annotations

from flask import current_app

from db_stores import AttendanceLogDB, NotificationStoreDB, StudentDirectoryDB
from email_service import EmailService
from exam_engine import ExamEngine
from exam_settings import ExamSettings


def get_settings() -> ExamSettings:
    return ExamSettings.from_config(current_app.config)


def get_engine() -> ExamEngine:
    """Return an ExamEngine bound to the app's database. Needs an app context."""
    clock = current_app.config.get("EXAM_CLOCK")
    kwargs = {"clock": clock} if clock is not None else {}
    return ExamEngine(
        students=StudentDirectoryDB(),
        attendance=AttendanceLogDB(),
        settings=get_settings(),
        notifications=NotificationStoreDB(),
        mailer=EmailService.send,
        **kwargs,
    )
