"""
Application configuration — environment-aware settings.

All environment variables are documented here. Values are read from the
process environment and from a local .env file when present.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent

load_dotenv()


def _json_env(name: str, default: dict) -> dict:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        return default


class BaseConfig:
    # Core Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-production")
    DATABASE = os.environ.get("DATABASE_URL", str(BASE_DIR / "dojo_exams.db"))
    JSON_SORT_KEYS = False

    # Exam rules (defaults match ExamSettings)
    EXAM_FEE = float(os.environ.get("EXAM_FEE", "10"))
    BELT_FEE = float(os.environ.get("BELT_FEE", "5"))
    MIN_ATTENDANCE_PERCENTAGE = int(os.environ.get("MIN_ATTENDANCE_PERCENTAGE", "50"))
    ATTENDANCE_CHECK_MONTHS = int(os.environ.get("ATTENDANCE_CHECK_MONTHS", "2"))
    # e.g. {"normal": 1, "special": 2, "national_course": 3, "international_course": 6}
    ATTENDANCE_VALUES = _json_env("ATTENDANCE_VALUES", {})

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    EXAM_LOG_LEVEL = os.environ.get("EXAM_LOG_LEVEL", "")  # defaults to LOG_LEVEL

    # Email
    EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "log")  # "log" or "smtp"
    MAIL_SERVER = os.environ.get("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", "587"))
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD", "")
    MAIL_FROM = os.environ.get("MAIL_FROM", "noreply@example.com")

    # Background jobs (hour of day, server time)
    REFRESH_HOUR = int(os.environ.get("REFRESH_HOUR", "1"))
    REMINDER_HOUR = int(os.environ.get("REMINDER_HOUR", "9"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")

    @classmethod
    def validate(cls):
        """Fail fast on missing or insecure configuration in production."""
        errors: list[str] = []

        if cls.SECRET_KEY in ("dev-key-change-in-production", ""):
            errors.append("SECRET_KEY must be set to a secure value in production.")
        if not 0 <= cls.MIN_ATTENDANCE_PERCENTAGE <= 100:
            errors.append("MIN_ATTENDANCE_PERCENTAGE must be between 0 and 100.")

        if errors:
            raise RuntimeError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )


class TestingConfig(BaseConfig):
    TESTING = True


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
