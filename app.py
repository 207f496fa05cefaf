"""
Dojo Exam Tracker — Flask Web Application

Exam eligibility and grade progression for martial-arts students: next
exam dates, attendance-based eligibility, exam results and reminders.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Flask, Response

import database
from blueprints import register_blueprints


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    from config import config_by_name
    env = os.environ.get("FLASK_ENV", "development")
    cfg = config_by_name.get(env, config_by_name["development"])
    app.config.from_object(cfg)
    if test_config is not None:
        app.config.update(test_config)
    elif hasattr(cfg, "validate"):
        cfg.validate()

    # Structured logging
    from logging_config import init_logging
    init_logging(app)

    # Register database teardown
    database.init_app(app)

    # Register all application blueprints
    register_blueprints(app)

    # Security headers
    @app.after_request
    def set_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

    # Start the exam jobs (refresh + reminders)
    if not app.config.get("TESTING"):
        try:
            from scheduler import init_scheduler
            init_scheduler(app)
        except Exception:
            logging.getLogger(__name__).exception("Scheduler failed to start")

    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5001)
