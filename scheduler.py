"""
Centralized Scheduler — Registers the periodic exam jobs.

Jobs:
  - Refresh next exam dates and eligibility flags (daily, REFRESH_HOUR)
  - Exam reminder sweep (daily, REMINDER_HOUR)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def refresh_exam_status(app) -> int:
    """Recompute cached exam fields for all active students."""
    from database import init_db
    from extensions import get_engine

    with app.app_context():
        init_db()
        return get_engine().refresh_all()


def send_exam_reminders(app) -> int:
    """Send every reminder the notification gate currently allows."""
    from database import init_db
    from extensions import get_engine

    with app.app_context():
        init_db()
        sent = get_engine().send_exam_reminders()
        logger.info("Exam reminder sweep sent %d reminders", sent)
        return sent


def init_scheduler(app):
    """Start a background scheduler for the periodic exam jobs.

    Uses APScheduler if available. Returns the scheduler instance or None.
    """
    try:
        from apscheduler.schedulers.background import BackgroundScheduler
    except ImportError:
        app.logger.info("APScheduler not installed — scheduling disabled.")
        return None

    scheduler = BackgroundScheduler(daemon=True)

    scheduler.add_job(
        func=refresh_exam_status,
        args=[app],
        trigger="cron",
        hour=app.config.get("REFRESH_HOUR", 1),
        id="refresh_exam_status",
        replace_existing=True,
    )

    scheduler.add_job(
        func=send_exam_reminders,
        args=[app],
        trigger="cron",
        hour=app.config.get("REMINDER_HOUR", 9),
        id="exam_reminders",
        replace_existing=True,
    )

    scheduler.start()
    app.logger.info("Background scheduler started with %d jobs", len(scheduler.get_jobs()))
    return scheduler
