"""
Email service — sends exam reminders and results via SMTP or logs them.

Uses EMAIL_BACKEND config to choose transport:
  - "log" (default): writes the email to the log
  - "smtp": sends via SMTP using MAIL_* settings
"""

from __future__ import annotations

import logging
import smtplib
from email.mime.text import MIMEText

from flask import current_app

logger = logging.getLogger(__name__)


class EmailService:
    @staticmethod
    def send(to: str, subject: str, body: str) -> bool:
        """Send a plain-text email. Returns True on success."""
        backend = current_app.config.get("EMAIL_BACKEND", "log")

        if backend == "log":
            logger.info("EMAIL [to=%s] subject=%s\n%s", to, subject, body)
            return True

        config = {
            "mail_from": current_app.config.get("MAIL_FROM", "noreply@example.com"),
            "mail_server": current_app.config.get("MAIL_SERVER", "localhost"),
            "mail_port": current_app.config.get("MAIL_PORT", 587),
            "mail_username": current_app.config.get("MAIL_USERNAME", ""),
            "mail_password": current_app.config.get("MAIL_PASSWORD", ""),
        }
        return EmailService._do_send(to, subject, body, config)

    @staticmethod
    def _do_send(to: str, subject: str, body: str, config: dict) -> bool:
        """Actual SMTP send — no Flask context required."""
        try:
            msg = MIMEText(body, "plain", "utf-8")
            msg["Subject"] = subject
            msg["From"] = config.get("mail_from", "noreply@example.com")
            msg["To"] = to

            username = config.get("mail_username", "")
            password = config.get("mail_password", "")
            with smtplib.SMTP(config.get("mail_server", "localhost"), config.get("mail_port", 587)) as smtp:
                smtp.starttls()
                if username and password:
                    smtp.login(username, password)
                smtp.send_message(msg)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send failed: %s", e)
            return False
