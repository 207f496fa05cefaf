"""
DB-backed store classes for the dojo exam tracker.

Each class implements the interface of its in-memory counterpart in
stores.py, reading and writing through database.get_db().
"""

from __future__ import annotations

import json
from datetime import date, datetime

from attendance import AttendanceRecord
from database import get_db
from stores import AttendanceLog, NotificationStore, StudentDirectory
from students import Notification, Student


# ── Students ─────────────────────────────────────────────────────────


class StudentDirectoryDB(StudentDirectory):
    """Student directory persisted as one JSON payload per row.

    save_all() rewrites the whole table in one transaction.
    """

    def load_all(self) -> list[Student]:
        db = get_db()
        rows = db.execute("SELECT payload FROM students ORDER BY rowid").fetchall()
        return [Student.from_dict(json.loads(r["payload"])) for r in rows]

    def save_all(self, students: list[Student]) -> None:
        db = get_db()
        now = datetime.now().isoformat()
        with db:
            db.execute("DELETE FROM students")
            db.executemany(
                "INSERT INTO students (id, payload, version, active, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                [
                    (s.id, json.dumps(s.to_dict()), s.version, 1 if s.active else 0, now)
                    for s in students
                ],
            )


# ── Attendance ───────────────────────────────────────────────────────


class AttendanceLogDB(AttendanceLog):
    """DB-backed attendance log."""

    def records_for(self, student_id: str) -> list[AttendanceRecord]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM attendance WHERE student_id = ? ORDER BY date",
            (student_id,),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def add(self, record: AttendanceRecord) -> None:
        db = get_db()
        db.execute(
            "INSERT OR IGNORE INTO attendance (id, student_id, date, present, "
            "session_type, attendance_value, notes) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (record.id, record.student_id, record.date.isoformat(),
             1 if record.present else 0, record.session_type,
             record.attendance_value, record.notes),
        )
        db.commit()

    def _row_to_record(self, r) -> AttendanceRecord:
        return AttendanceRecord(
            id=r["id"],
            student_id=r["student_id"],
            date=date.fromisoformat(r["date"]),
            present=bool(r["present"]),
            session_type=r["session_type"],
            attendance_value=r["attendance_value"],
            notes=r["notes"],
        )


# ── Notifications ────────────────────────────────────────────────────


class NotificationStoreDB(NotificationStore):
    """DB-backed exam notification inbox."""

    def add(self, notification: Notification) -> None:
        db = get_db()
        db.execute(
            "INSERT OR IGNORE INTO notifications (id, student_id, type, title, body, "
            "created_at, read, email_sent) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (notification.id, notification.student_id, notification.type,
             notification.title, notification.body, notification.created_at,
             1 if notification.read else 0, 1 if notification.email_sent else 0),
        )
        db.commit()

    def for_student(self, student_id: str, n: int = 20) -> list[Notification]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM notifications WHERE student_id = ? ORDER BY created_at DESC LIMIT ?",
            (student_id, n),
        ).fetchall()
        return [
            Notification(
                id=r["id"], student_id=r["student_id"], type=r["type"],
                title=r["title"], body=r["body"], created_at=r["created_at"],
                read=bool(r["read"]), email_sent=bool(r["email_sent"]),
            )
            for r in rows
        ]
