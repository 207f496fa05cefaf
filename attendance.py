"""
Attendance Aggregator — weighted attendance percentage over a trailing window.

Each present entry adds its weight to the numerator (explicit
``attendance_value`` or the session-type default), while the denominator is
the plain count of entries in the window. Course and special sessions
therefore earn more than one session's worth of credit, which rewards
course participation. The result is clamped to 100.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from dateutil.relativedelta import relativedelta

NORMAL = "normal"
SPECIAL = "special"
NATIONAL_COURSE = "national_course"
INTERNATIONAL_COURSE = "international_course"

SESSION_TYPES = (NORMAL, SPECIAL, NATIONAL_COURSE, INTERNATIONAL_COURSE)

DEFAULT_SESSION_WEIGHTS: dict[str, float] = {
    NORMAL: 1,
    SPECIAL: 2,
    NATIONAL_COURSE: 3,
    INTERNATIONAL_COURSE: 6,
}


@dataclass
class AttendanceRecord:
    student_id: str
    date: date
    present: bool = True
    session_type: str = NORMAL
    attendance_value: float | None = None  # overrides the session-type weight
    notes: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "date": self.date.isoformat(),
            "present": self.present,
            "sessionType": self.session_type,
            "attendanceValue": self.attendance_value,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "AttendanceRecord":
        value = data.get("attendanceValue")
        return cls(
            id=data.get("id") or uuid.uuid4().hex[:12],
            student_id=str(data.get("studentId", "")),
            date=date.fromisoformat(str(data["date"])[:10]),
            present=bool(data.get("present", False)),
            session_type=data.get("sessionType") or NORMAL,
            attendance_value=float(value) if value is not None else None,
            notes=data.get("notes") or "",
        )


def session_weight(record: AttendanceRecord,
                   weights: Mapping[str, float] | None = None) -> float:
    """Credit earned by a present entry."""
    if record.attendance_value is not None:
        return record.attendance_value
    table = weights or DEFAULT_SESSION_WEIGHTS
    return table.get(record.session_type, DEFAULT_SESSION_WEIGHTS.get(record.session_type, 1))


def window_start(today: date, window_months: int) -> date:
    return today - relativedelta(months=window_months)


def attendance_percentage(
    records: Iterable[AttendanceRecord],
    window_months: int,
    today: date | None = None,
    weights: Mapping[str, float] | None = None,
) -> int:
    """Weighted attendance percentage (0..100) over the last ``window_months``.

    Returns 0 when no entry falls inside the window.
    """
    today = today or date.today()
    cutoff = window_start(today, window_months)
    relevant = [r for r in records if r.date >= cutoff]
    if not relevant:
        return 0

    earned = sum(session_weight(r, weights) for r in relevant if r.present)
    ratio = earned / len(relevant) * 100
    # Half-up rounding, not banker's rounding
    return min(int(math.floor(ratio + 0.5)), 100)
