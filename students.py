"""
Student records — the data the exam engine reads and mutates.

Serialized field names are camelCase (``nextExamDate``, ``examEnabled``,
``examNotificationSent``, ``lastExamNotificationDate`` ...) so records
round-trip unchanged through any store.

Derived fields (next_exam_date, exam_enabled, exam_notification_sent,
last_exam_notification_date, retake_pending) are a cached view owned by the
engine. They are recomputed on an exam result, on a retake, on a reminder
and on an explicit refresh; nothing else writes them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional

from grade_ladder import ADULT, CHILD, Grade, get_grade


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class ExamHistoryEntry:
    student_id: str
    date: date
    grade_id: str           # target grade of the exam
    grade_name: str
    examiner: str
    passed: bool
    is_retake: bool = False
    exam_fee: float = 0
    belt_fee: float = 0
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "date": self.date.isoformat(),
            "grade": {"id": self.grade_id, "name": self.grade_name},
            "examiner": self.examiner,
            "passed": self.passed,
            "isRetake": self.is_retake,
            "cost": {"examFee": self.exam_fee, "beltFee": self.belt_fee},
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ExamHistoryEntry":
        grade = data.get("grade") or {}
        cost = data.get("cost") or {}
        return cls(
            id=data.get("id") or _new_id(),
            student_id=str(data.get("studentId", "")),
            date=_parse_date(data.get("date")) or date.min,
            grade_id=grade.get("id", ""),
            grade_name=grade.get("name", ""),
            examiner=data.get("examiner", ""),
            passed=bool(data.get("passed", False)),
            is_retake=bool(data.get("isRetake", False)),
            exam_fee=cost.get("examFee", 0),
            belt_fee=cost.get("beltFee", 0),
        )


@dataclass
class InternationalCourseCredit:
    """One attended international course; only the count matters for scheduling."""
    name: str = ""
    date: Optional[date] = None
    location: str = ""
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "date": _iso(self.date), "location": self.location}

    @classmethod
    def from_dict(cls, data: Mapping) -> "InternationalCourseCredit":
        return cls(
            id=data.get("id") or _new_id(),
            name=data.get("name", ""),
            date=_parse_date(data.get("date")),
            location=data.get("location", ""),
        )


@dataclass
class Student:
    id: str
    name: str
    category: str                       # "child"|"adult"
    birth_date: Optional[date]
    join_date: Optional[date]
    grade: Optional[Grade]
    email: str = ""
    active: bool = True
    belt: str = ""
    exam_history: list[ExamHistoryEntry] = field(default_factory=list)
    international_courses: list[InternationalCourseCredit] = field(default_factory=list)
    # Derived fields, engine-owned
    next_exam_date: Optional[date] = None
    exam_enabled: bool = False
    exam_notification_sent: bool = False
    last_exam_notification_date: Optional[date] = None
    retake_pending: bool = False
    version: int = 0

    def __post_init__(self) -> None:
        if not self.belt and self.grade is not None:
            self.belt = self.grade.belt_color

    @property
    def is_adult(self) -> bool:
        return self.category == ADULT

    @property
    def is_child(self) -> bool:
        return self.category == CHILD

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "category": self.category,
            "birthDate": _iso(self.birth_date),
            "joinDate": _iso(self.join_date),
            "grade": self.grade.id if self.grade else None,
            "belt": self.belt,
            "active": self.active,
            "examHistory": [e.to_dict() for e in self.exam_history],
            "internationalCourses": [c.to_dict() for c in self.international_courses],
            "nextExamDate": _iso(self.next_exam_date),
            "examEnabled": self.exam_enabled,
            "examNotificationSent": self.exam_notification_sent,
            "lastExamNotificationDate": _iso(self.last_exam_notification_date),
            "retakePending": self.retake_pending,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Student":
        grade_ref = data.get("grade")
        if isinstance(grade_ref, Mapping):
            grade_ref = grade_ref.get("id")
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email") or "",
            category=data.get("category") or ADULT,
            birth_date=_parse_date(data.get("birthDate")),
            join_date=_parse_date(data.get("joinDate")),
            grade=get_grade(grade_ref),
            belt=data.get("belt") or "",
            active=bool(data.get("active", True)),
            exam_history=[ExamHistoryEntry.from_dict(e) for e in data.get("examHistory") or []],
            international_courses=[
                InternationalCourseCredit.from_dict(c) for c in data.get("internationalCourses") or []
            ],
            next_exam_date=_parse_date(data.get("nextExamDate")),
            exam_enabled=bool(data.get("examEnabled", False)),
            exam_notification_sent=bool(data.get("examNotificationSent", False)),
            last_exam_notification_date=_parse_date(data.get("lastExamNotificationDate")),
            retake_pending=bool(data.get("retakePending", False)),
            version=int(data.get("version") or 0),
        )


@dataclass
class Notification:
    student_id: str
    type: str               # "exam-reminder"|"exam-result"
    title: str
    body: str
    created_at: str
    read: bool = False
    email_sent: bool = False
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "createdAt": self.created_at,
            "read": self.read,
            "emailSent": self.email_sent,
        }
