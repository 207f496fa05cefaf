"""
Notification Gate — exam reminders and result messages.

A reminder may go out when the exam is 10 to 45 days away (inclusive) and,
if one was already sent, more than 10 days have passed since. Callers must
check ``can_notify`` before ``mark_notification_sent``; marking does not
re-check the gate.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

from grade_ladder import Grade, next_grade
from students import Notification, Student

MIN_DAYS_BEFORE_EXAM = 10
MAX_DAYS_BEFORE_EXAM = 45
COOLDOWN_DAYS = 10
DAYS_PHRASING_LIMIT = 20

REMINDER = "exam-reminder"
RESULT = "exam-result"


def days_until_exam(student: Student, today: date) -> Optional[int]:
    if student.next_exam_date is None:
        return None
    return (student.next_exam_date - today).days


def can_notify(student: Student, today: Optional[date] = None) -> bool:
    today = today or date.today()
    days = days_until_exam(student, today)
    if days is None:
        return False
    if days < MIN_DAYS_BEFORE_EXAM or days > MAX_DAYS_BEFORE_EXAM:
        return False
    if student.exam_notification_sent and student.last_exam_notification_date:
        days_since = (today - student.last_exam_notification_date).days
        return days_since > COOLDOWN_DAYS
    return True


def notification_message(student: Student, today: Optional[date] = None) -> str:
    today = today or date.today()
    days = days_until_exam(student, today)
    if days is None:
        return ""
    exam_date = student.next_exam_date.isoformat()
    if days <= DAYS_PHRASING_LIMIT:
        return f"Your exam is scheduled in about {days} days ({exam_date})."
    weeks = math.ceil(days / 7)
    return f"Your exam is scheduled in about {weeks} weeks ({exam_date})."


def apply_notification_sent(student: Student, today: date) -> Student:
    student.exam_notification_sent = True
    student.last_exam_notification_date = today
    return student


def build_reminder(student: Student, today: date) -> Notification:
    body = notification_message(student, today)
    upcoming = next_grade(student.grade, student.category)
    if upcoming is not None:
        body += (
            f" You will be testing for {upcoming.name} ({upcoming.belt_color})."
            " Keep your attendance up to date."
        )
    return Notification(
        student_id=student.id,
        type=REMINDER,
        title="Upcoming exam",
        body=body,
        created_at=datetime.combine(today, datetime.now().time()).isoformat(timespec="seconds"),
    )


def build_result_notification(student: Student, grade: Grade, passed: bool, today: date) -> Notification:
    if passed:
        title = "Exam passed!"
        body = f"Congratulations! You passed your exam for {grade.name}. Your new belt is {grade.belt_color}."
    else:
        title = "Exam result"
        body = (
            f"Your exam for {grade.name} needs to be retaken. "
            "Keep training and you can test again soon."
        )
    return Notification(
        student_id=student.id,
        type=RESULT,
        title=title,
        body=body,
        created_at=datetime.combine(today, datetime.now().time()).isoformat(timespec="seconds"),
    )
