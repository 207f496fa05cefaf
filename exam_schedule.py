"""
Exam Scheduler — when may a student next test?

next exam = (date of last passed exam, or join date) + grade exam interval, with:
  - adults at kyu level or exactly 1st dan: 3 months off per international
    course credit, never below 3 months. Higher dan grades get no discount.
  - children whose next rank is 1st dan: never before their 17th birthday.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from grade_ladder import next_grade
from students import ExamHistoryEntry, Student

COURSE_CREDIT_MONTHS = 3
MIN_ADULT_INTERVAL_MONTHS = 3
FIRST_DAN_MIN_AGE = 17
RETAKE_DELAY_MONTHS = 1


def add_months(d: date, months: int) -> date:
    """Calendar month arithmetic, clamped to the end of the target month."""
    return d + relativedelta(months=months)


def last_passed_exam(student: Student) -> Optional[ExamHistoryEntry]:
    passed = [e for e in student.exam_history if e.passed]
    if not passed:
        return None
    return max(passed, key=lambda e: e.date)


def base_date(student: Student) -> Optional[date]:
    last = last_passed_exam(student)
    if last is not None:
        return last.date
    return student.join_date


def exam_interval(student: Student) -> Optional[int]:
    """Effective interval in months for the student's current grade."""
    if student.grade is None:
        return None
    interval = student.grade.exam_interval
    if student.is_adult and student.grade.dan <= 1:
        reduction = COURSE_CREDIT_MONTHS * len(student.international_courses)
        interval = max(interval - reduction, MIN_ADULT_INTERVAL_MONTHS)
    return interval


def first_dan_earliest_date(student: Student) -> Optional[date]:
    """17th birthday for a child whose next rank is 1st dan, else None."""
    if not student.is_child or student.birth_date is None:
        return None
    upcoming = next_grade(student.grade, student.category)
    if upcoming is None or upcoming.dan != 1:
        return None
    return student.birth_date + relativedelta(years=FIRST_DAN_MIN_AGE)


def next_exam_date(student: Student) -> Optional[date]:
    """Compute the next exam date, or None when it cannot be determined."""
    start = base_date(student)
    interval = exam_interval(student)
    if start is None or interval is None:
        return None

    scheduled = add_months(start, interval)
    earliest = first_dan_earliest_date(student)
    if earliest is not None and scheduled < earliest:
        return earliest
    return scheduled


def retake_date(today: date) -> date:
    return add_months(today, RETAKE_DELAY_MONTHS)
