"""
Eligibility Evaluator — may this student sit their next exam?

A student is exam-enabled once the attendance check window has opened
(``attendance_check_months`` before the exam date) and their weighted
attendance over that window reaches the minimum percentage.
The eligible-for-exam listing further restricts to students whose exam
date is at most one month away.

The exam date is the computed one, except while a retake is pending:
then the stored retake date is used throughout.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta

from attendance import AttendanceRecord, attendance_percentage
from exam_schedule import next_exam_date
from exam_settings import ExamSettings
from students import Student

SCHEDULING_HORIZON_MONTHS = 1

RecordsFor = Callable[[str], Iterable[AttendanceRecord]]


def check_opens_on(exam_date: date, settings: ExamSettings) -> date:
    return exam_date - relativedelta(months=settings.attendance_check_months)


def is_exam_enabled(
    student: Student,
    records: Iterable[AttendanceRecord],
    settings: ExamSettings,
    today: Optional[date] = None,
) -> bool:
    today = today or date.today()
    exam_date = effective_exam_date(student)
    if exam_date is None:
        return False
    if today < check_opens_on(exam_date, settings):
        return False
    pct = attendance_percentage(
        records, settings.attendance_check_months, today, settings.attendance_values
    )
    return pct >= settings.min_attendance_percentage


def within_scheduling_horizon(exam_date: date, today: date) -> bool:
    """True when today lies in [exam_date - 1 month, exam_date]."""
    return exam_date - relativedelta(months=SCHEDULING_HORIZON_MONTHS) <= today <= exam_date


def students_eligible_for_exam(
    students: Iterable[Student],
    records_for: RecordsFor,
    settings: ExamSettings,
    today: Optional[date] = None,
) -> list[Student]:
    today = today or date.today()
    eligible = []
    for student in students:
        if not student.active:
            continue
        if not is_exam_enabled(student, records_for(student.id), settings, today):
            continue
        exam_date = effective_exam_date(student)
        if exam_date is not None and within_scheduling_horizon(exam_date, today):
            eligible.append(student)
    return eligible


def overdue_students(students: Iterable[Student], today: Optional[date] = None) -> list[Student]:
    """Active students whose exam date has already passed, whatever their attendance."""
    today = today or date.today()
    overdue = []
    for student in students:
        if not student.active:
            continue
        exam_date = effective_exam_date(student)
        if exam_date is not None and exam_date < today:
            overdue.append(student)
    return overdue


def effective_exam_date(student: Student) -> Optional[date]:
    """Stored retake date while a retake is pending, else the computed date."""
    if student.retake_pending and student.next_exam_date is not None:
        return student.next_exam_date
    return next_exam_date(student)


def refresh_derived_fields(
    student: Student,
    records: Iterable[AttendanceRecord],
    settings: ExamSettings,
    today: Optional[date] = None,
) -> Student:
    """Recompute the cached exam fields of ``student`` in place.

    ``exam_enabled`` is always re-evaluated, which re-confirms or revokes
    the flag forced on by a failed exam.
    """
    student.next_exam_date = effective_exam_date(student)
    student.exam_enabled = is_exam_enabled(student, records, settings, today)
    return student
