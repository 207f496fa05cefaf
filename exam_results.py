"""
Grade Transition Processor — applies an exam outcome to a student record.

Every result appends a history entry with a fee snapshot and clears the
exam-enabled and notification flags. A pass promotes the student and
reschedules from the new grade. A fail books a retake one month out and
makes the student immediately eligible for it.
"""

from __future__ import annotations

from datetime import date

from exam_schedule import next_exam_date, retake_date
from exam_settings import ExamSettings
from grade_ladder import Grade
from students import ExamHistoryEntry, Student


def is_retake(student: Student, grade: Grade) -> bool:
    return any(e.grade_id == grade.id and not e.passed for e in student.exam_history)


def apply_exam_result(
    student: Student,
    new_grade: Grade,
    examiner: str,
    passed: bool,
    settings: ExamSettings,
    today: date,
) -> ExamHistoryEntry:
    """Mutate ``student`` with the outcome of an exam for ``new_grade``."""
    entry = ExamHistoryEntry(
        student_id=student.id,
        date=today,
        grade_id=new_grade.id,
        grade_name=new_grade.name,
        examiner=examiner,
        passed=passed,
        is_retake=is_retake(student, new_grade),
        exam_fee=settings.exam_fee,
        belt_fee=settings.belt_fee,
    )
    student.exam_history.append(entry)
    student.exam_enabled = False
    student.exam_notification_sent = False

    if passed:
        student.grade = new_grade
        student.belt = new_grade.belt_color
        student.retake_pending = False
        student.next_exam_date = next_exam_date(student)
    else:
        apply_retake(student, today)
    return entry


def apply_retake(student: Student, today: date) -> Student:
    """Book a retake one month out and open eligibility for it."""
    student.next_exam_date = retake_date(today)
    student.exam_enabled = True
    student.exam_notification_sent = False
    student.retake_pending = True
    return student
