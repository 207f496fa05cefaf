"""
Exam engine — binds the rank, attendance, scheduling, eligibility, result
and notification rules to a student directory, an attendance log and a set
of exam settings.

Every mutating call touches exactly one student record through the
directory's ``update``; an unknown id is a logged no-op returning None.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

import eligibility
import exam_notifications
from attendance import attendance_percentage
from exam_results import apply_exam_result, apply_retake
from exam_schedule import next_exam_date
from exam_settings import ExamSettings
from grade_ladder import Grade, next_grade
from stores import AttendanceLog, InMemoryNotificationStore, NotificationStore, StudentDirectory
from students import Notification, Student

logger = logging.getLogger(__name__)

# (to, subject, body) -> delivered?
Mailer = Callable[[str, str, str], bool]


class ExamEngine:
    def __init__(
        self,
        students: StudentDirectory,
        attendance: AttendanceLog,
        settings: Optional[ExamSettings] = None,
        notifications: Optional[NotificationStore] = None,
        clock: Callable[[], date] = date.today,
        mailer: Optional[Mailer] = None,
    ):
        self.students = students
        self.attendance = attendance
        self.settings = settings or ExamSettings()
        self.notifications = notifications or InMemoryNotificationStore()
        self.clock = clock
        self.mailer = mailer

    def today(self) -> date:
        return self.clock()

    def _settings(self, overrides: Optional[ExamSettings]) -> ExamSettings:
        return overrides or self.settings

    # ── Reads ────────────────────────────────────────────────────────

    def attendance_percentage(self, student_id: str, window_months: Optional[int] = None) -> int:
        if window_months is None:
            window_months = self.settings.attendance_check_months
        return attendance_percentage(
            self.attendance.records_for(student_id),
            window_months,
            self.today(),
            self.settings.attendance_values,
        )

    def next_exam_date(self, student: Student) -> Optional[date]:
        return next_exam_date(student)

    def next_grade(self, student: Student) -> Optional[Grade]:
        return next_grade(student.grade, student.category)

    def is_exam_enabled(self, student: Student, settings: Optional[ExamSettings] = None) -> bool:
        return eligibility.is_exam_enabled(
            student,
            self.attendance.records_for(student.id),
            self._settings(settings),
            self.today(),
        )

    def students_eligible_for_exam(self, settings: Optional[ExamSettings] = None) -> list[Student]:
        return eligibility.students_eligible_for_exam(
            self.students.list_active(),
            self.attendance.records_for,
            self._settings(settings),
            self.today(),
        )

    def overdue_students(self) -> list[Student]:
        return eligibility.overdue_students(self.students.list_active(), self.today())

    def can_notify(self, student: Student) -> bool:
        return exam_notifications.can_notify(student, self.today())

    def notification_message(self, student: Student) -> str:
        return exam_notifications.notification_message(student, self.today())

    # ── Derived-field refresh ────────────────────────────────────────

    def refresh_student(self, student_id: str) -> Optional[Student]:
        records = self.attendance.records_for(student_id)
        today = self.today()
        return self.students.update(
            student_id,
            lambda s: eligibility.refresh_derived_fields(s, records, self.settings, today),
        )

    def refresh_all(self) -> int:
        """Recompute cached exam fields for every active student."""
        refreshed = 0
        for student in self.students.list_active():
            if self.refresh_student(student.id) is not None:
                refreshed += 1
        logger.info("Refreshed exam status for %d students", refreshed)
        return refreshed

    # ── Mutations ────────────────────────────────────────────────────

    def record_exam_result(
        self,
        student_id: str,
        new_grade: Grade,
        examiner: str,
        passed: bool,
        expected_version: Optional[int] = None,
    ) -> Optional[Student]:
        today = self.today()
        settings = self.settings
        updated = self.students.update(
            student_id,
            lambda s: apply_exam_result(s, new_grade, examiner, passed, settings, today),
            expected_version=expected_version,
        )
        if updated is None:
            return None

        logger.info(
            "Exam result recorded: student=%s grade=%s passed=%s examiner=%s",
            student_id, new_grade.id, passed, examiner,
        )
        self._deliver(
            updated,
            exam_notifications.build_result_notification(updated, new_grade, passed, today),
        )
        return updated

    def schedule_retake_exam(
        self, student_id: str, expected_version: Optional[int] = None
    ) -> Optional[Student]:
        today = self.today()
        updated = self.students.update(
            student_id,
            lambda s: apply_retake(s, today),
            expected_version=expected_version,
        )
        if updated is not None:
            logger.info("Retake scheduled: student=%s date=%s", student_id, updated.next_exam_date)
        return updated

    def mark_notification_sent(self, student_id: str) -> Optional[Student]:
        today = self.today()
        return self.students.update(
            student_id, lambda s: exam_notifications.apply_notification_sent(s, today)
        )

    def send_exam_reminder(self, student_id: str) -> bool:
        """Send a reminder if the gate allows it. Returns True when sent."""
        student = self.students.get(student_id)
        if student is None:
            logger.warning("Student %s not found; reminder skipped", student_id)
            return False
        if not self.can_notify(student):
            return False

        self._deliver(student, exam_notifications.build_reminder(student, self.today()))
        self.mark_notification_sent(student_id)
        logger.info("Exam reminder sent: student=%s exam=%s", student_id, student.next_exam_date)
        return True

    def send_exam_reminders(self) -> int:
        sent = 0
        for student in self.students.list_active():
            if self.send_exam_reminder(student.id):
                sent += 1
        return sent

    def _deliver(self, student: Student, notification: Notification) -> None:
        if student.email and self.mailer is not None:
            notification.email_sent = bool(
                self.mailer(student.email, notification.title, notification.body)
            )
        self.notifications.add(notification)
