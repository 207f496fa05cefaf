"""Tests for eligibility.py — attendance gate, scheduling horizon, overdue list."""

from datetime import date

import pytest

from eligibility import (
    check_opens_on,
    effective_exam_date,
    is_exam_enabled,
    overdue_students,
    refresh_derived_fields,
    students_eligible_for_exam,
    within_scheduling_horizon,
)
from exam_results import apply_exam_result
from exam_settings import ExamSettings
from grade_ladder import get_grade


def _attendance(attend, student_id, present, absent, start_day=1):
    """``present`` attended and ``absent`` missed normal sessions in June 2024."""
    records = []
    day = start_day
    for i in range(present + absent):
        records.append(attend(student_id, date(2024, 6, day), present=i < present))
        day += 1
    return records


class TestIsExamEnabled:
    def test_too_early_regardless_of_attendance(self, make_student, attend, today):
        # next exam 2024-09-01, check opens 2024-07-01
        student = make_student(join_date=date(2024, 3, 1))
        records = [attend("s1", date(2024, 6, 1), session_type="international_course")]
        assert check_opens_on(date(2024, 9, 1), ExamSettings()) == date(2024, 7, 1)
        assert is_exam_enabled(student, records, ExamSettings(), today) is False

    def test_window_open_and_attendance_met(self, make_student, attend, today):
        student = make_student(join_date=date(2024, 1, 1))  # exam 2024-07-01
        records = _attendance(attend, "s1", present=3, absent=2)
        assert is_exam_enabled(student, records, ExamSettings(), today) is True

    def test_threshold_is_inclusive(self, make_student, attend, today):
        student = make_student(join_date=date(2024, 1, 1))
        records = _attendance(attend, "s1", present=2, absent=2)
        assert is_exam_enabled(student, records, ExamSettings(), today) is True

    def test_attendance_below_threshold(self, make_student, attend, today):
        student = make_student(join_date=date(2024, 1, 1))
        records = _attendance(attend, "s1", present=2, absent=3)
        assert is_exam_enabled(student, records, ExamSettings(), today) is False

    def test_no_attendance_at_all(self, make_student, today):
        student = make_student(join_date=date(2024, 1, 1))
        assert is_exam_enabled(student, [], ExamSettings(), today) is False

    def test_not_computable_date(self, make_student, attend, today):
        student = make_student(join_date=None)
        records = _attendance(attend, "s1", present=5, absent=0)
        assert is_exam_enabled(student, records, ExamSettings(), today) is False

    def test_settings_override(self, make_student, attend, today):
        student = make_student(join_date=date(2024, 1, 1))
        records = _attendance(attend, "s1", present=3, absent=2)  # 60%
        stricter = ExamSettings().with_overrides(minAttendancePercentage=70)
        assert is_exam_enabled(student, records, stricter, today) is False

    def test_longer_check_window_opens_earlier(self, make_student, attend, today):
        student = make_student(join_date=date(2024, 3, 1))  # exam 2024-09-01
        records = _attendance(attend, "s1", present=5, absent=0)
        settings = ExamSettings(attendance_check_months=3)
        assert is_exam_enabled(student, records, settings, today) is True


class TestSchedulingHorizon:
    @pytest.mark.parametrize("exam_date,expected", [
        (date(2024, 6, 15), True),    # exam today
        (date(2024, 7, 15), True),    # exactly one month out
        (date(2024, 7, 16), False),
        (date(2024, 6, 14), False),   # already past
    ])
    def test_window(self, today, exam_date, expected):
        assert within_scheduling_horizon(exam_date, today) is expected


class TestStudentsEligibleForExam:
    def _setup(self, make_student, attend):
        students = [
            make_student("due", join_date=date(2024, 1, 1)),        # exam 2024-07-01
            make_student("later", join_date=date(2024, 2, 10)),     # exam 2024-08-10
            make_student("past", join_date=date(2023, 12, 1)),      # exam 2024-06-01
            make_student("inactive", join_date=date(2024, 1, 1), active=False),
            make_student("lazy", join_date=date(2024, 1, 1)),
        ]
        records = []
        for sid in ("due", "later", "past", "inactive"):
            records += _attendance(attend, sid, present=4, absent=0)
        records += _attendance(attend, "lazy", present=1, absent=4)
        return students, records

    def test_filters(self, make_student, attend, today):
        students, records = self._setup(make_student, attend)

        def records_for(sid):
            return [r for r in records if r.student_id == sid]

        eligible = students_eligible_for_exam(students, records_for, ExamSettings(), today)
        assert [s.id for s in eligible] == ["due"]

    def test_enabled_outside_horizon_is_excluded(self, make_student, attend, today):
        students, records = self._setup(make_student, attend)
        later = students[1]
        later_records = [r for r in records if r.student_id == "later"]
        assert is_exam_enabled(later, later_records, ExamSettings(), today) is True
        assert students_eligible_for_exam([later], lambda sid: later_records, ExamSettings(), today) == []


class TestOverdueStudents:
    def test_past_exam_dates(self, make_student, today):
        students = [
            make_student("past", join_date=date(2023, 12, 1)),
            make_student("future", join_date=date(2024, 1, 1)),
            make_student("gone", join_date=date(2023, 1, 1), active=False),
            make_student("unknown", join_date=None),
        ]
        assert [s.id for s in overdue_students(students, today)] == ["past"]

    def test_pending_retake_uses_stored_date(self, make_student, today):
        student = make_student(
            join_date=date(2023, 12, 1), retake_pending=True, next_exam_date=date(2024, 7, 1),
        )
        assert effective_exam_date(student) == date(2024, 7, 1)
        assert overdue_students([student], today) == []


class TestRefreshDerivedFields:
    def test_populates_fresh_record(self, make_student, attend, today):
        student = make_student(join_date=date(2024, 1, 1))
        assert student.next_exam_date is None
        refresh_derived_fields(student, _attendance(attend, "s1", 3, 1), ExamSettings(), today)
        assert student.next_exam_date == date(2024, 7, 1)
        assert student.exam_enabled is True

    def test_revokes_forced_flag_when_attendance_is_short(self, make_student, attend, today):
        student = make_student(
            join_date=date(2024, 1, 1), exam_enabled=True,
            retake_pending=True, next_exam_date=date(2024, 7, 10),
        )
        refresh_derived_fields(student, _attendance(attend, "s1", 1, 4), ExamSettings(), today)
        assert student.next_exam_date == date(2024, 7, 10)
        assert student.exam_enabled is False


class TestAfterFailedExam:
    def _fail(self, student, today):
        apply_exam_result(student, get_grade("adult_5_kyu"), "Sensei", False, ExamSettings(), today)
        return student

    def test_failed_student_is_listed_for_retake(self, make_student, attend, today):
        # computed exam date 2024-06-01, failed on 2024-06-15
        student = self._fail(make_student(join_date=date(2023, 12, 1)), today)
        records = _attendance(attend, "s1", present=5, absent=0)

        assert effective_exam_date(student) == date(2024, 7, 15)
        eligible = students_eligible_for_exam([student], lambda sid: records, ExamSettings(), today)
        assert [s.id for s in eligible] == ["s1"]
        assert overdue_students([student], today) == []

    def test_refresh_after_early_fail_keeps_eligibility(self, make_student, attend, today):
        # computed exam date 2024-12-01, so that window has not opened yet
        student = self._fail(make_student(join_date=date(2024, 6, 1)), today)
        records = _attendance(attend, "s1", present=5, absent=0)

        refresh_derived_fields(student, records, ExamSettings(), today)
        assert student.next_exam_date == date(2024, 7, 15)
        assert student.exam_enabled is True
        assert is_exam_enabled(student, records, ExamSettings(), today) is True

    def test_pass_returns_to_computed_date(self, make_student, attend, today):
        student = self._fail(make_student(join_date=date(2024, 6, 1)), today)
        apply_exam_result(student, get_grade("adult_5_kyu"), "Sensei", True, ExamSettings(), today)
        assert student.retake_pending is False
        assert effective_exam_date(student) == date(2024, 12, 15)
