"""Tests for attendance.py — weighted attendance percentage."""

from datetime import date

import pytest

from attendance import (
    AttendanceRecord,
    attendance_percentage,
    session_weight,
    window_start,
)


class TestSessionWeight:
    @pytest.mark.parametrize("session_type,expected", [
        ("normal", 1),
        ("special", 2),
        ("national_course", 3),
        ("international_course", 6),
        ("unknown_type", 1),
    ])
    def test_defaults(self, attend, session_type, expected):
        assert session_weight(attend("s1", date(2024, 6, 1), session_type=session_type)) == expected

    def test_explicit_value_wins(self, attend):
        record = attend("s1", date(2024, 6, 1), session_type="international_course", value=1.5)
        assert session_weight(record) == 1.5

    def test_custom_weights(self, attend):
        record = attend("s1", date(2024, 6, 1), session_type="special")
        assert session_weight(record, {"special": 4}) == 4


class TestAttendancePercentage:
    def test_no_records_is_zero(self, today):
        assert attendance_percentage([], 2, today) == 0

    def test_only_records_outside_window_is_zero(self, attend, today):
        records = [attend("s1", date(2024, 4, 14)), attend("s1", date(2023, 12, 1))]
        assert attendance_percentage(records, 2, today) == 0

    def test_window_start_is_inclusive(self, attend, today):
        assert window_start(today, 2) == date(2024, 4, 15)
        assert attendance_percentage([attend("s1", date(2024, 4, 15))], 2, today) == 100

    def test_plain_ratio(self, attend, today):
        records = [
            attend("s1", date(2024, 6, 1)),
            attend("s1", date(2024, 6, 3)),
            attend("s1", date(2024, 6, 5), present=False),
            attend("s1", date(2024, 6, 7), present=False),
        ]
        assert attendance_percentage(records, 2, today) == 50

    def test_rounds_down_below_half(self, attend, today):
        records = [attend("s1", date(2024, 6, d), present=(d == 1)) for d in (1, 2, 3)]
        assert attendance_percentage(records, 2, today) == 33

    def test_rounds_half_up(self, attend, today):
        # 1 / 8 = 12.5%
        records = [attend("s1", date(2024, 6, d), present=(d == 1)) for d in range(1, 9)]
        assert attendance_percentage(records, 2, today) == 13

    def test_course_credit_is_clamped(self, attend, today):
        records = [
            attend("s1", date(2024, 5, 1), session_type="international_course"),
            attend("s1", date(2024, 6, 1), session_type="international_course"),
        ]
        assert attendance_percentage(records, 2, today) == 100

    def test_weighted_numerator_unweighted_denominator(self, attend, today):
        records = [
            attend("s1", date(2024, 6, 1), session_type="special"),
            attend("s1", date(2024, 6, 2), present=False),
            attend("s1", date(2024, 6, 3), present=False),
            attend("s1", date(2024, 6, 4), present=False),
        ]
        # 2 credits over 4 sessions
        assert attendance_percentage(records, 2, today) == 50

    def test_absent_course_earns_nothing(self, attend, today):
        records = [
            attend("s1", date(2024, 6, 1)),
            attend("s1", date(2024, 6, 2), present=False, session_type="international_course"),
        ]
        assert attendance_percentage(records, 2, today) == 50

    def test_custom_weights_applied(self, attend, today):
        records = [attend("s1", date(2024, 6, 1), session_type="special")]
        records += [attend("s1", date(2024, 6, d), present=False) for d in (2, 3, 4)]
        assert attendance_percentage(records, 2, today, {"special": 4}) == 100

    def test_longer_window_includes_older_records(self, attend, today):
        records = [
            attend("s1", date(2024, 2, 1), present=False),
            attend("s1", date(2024, 6, 1)),
        ]
        assert attendance_percentage(records, 2, today) == 100
        assert attendance_percentage(records, 6, today) == 50


class TestAttendanceRecordSerialization:
    def test_field_names(self, attend):
        d = attend("s1", date(2024, 6, 1), session_type="special").to_dict()
        assert d["studentId"] == "s1"
        assert d["sessionType"] == "special"
        assert d["attendanceValue"] is None
        assert d["date"] == "2024-06-01"

    def test_from_dict_tolerates_missing_optional_fields(self):
        record = AttendanceRecord.from_dict({"studentId": "s2", "date": "2024-06-01T10:00:00", "present": True})
        assert record.session_type == "normal"
        assert record.attendance_value is None
        assert record.date == date(2024, 6, 1)
