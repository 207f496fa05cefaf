"""
Exam settings — fees, attendance threshold and check window.

Defaults: exam fee 10, belt fee 5, minimum attendance 50%, attendance
checked over the 2 months before the exam. Any subset can be overridden.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from attendance import DEFAULT_SESSION_WEIGHTS

logger = logging.getLogger(__name__)

# camelCase keys used by stored settings and the HTTP surface
_ALIASES = {
    "examFee": "exam_fee",
    "beltFee": "belt_fee",
    "minAttendancePercentage": "min_attendance_percentage",
    "attendanceCheckMonths": "attendance_check_months",
    "attendanceValues": "attendance_values",
}

# Flask config keys
_CONFIG_KEYS = {
    "EXAM_FEE": "exam_fee",
    "BELT_FEE": "belt_fee",
    "MIN_ATTENDANCE_PERCENTAGE": "min_attendance_percentage",
    "ATTENDANCE_CHECK_MONTHS": "attendance_check_months",
    "ATTENDANCE_VALUES": "attendance_values",
}


@dataclass(frozen=True)
class ExamSettings:
    exam_fee: float = 10
    belt_fee: float = 5
    min_attendance_percentage: int = 50
    attendance_check_months: int = 2
    # not part of __hash__
    attendance_values: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_SESSION_WEIGHTS), hash=False
    )

    @property
    def total_fee(self) -> float:
        return self.exam_fee + self.belt_fee

    def to_dict(self) -> dict:
        return {
            "examFee": self.exam_fee,
            "beltFee": self.belt_fee,
            "minAttendancePercentage": self.min_attendance_percentage,
            "attendanceCheckMonths": self.attendance_check_months,
            "attendanceValues": dict(self.attendance_values),
        }

    def with_overrides(self, overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> "ExamSettings":
        """Return a copy with any subset of fields replaced.

        Accepts snake_case or camelCase keys. Unknown keys and values that
        cannot be coerced are skipped with a warning.
        """
        merged = dict(overrides or {})
        merged.update(kwargs)
        changes = {}
        for key, raw in merged.items():
            name = _ALIASES.get(key, key)
            if name not in _FIELD_TYPES or raw is None:
                continue
            try:
                changes[name] = _coerce(name, raw)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid exam setting %s=%r", key, raw)
        if not changes:
            return self
        return replace(self, **changes)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ExamSettings":
        """Build settings from a Flask config mapping."""
        values = {name: config[key] for key, name in _CONFIG_KEYS.items() if key in config}
        return cls().with_overrides(values)


_FIELD_TYPES = {f.name: f.type for f in fields(ExamSettings)}


def _coerce(name: str, raw: Any) -> Any:
    if name == "attendance_values":
        if not isinstance(raw, Mapping):
            raise TypeError("attendance_values must be a mapping")
        weights = dict(DEFAULT_SESSION_WEIGHTS)
        weights.update({str(k): float(v) for k, v in raw.items()})
        return weights
    if name in ("min_attendance_percentage", "attendance_check_months"):
        value = int(raw)
        if value < 0:
            raise ValueError(name)
        return value
    value = float(raw)
    if value < 0:
        raise ValueError(name)
    return value
