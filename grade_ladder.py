"""
Grade Ladder — static rank catalogue for children and adults.

Each rank carries its belt colour, its position on the ladder, its kyu/dan
number and the attendance/tenure requirements used for exam scheduling.
The exam interval of a rank is its minimum tenure in months.
"""

from __future__ import annotations

from dataclasses import dataclass

CHILD = "child"
ADULT = "adult"
CATEGORIES = (CHILD, ADULT)


@dataclass(frozen=True)
class Grade:
    id: str                 # "adult_3_kyu"
    name: str               # "3rd Kyu"
    belt_color: str
    order: int              # 1-based position within its category
    category: str           # "child"|"adult"
    kyu: int = 0            # 0 for dan ranks
    dan: int = 0            # 0 for kyu ranks
    min_attendance: int = 0
    min_months: int = 0

    @property
    def exam_interval(self) -> int:
        return self.min_months

    @property
    def is_dan(self) -> bool:
        return self.dan > 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "beltColor": self.belt_color,
            "order": self.order,
            "category": self.category,
            "kyu": self.kyu,
            "dan": self.dan,
            "examInterval": self.exam_interval,
            "requirements": {
                "minAttendance": self.min_attendance,
                "minMonths": self.min_months,
            },
        }


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _kyu(category: str, order: int, kyu: int, belt: str,
         min_attendance: int, min_months: int) -> Grade:
    return Grade(
        id=f"{category}_{kyu}_kyu",
        name=f"{_ordinal(kyu)} Kyu",
        belt_color=belt,
        order=order,
        category=category,
        kyu=kyu,
        min_attendance=min_attendance,
        min_months=min_months,
    )


def _dan(category: str, order: int, dan: int,
         min_attendance: int, min_months: int) -> Grade:
    return Grade(
        id=f"{category}_{dan}_dan",
        name=f"{_ordinal(dan)} Dan",
        belt_color="Black",
        order=order,
        category=category,
        dan=dan,
        min_attendance=min_attendance,
        min_months=min_months,
    )


# ── Ladders ────────────────────────────────────────────────────────────

CHILD_GRADES: tuple[Grade, ...] = (
    _kyu(CHILD, 1, 10, "White", 30, 4),
    _kyu(CHILD, 2, 9, "Yellow", 35, 4),
    _kyu(CHILD, 3, 8, "Yellow-Orange", 40, 4),
    _kyu(CHILD, 4, 7, "Orange", 45, 5),
    _kyu(CHILD, 5, 6, "Orange-Green", 50, 5),
    _kyu(CHILD, 6, 5, "Green", 55, 6),
    _kyu(CHILD, 7, 4, "Green-Blue", 60, 6),
    _kyu(CHILD, 8, 3, "Blue", 65, 7),
    _kyu(CHILD, 9, 2, "Blue-Brown", 70, 7),
    _kyu(CHILD, 10, 1, "Brown", 80, 8),
    # Junior black belt: still a kyu-level rank, the last step before 1st dan
    Grade(
        id="child_1_kyu_1_dan",
        name="1st Kyu-1st Dan",
        belt_color="Brown-Black",
        order=11,
        category=CHILD,
        kyu=1,
        min_attendance=90,
        min_months=10,
    ),
    _dan(CHILD, 12, 1, 100, 12),
)

ADULT_GRADES: tuple[Grade, ...] = (
    _kyu(ADULT, 1, 6, "White", 40, 6),
    _kyu(ADULT, 2, 5, "Yellow", 50, 6),
    _kyu(ADULT, 3, 4, "Orange", 60, 8),
    _kyu(ADULT, 4, 3, "Green", 70, 8),
    _kyu(ADULT, 5, 2, "Blue", 80, 10),
    _kyu(ADULT, 6, 1, "Brown", 100, 12),
    _dan(ADULT, 7, 1, 120, 18),
    _dan(ADULT, 8, 2, 140, 24),
    _dan(ADULT, 9, 3, 160, 36),
    _dan(ADULT, 10, 4, 180, 48),
    _dan(ADULT, 11, 5, 200, 60),
    _dan(ADULT, 12, 6, 220, 72),
    _dan(ADULT, 13, 7, 240, 84),
    _dan(ADULT, 14, 8, 260, 96),
    _dan(ADULT, 15, 9, 280, 120),
)

_BY_ID: dict[str, Grade] = {g.id: g for g in CHILD_GRADES + ADULT_GRADES}


def grades_for(category: str) -> tuple[Grade, ...]:
    """Return the ordered ladder for a category (adult ladder for anything but "child")."""
    return CHILD_GRADES if category == CHILD else ADULT_GRADES


def get_grade(grade_id: str | None) -> Grade | None:
    if not grade_id:
        return None
    return _BY_ID.get(grade_id)


def next_grade(current: Grade | None, category: str) -> Grade | None:
    """Return the rank that follows ``current`` on the category ladder.

    The current rank is located by its identifier rather than by object
    identity, so grades rebuilt from stored records still match. Returns
    None when the rank is not on the ladder or is already the terminal rank.
    """
    if current is None:
        return None
    ladder = grades_for(category)
    for index, grade in enumerate(ladder):
        if grade.id == current.id:
            if index + 1 < len(ladder):
                return ladder[index + 1]
            return None
    return None
