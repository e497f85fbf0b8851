"""Semester eligibility by year of study."""

from __future__ import annotations

from typing import Any

from credit_portal.core.models import YearOfStudy

_SEMESTERS_BY_YEAR: dict[YearOfStudy, tuple[int, ...]] = {
    YearOfStudy.FIRST: (1, 2),
    YearOfStudy.SECOND: (1, 2, 3, 4),
    YearOfStudy.THIRD: (1, 2, 3, 4, 5, 6),
    YearOfStudy.FOURTH: (1, 2, 3, 4, 5, 6, 7, 8),
}


def accessible_semesters(year_of_study: Any) -> list[int]:
    """Return the semesters a student in the given year may view or edit.

    Args:
        year_of_study: A YearOfStudy member or its string value

    Returns:
        Ordered list of semester numbers; empty for unrecognized values
    """
    year = YearOfStudy.parse(year_of_study)
    if year is None:
        return []
    return list(_SEMESTERS_BY_YEAR[year])


def can_access(year_of_study: Any, semester: int) -> bool:
    """Check whether the semester is within the year's accessible set."""
    return semester in accessible_semesters(year_of_study)
