"""Percentage to grade-point and letter-grade lookups.

Both lookups read the same tier table so the two scales can never drift apart.
"""

from __future__ import annotations

from typing import Final, List, Tuple

# (inclusive lower bound in percent, grade points, letter grade), highest first.
GRADE_SCALE: Final[List[Tuple[float, float, str]]] = [
    (97, 4.0, "A+"),
    (93, 3.7, "A"),
    (90, 3.3, "A-"),
    (87, 3.0, "B+"),
    (83, 2.7, "B"),
    (80, 2.3, "B-"),
    (77, 2.0, "C+"),
    (73, 1.7, "C"),
    (70, 1.3, "C-"),
    (67, 1.0, "D+"),
    (65, 0.7, "D"),
]

FAILING_GPA: Final = 0.0
FAILING_LETTER: Final = "F"


def _tier(percentage: float) -> Tuple[float, str]:
    for lower_bound, points, letter in GRADE_SCALE:
        if percentage >= lower_bound:
            return points, letter
    return FAILING_GPA, FAILING_LETTER


def percentage_to_gpa(percentage: float) -> float:
    """Map a course percentage (0-100, unbounded above) to grade points."""

    return _tier(percentage)[0]


def percentage_to_letter_grade(percentage: float) -> str:
    """Map a course percentage (0-100, unbounded above) to a letter grade."""

    return _tier(percentage)[1]


__all__ = [
    "GRADE_SCALE",
    "percentage_to_gpa",
    "percentage_to_letter_grade",
]
