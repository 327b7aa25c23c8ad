"""Grade aggregation: per-course weighted percentages and credit-weighted GPA."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List

from .models import Course, CourseGPA, GPACalculation, Grade
from .scale import percentage_to_gpa, percentage_to_letter_grade


def round_half_up(value: float, digits: int = 2) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def group_grades_by_course(
    grades: Iterable[Grade],
    courses: Iterable[Course],
) -> Dict[str, List[Grade]]:
    """Group usable grades per course id, in order of first appearance.

    Grades pointing at an unknown course, and grades without a positive
    ``max_points``, are dropped.
    """

    known_ids = {course.id for course in courses}
    grouped: Dict[str, List[Grade]] = {}
    for grade in grades:
        if grade.course_id not in known_ids:
            continue
        if grade.max_points <= 0:
            continue
        grouped.setdefault(grade.course_id, []).append(grade)
    return grouped


def course_percentage(grades: Iterable[Grade]) -> float:
    """Weighted percentage of a course's grades, normalised by the total weight.

    Weights do not have to add up to one. Scores above ``max_points`` are not
    capped, so extra credit can push the result past 100.
    """

    weighted_sum = 0.0
    total_weight = 0.0
    for grade in grades:
        weighted_sum += (grade.grade / grade.max_points) * grade.weight
        total_weight += grade.weight
    if total_weight == 0:
        return 0.0
    return weighted_sum / total_weight * 100


def compute_gpa(grades: Iterable[Grade], courses: Iterable[Course]) -> GPACalculation:
    """Compute per-course and overall GPA figures.

    Malformed data never raises: orphaned grades and grades with non-positive
    ``max_points`` are skipped, a zero total weight yields a 0% course. Only
    courses with at least one usable grade appear in ``courses``.
    """

    course_list = list(courses)
    by_id = {course.id: course for course in course_list}
    grouped = group_grades_by_course(grades, course_list)

    course_results: List[CourseGPA] = []
    total_points = 0.0
    total_credits = 0
    for course_id, course_grades in grouped.items():
        percentage = course_percentage(course_grades)
        gpa = percentage_to_gpa(percentage)
        course_results.append(
            CourseGPA(
                course_id=course_id,
                gpa=gpa,
                letter_grade=percentage_to_letter_grade(percentage),
                percentage=percentage,
            )
        )
        credits = by_id[course_id].credits
        total_points += gpa * credits
        total_credits += credits

    overall = total_points / total_credits if total_credits > 0 else 0.0
    overall = round_half_up(overall)

    # Single-semester assumption: semester GPA currently equals the overall GPA.
    return GPACalculation(overall=overall, semester=overall, courses=course_results)


__all__ = [
    "compute_gpa",
    "course_percentage",
    "group_grades_by_course",
    "round_half_up",
]
