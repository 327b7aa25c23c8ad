"""Views derived from the planner data: dashboard, grade overview, weekly schedule.

Everything here is a read-only helper on top of :mod:`studyplanner.grades` and
:mod:`studyplanner.calendar_events`. Functions that depend on "now" accept it
as an argument so they stay deterministic in tests.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .calendar_events import parse_wall_time, sunday_based_weekday
from .grades import compute_gpa
from .models import Assignment, CalendarEvent, Course, GPACalculation, Grade, ScheduleEntry

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DAY_ABBREVIATIONS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

COURSE_PALETTE = [
    "#3B82F6",
    "#8B5CF6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#6366F1",
    "#EC4899",
    "#14B8A6",
    "#F97316",
    "#84CC16",
]

NO_GRADE_LETTER = "N/A"
UPCOMING_LIMIT = 5


def month_window(year: int, month: int) -> List[date]:
    """All days of a month, in calendar order."""

    _, last_day = calendar.monthrange(year, month)
    return [date(year, month, day) for day in range(1, last_day + 1)]


def week_window(day: date) -> List[date]:
    """The seven days of the Sunday-started week that contains ``day``."""

    start = day - timedelta(days=sunday_based_weekday(day))
    return [start + timedelta(days=offset) for offset in range(7)]


def events_for_day(events: Iterable[CalendarEvent], day: date) -> List[CalendarEvent]:
    matches = [event for event in events if event.start.date() == day]
    return sorted(matches, key=lambda event: event.start)


def format_time(value: str) -> str:
    """Render ``"HH:MM"`` as a 12-hour clock label, e.g. ``"2:05 PM"``."""

    parsed = parse_wall_time(value)
    period = "PM" if parsed.hour >= 12 else "AM"
    display_hour = parsed.hour % 12 or 12
    return f"{display_hour}:{parsed.minute:02d} {period}"


def day_name(day_of_week: int) -> str:
    return DAY_NAMES[day_of_week]


def day_abbreviation(day_of_week: int) -> str:
    return DAY_ABBREVIATIONS[day_of_week]


def color_from_string(text: str) -> str:
    """Pick a stable palette color for a course name."""

    value = 0
    for char in text:
        # Wrap like a signed 32-bit integer.
        value = (ord(char) + ((value << 5) - value)) & 0xFFFFFFFF
        if value >= 0x80000000:
            value -= 0x100000000
    return COURSE_PALETTE[abs(value) % len(COURSE_PALETTE)]


def is_overdue(moment: datetime, now: Optional[datetime] = None) -> bool:
    return moment < (now or datetime.now())


def days_until(moment: datetime | date, today: Optional[date] = None) -> int:
    """Number of calendar days from ``today`` until ``moment`` (negative when past)."""

    target = moment.date() if isinstance(moment, datetime) else moment
    return (target - (today or date.today())).days


def upcoming_assignments(
    assignments: Iterable[Assignment],
    now: Optional[datetime] = None,
    limit: int = UPCOMING_LIMIT,
) -> List[Assignment]:
    now = now or datetime.now()
    pending = [
        assignment
        for assignment in assignments
        if assignment.status != "completed" and not is_overdue(assignment.due_date, now)
    ]
    pending.sort(key=lambda assignment: assignment.due_date)
    return pending[:limit]


def overdue_assignments(
    assignments: Iterable[Assignment],
    now: Optional[datetime] = None,
) -> List[Assignment]:
    now = now or datetime.now()
    return [
        assignment
        for assignment in assignments
        if assignment.status != "completed" and is_overdue(assignment.due_date, now)
    ]


def schedule_for_day(entries: Iterable[ScheduleEntry], day_of_week: int) -> List[ScheduleEntry]:
    matches = [entry for entry in entries if entry.day_of_week == day_of_week]
    return sorted(matches, key=lambda entry: entry.start_time)


def _hours(entry: ScheduleEntry) -> float:
    start = parse_wall_time(entry.start_time)
    end = parse_wall_time(entry.end_time)
    return (end.hour + end.minute / 60) - (start.hour + start.minute / 60)


def schedule_stats(entries: Iterable[ScheduleEntry]) -> Dict[str, Any]:
    entry_list = list(entries)
    locations = {entry.location for entry in entry_list if entry.location}
    return {
        "totalClasses": len(entry_list),
        "hoursPerWeek": round(sum(_hours(entry) for entry in entry_list), 1),
        "uniqueLocations": len(locations),
    }


def course_grade_summaries(
    grades: Iterable[Grade],
    courses: Iterable[Course],
    calculation: Optional[GPACalculation] = None,
) -> List[Dict[str, Any]]:
    """One entry per course with its grades, GPA and letter grade.

    Courses without usable grades are listed with GPA 0 and letter ``"N/A"``.
    """

    grade_list = list(grades)
    course_list = list(courses)
    if calculation is None:
        calculation = compute_gpa(grade_list, course_list)
    results = {item.course_id: item for item in calculation.courses}

    summaries: List[Dict[str, Any]] = []
    for course in course_list:
        result = results.get(course.id)
        summaries.append(
            {
                "course": course,
                "grades": [grade for grade in grade_list if grade.course_id == course.id],
                "gpa": result.gpa if result else 0.0,
                "letterGrade": result.letter_grade if result else NO_GRADE_LETTER,
                "percentage": result.percentage if result else None,
            }
        )
    return summaries


def dashboard_summary(
    courses: Iterable[Course],
    grades: Iterable[Grade],
    assignments: Iterable[Assignment],
    schedule_entries: Iterable[ScheduleEntry],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now()
    course_list = list(courses)
    assignment_list = list(assignments)
    calculation = compute_gpa(grades, course_list)
    return {
        "overallGpa": calculation.overall,
        "activeCourses": len(course_list),
        "pendingAssignments": sum(1 for a in assignment_list if a.status == "pending"),
        "completedAssignments": sum(1 for a in assignment_list if a.status == "completed"),
        "upcoming": upcoming_assignments(assignment_list, now),
        "overdue": overdue_assignments(assignment_list, now),
        "todaySchedule": schedule_for_day(schedule_entries, sunday_based_weekday(now.date())),
    }


__all__ = [
    "color_from_string",
    "course_grade_summaries",
    "dashboard_summary",
    "day_abbreviation",
    "day_name",
    "days_until",
    "events_for_day",
    "format_time",
    "is_overdue",
    "month_window",
    "overdue_assignments",
    "schedule_for_day",
    "schedule_stats",
    "upcoming_assignments",
    "week_window",
]
