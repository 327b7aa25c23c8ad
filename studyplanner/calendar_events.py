"""Project courses, assignments, weekly classes and reminders onto a calendar.

``project_events`` is the single entry point. It never reads the clock: the
caller supplies the days that are visible (usually a month) and only the weekly
schedule is expanded over those days.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

from .models import Assignment, CalendarEvent, Course, Reminder, ScheduleEntry

DEFAULT_COLOR = "#6B7280"
DEFAULT_CLASS_TITLE = "Class"

REMINDER_COLORS: Dict[str, str] = {
    "assignment": "#EF4444",
    "exam": "#F59E0B",
}
DEFAULT_REMINDER_COLOR = "#10B981"

DayLike = Union[date, datetime]


def _as_day(value: DayLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def sunday_based_weekday(day: date) -> int:
    """Weekday number with 0 = Sunday .. 6 = Saturday."""

    return day.isoweekday() % 7


def parse_wall_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def _course_color(course: Optional[Course]) -> str:
    if course is None or not course.color:
        return DEFAULT_COLOR
    return course.color


def assignment_event(assignment: Assignment, course: Optional[Course]) -> CalendarEvent:
    return CalendarEvent(
        id=f"assignment-{assignment.id}",
        title=assignment.title,
        start=assignment.due_date,
        end=assignment.due_date,
        type="assignment",
        course_id=assignment.course_id,
        color=_course_color(course),
    )


def expand_schedule_entry(
    entry: ScheduleEntry,
    course: Optional[Course],
    window_days: Iterable[DayLike],
) -> Iterator[CalendarEvent]:
    """Yield one class occurrence per window day that falls on the entry's weekday."""

    start_time = parse_wall_time(entry.start_time)
    end_time = parse_wall_time(entry.end_time)
    title = course.name if course is not None else DEFAULT_CLASS_TITLE
    color = _course_color(course)
    for value in window_days:
        day = _as_day(value)
        if sunday_based_weekday(day) != entry.day_of_week:
            continue
        yield CalendarEvent(
            id=f"schedule-{entry.id}-{day.isoformat()}",
            title=title,
            start=datetime.combine(day, start_time),
            end=datetime.combine(day, end_time),
            type="class",
            course_id=entry.course_id,
            color=color,
        )


def reminder_event(reminder: Reminder) -> CalendarEvent:
    # The event type is always "event"; the reminder type only picks the color.
    return CalendarEvent(
        id=f"reminder-{reminder.id}",
        title=reminder.title,
        start=reminder.date,
        end=reminder.date,
        type="event",
        color=REMINDER_COLORS.get(reminder.type, DEFAULT_REMINDER_COLOR),
    )


def project_events(
    courses: Iterable[Course],
    assignments: Iterable[Assignment],
    schedule_entries: Iterable[ScheduleEntry],
    reminders: Iterable[Reminder],
    window_days: Sequence[DayLike],
) -> List[CalendarEvent]:
    """Merge all time-based records into one list of calendar events.

    Assignments and reminders are not filtered to the window; schedule entries
    are expanded only over ``window_days``. Unknown course ids fall back to a
    gray color (and the title "Class" for schedule occurrences).
    """

    by_id = {course.id: course for course in courses}
    days = list(window_days)
    events: List[CalendarEvent] = []

    for assignment in assignments:
        events.append(assignment_event(assignment, by_id.get(assignment.course_id)))

    for entry in schedule_entries:
        events.extend(expand_schedule_entry(entry, by_id.get(entry.course_id), days))

    for reminder in reminders:
        events.append(reminder_event(reminder))

    return events


__all__ = [
    "DEFAULT_COLOR",
    "assignment_event",
    "expand_schedule_entry",
    "parse_wall_time",
    "project_events",
    "reminder_event",
    "sunday_based_weekday",
]
