from datetime import date, datetime

from studyplanner.agenda import month_window
from studyplanner.calendar_events import DEFAULT_COLOR, project_events, sunday_based_weekday
from studyplanner.models import Assignment, Course, Reminder, ScheduleEntry

OCTOBER_2024 = month_window(2024, 10)


def _course() -> Course:
    return Course(id="cs", name="Intro to CS", code="CS 101", credits=3, color="#3B82F6", semester="Fall 2024")


def _entry(entry_id: str = "s1", course_id: str = "cs", day_of_week: int = 1) -> ScheduleEntry:
    return ScheduleEntry(
        id=entry_id,
        course_id=course_id,
        day_of_week=day_of_week,
        start_time="09:00",
        end_time="10:30",
        location="Room 101",
        type="lecture",
    )


def _assignment(course_id: str = "cs", due: datetime = datetime(2024, 12, 15, 23, 59)) -> Assignment:
    return Assignment(
        id="a1",
        course_id=course_id,
        title="Final Project",
        due_date=due,
        priority="high",
        status="in-progress",
        category="project",
    )


def _reminder(reminder_id: str, reminder_type: str) -> Reminder:
    return Reminder(
        id=reminder_id,
        title=f"Reminder {reminder_id}",
        date=datetime(2024, 10, 10, 8, 0),
        type=reminder_type,
    )


def test_sunday_based_weekday():
    assert sunday_based_weekday(date(2024, 10, 6)) == 0  # Sunday
    assert sunday_based_weekday(date(2024, 10, 7)) == 1  # Monday
    assert sunday_based_weekday(date(2024, 10, 12)) == 6  # Saturday


def test_monday_entry_occurs_on_every_monday_only():
    events = project_events([_course()], [], [_entry(day_of_week=1)], [], OCTOBER_2024)

    assert [event.start.date() for event in events] == [
        date(2024, 10, 7),
        date(2024, 10, 14),
        date(2024, 10, 21),
        date(2024, 10, 28),
    ]
    first = events[0]
    assert first.id == "schedule-s1-2024-10-07"
    assert first.type == "class"
    assert first.title == "Intro to CS"
    assert first.color == "#3B82F6"
    assert first.course_id == "cs"
    assert first.start == datetime(2024, 10, 7, 9, 0)
    assert first.end == datetime(2024, 10, 7, 10, 30)


def test_occurrences_follow_window_order():
    window = list(reversed(OCTOBER_2024))
    events = project_events([_course()], [], [_entry(day_of_week=3)], [], window)

    days = [event.start.day for event in events]
    assert days == [30, 23, 16, 9, 2]


def test_datetime_window_days_are_accepted():
    window = [datetime(2024, 10, 7, 15, 30)]
    events = project_events([_course()], [], [_entry(day_of_week=1)], [], window)

    assert len(events) == 1
    assert events[0].start == datetime(2024, 10, 7, 9, 0)


def test_assignments_and_reminders_are_not_window_filtered():
    events = project_events(
        [_course()],
        [_assignment(due=datetime(2025, 3, 1, 12, 0))],
        [],
        [_reminder("r1", "personal")],
        [date(2024, 10, 7)],
    )

    assignment_event, reminder_event = events
    assert assignment_event.id == "assignment-a1"
    assert assignment_event.type == "assignment"
    assert assignment_event.start == assignment_event.end == datetime(2025, 3, 1, 12, 0)
    assert assignment_event.color == "#3B82F6"
    assert reminder_event.id == "reminder-r1"
    assert reminder_event.type == "event"
    assert reminder_event.course_id is None


def test_reminder_colors_by_type():
    reminders = [
        _reminder("r1", "assignment"),
        _reminder("r2", "exam"),
        _reminder("r3", "event"),
        _reminder("r4", "personal"),
    ]

    events = project_events([], [], [], reminders, [])

    assert [event.color for event in events] == ["#EF4444", "#F59E0B", "#10B981", "#10B981"]
    assert {event.type for event in events} == {"event"}


def test_unknown_course_falls_back_to_defaults():
    events = project_events(
        [],
        [_assignment(course_id="gone")],
        [_entry(course_id="gone", day_of_week=1)],
        [],
        [date(2024, 10, 7)],
    )

    assignment_event, class_event = events
    assert assignment_event.color == DEFAULT_COLOR
    assert assignment_event.course_id == "gone"
    assert class_event.color == DEFAULT_COLOR
    assert class_event.title == "Class"


def test_output_groups_assignments_classes_then_reminders():
    events = project_events(
        [_course()],
        [_assignment()],
        [_entry(day_of_week=1)],
        [_reminder("r1", "exam")],
        [date(2024, 10, 7)],
    )

    assert [event.type for event in events] == ["assignment", "class", "event"]


def test_projection_is_deterministic():
    args = (
        [_course()],
        [_assignment()],
        [_entry("s1", day_of_week=1), _entry("s2", day_of_week=3)],
        [_reminder("r1", "exam")],
        OCTOBER_2024,
    )

    first = project_events(*args)
    second = project_events(*args)

    assert first == second
    assert [event.id for event in first] == [event.id for event in second]
    assert len({event.id for event in first}) == len(first)


def test_empty_window_yields_no_classes():
    events = project_events([_course()], [], [_entry(day_of_week=1)], [], [])
    assert events == []
