import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ValidationError

from .agenda import (
    course_grade_summaries,
    dashboard_summary,
    events_for_day,
    month_window,
    schedule_for_day,
    schedule_stats,
    week_window,
)
from .calendar_events import parse_wall_time, project_events
from .grades import compute_gpa
from .models import (
    Assignment,
    CalendarEvent,
    Course,
    GPACalculation,
    Grade,
    Reminder,
    ScheduleEntry,
    User,
)
from .sample_data import seed_requested, seed_sample_data
from .services.data_store import UnknownEntityError, data_store, merge_record
from .version import __version__

app = FastAPI(title="Study Planner API")

logger = logging.getLogger(__name__)

serve_frontend = os.getenv("SERVE_FRONTEND", "0").lower() in {
    "1",
    "true",
    "yes",
    "on",
}

# CORS for the local frontend dev server
if not serve_frontend:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

data_store.ensure_ready()


def _find_or_404(collection: str, entity_id: str) -> Any:
    try:
        return data_store.find(collection, entity_id)
    except UnknownEntityError:
        raise HTTPException(404, "Not found")


def _validation_error(exc: ValidationError) -> HTTPException:
    return HTTPException(
        422,
        exc.errors(include_url=False, include_context=False, include_input=False),
    )


def _merged_or_422(record: BaseModel, updates: Dict[str, Any]) -> Any:
    try:
        return merge_record(record, updates)
    except ValidationError as exc:
        raise _validation_error(exc)


def _require_course(course_id: str) -> None:
    if not any(course.id == course_id for course in data_store.get_courses()):
        raise HTTPException(400, f"Unknown course '{course_id}'")


def _check_course(course: Course) -> None:
    if course.credits <= 0:
        raise HTTPException(400, "Credits must be a positive number")
    if not course.name.strip():
        raise HTTPException(400, "Course name is required")


def _check_grade(grade: Grade) -> None:
    _require_course(grade.course_id)
    if grade.max_points <= 0:
        raise HTTPException(400, "maxPoints must be greater than zero")
    if grade.grade < 0:
        raise HTTPException(400, "Grade cannot be negative")
    if grade.weight < 0:
        raise HTTPException(400, "Weight cannot be negative")


def _check_assignment(assignment: Assignment) -> None:
    _require_course(assignment.course_id)


def _check_schedule_entry(entry: ScheduleEntry) -> None:
    _require_course(entry.course_id)
    if parse_wall_time(entry.start_time) >= parse_wall_time(entry.end_time):
        raise HTTPException(400, "startTime must be before endTime")


def _check_reminder(reminder: Reminder) -> None:
    if reminder.assignment_id and not any(
        assignment.id == reminder.assignment_id for assignment in data_store.get_assignments()
    ):
        raise HTTPException(400, f"Unknown assignment '{reminder.assignment_id}'")


def _create(collection: str, record: BaseModel, adder) -> Any:
    try:
        created = adder(record)
    except ValueError as exc:
        raise HTTPException(409, str(exc))
    logger.info("Created %s %s", collection, created.id)
    return created


def _window_or_400(build, *args) -> List[date]:
    try:
        return build(*args)
    except (ValueError, OverflowError):
        raise HTTPException(400, "Date out of range")


def _events_for(window_days: List[date]) -> List[CalendarEvent]:
    return project_events(
        data_store.get_courses(),
        data_store.get_assignments(),
        data_store.get_schedule_entries(),
        data_store.get_reminders(),
        window_days,
    )


@app.get("/api/courses", response_model=List[Course])
def list_courses():
    return data_store.get_courses()


@app.post("/api/courses", response_model=Course)
def create_course(course: Course):
    _check_course(course)
    return _create("courses", course, data_store.add_course)


@app.patch("/api/courses/{course_id}", response_model=Course)
def update_course(course_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _find_or_404("courses", course_id)
    _check_course(_merged_or_422(existing, payload))
    return data_store.update_course(course_id, payload)


@app.delete("/api/courses/{course_id}")
def delete_course(course_id: str):
    _find_or_404("courses", course_id)
    data_store.delete_course(course_id)
    return {"ok": True}


@app.get("/api/grades", response_model=List[Grade])
def list_grades(course_id: Optional[str] = Query(None, alias="courseId")):
    grades = data_store.get_grades()
    if course_id:
        grades = [grade for grade in grades if grade.course_id == course_id]
    return grades


@app.get("/api/grades/summary")
def get_grade_summary(course_id: Optional[str] = Query(None, alias="courseId")):
    summaries = course_grade_summaries(data_store.get_grades(), data_store.get_courses())
    if course_id:
        summaries = [item for item in summaries if item["course"].id == course_id]
    return summaries


@app.post("/api/grades", response_model=Grade)
def create_grade(grade: Grade):
    _check_grade(grade)
    return _create("grades", grade, data_store.add_grade)


@app.patch("/api/grades/{grade_id}", response_model=Grade)
def update_grade(grade_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _find_or_404("grades", grade_id)
    _check_grade(_merged_or_422(existing, payload))
    return data_store.update_grade(grade_id, payload)


@app.delete("/api/grades/{grade_id}")
def delete_grade(grade_id: str):
    _find_or_404("grades", grade_id)
    data_store.delete_grade(grade_id)
    return {"ok": True}


@app.get("/api/gpa", response_model=GPACalculation)
def get_gpa():
    return compute_gpa(data_store.get_grades(), data_store.get_courses())


@app.get("/api/assignments", response_model=List[Assignment])
def list_assignments(status: Optional[str] = None):
    assignments = data_store.get_assignments()
    if status:
        assignments = [item for item in assignments if item.status == status]
    return sorted(assignments, key=lambda item: item.due_date)


@app.post("/api/assignments", response_model=Assignment)
def create_assignment(assignment: Assignment):
    _check_assignment(assignment)
    return _create("assignments", assignment, data_store.add_assignment)


@app.patch("/api/assignments/{assignment_id}", response_model=Assignment)
def update_assignment(assignment_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _find_or_404("assignments", assignment_id)
    _check_assignment(_merged_or_422(existing, payload))
    return data_store.update_assignment(assignment_id, payload)


@app.delete("/api/assignments/{assignment_id}")
def delete_assignment(assignment_id: str):
    _find_or_404("assignments", assignment_id)
    data_store.delete_assignment(assignment_id)
    return {"ok": True}


@app.get("/api/schedule", response_model=List[ScheduleEntry])
def list_schedule():
    return sorted(
        data_store.get_schedule_entries(),
        key=lambda entry: (entry.day_of_week, entry.start_time),
    )


@app.get("/api/schedule/stats")
def get_schedule_stats():
    return schedule_stats(data_store.get_schedule_entries())


@app.get("/api/schedule/day/{day_of_week}", response_model=List[ScheduleEntry])
def get_schedule_for_day(day_of_week: int):
    if day_of_week < 0 or day_of_week > 6:
        raise HTTPException(400, "Invalid day of week")
    return schedule_for_day(data_store.get_schedule_entries(), day_of_week)


@app.post("/api/schedule", response_model=ScheduleEntry)
def create_schedule_entry(entry: ScheduleEntry):
    _check_schedule_entry(entry)
    return _create("schedule", entry, data_store.add_schedule_entry)


@app.patch("/api/schedule/{entry_id}", response_model=ScheduleEntry)
def update_schedule_entry(entry_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _find_or_404("schedule", entry_id)
    _check_schedule_entry(_merged_or_422(existing, payload))
    return data_store.update_schedule_entry(entry_id, payload)


@app.delete("/api/schedule/{entry_id}")
def delete_schedule_entry(entry_id: str):
    _find_or_404("schedule", entry_id)
    data_store.delete_schedule_entry(entry_id)
    return {"ok": True}


@app.get("/api/reminders", response_model=List[Reminder])
def list_reminders(include_completed: bool = Query(True, alias="includeCompleted")):
    reminders = data_store.get_reminders()
    if not include_completed:
        reminders = [reminder for reminder in reminders if not reminder.is_completed]
    return reminders


@app.post("/api/reminders", response_model=Reminder)
def create_reminder(reminder: Reminder):
    _check_reminder(reminder)
    return _create("reminders", reminder, data_store.add_reminder)


@app.patch("/api/reminders/{reminder_id}", response_model=Reminder)
def update_reminder(reminder_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _find_or_404("reminders", reminder_id)
    _check_reminder(_merged_or_422(existing, payload))
    return data_store.update_reminder(reminder_id, payload)


@app.post("/api/reminders/{reminder_id}/toggle", response_model=Reminder)
def toggle_reminder(reminder_id: str):
    reminder = _find_or_404("reminders", reminder_id)
    return data_store.update_reminder(reminder_id, {"is_completed": not reminder.is_completed})


@app.delete("/api/reminders/{reminder_id}")
def delete_reminder(reminder_id: str):
    _find_or_404("reminders", reminder_id)
    data_store.delete_reminder(reminder_id)
    return {"ok": True}


@app.get("/api/calendar", response_model=List[CalendarEvent])
def get_calendar(year: int, month: int):
    if month < 1 or month > 12:
        raise HTTPException(400, "Invalid month")
    return _events_for(_window_or_400(month_window, year, month))


@app.get("/api/calendar/week", response_model=List[CalendarEvent])
def get_calendar_week(day: date = Query(..., alias="date")):
    return _events_for(_window_or_400(week_window, day))


@app.get("/api/calendar/day", response_model=List[CalendarEvent])
def get_calendar_day(day: date = Query(..., alias="date")):
    return events_for_day(_events_for([day]), day)


@app.get("/api/dashboard")
def get_dashboard():
    return dashboard_summary(
        data_store.get_courses(),
        data_store.get_grades(),
        data_store.get_assignments(),
        data_store.get_schedule_entries(),
        now=datetime.now(),
    )


@app.get("/api/user", response_model=Optional[User])
def get_user():
    return data_store.get_user()


@app.put("/api/user", response_model=User)
def put_user(user: User):
    if user.gpa_target is not None and not 0 <= user.gpa_target <= 4:
        raise HTTPException(400, "gpaTarget must be between 0 and 4")
    return data_store.set_user(user)


@app.get("/api/export")
def export_data():
    payload = data_store.export_payload()
    return JSONResponse(
        payload,
        headers={"Content-Disposition": 'attachment; filename="student-data-backup.json"'},
    )


@app.post("/api/import")
def import_data(payload: Dict[str, Any] = Body(...)):
    try:
        data_store.import_payload(payload)
    except ValidationError as exc:
        raise HTTPException(400, f"Invalid backup: {exc.error_count()} invalid record field(s)")
    except ValueError as exc:
        raise HTTPException(400, f"Invalid backup: {exc}")
    return {
        "ok": True,
        "courses": len(data_store.get_courses()),
        "grades": len(data_store.get_grades()),
        "assignments": len(data_store.get_assignments()),
        "schedule": len(data_store.get_schedule_entries()),
        "reminders": len(data_store.get_reminders()),
    }


@app.get("/api/system/version")
def api_get_version() -> Dict[str, str]:
    return {"version": __version__}


if seed_requested():
    seed_sample_data(data_store)


if serve_frontend:
    FRONTEND_DIST = Path(__file__).resolve().parent / "static" / "dist"
    index_file = FRONTEND_DIST / "index.html"

    if FRONTEND_DIST.exists() and index_file.exists():
        app.mount("/", StaticFiles(directory=FRONTEND_DIST, html=True), name="frontend")

        @app.get("/{full_path:path}")
        async def serve_spa(full_path: str):
            if full_path.startswith("api/"):
                raise HTTPException(404, "Not found")
            return FileResponse(index_file)
    else:
        logger.warning(
            "SERVE_FRONTEND is enabled but no build directory was found at %s",
            FRONTEND_DIST,
        )

        missing_frontend_message = HTMLResponse(
            """
            <html>
                <head>
                    <title>Study Planner</title>
                    <style>
                        body {font-family: system-ui, sans-serif; margin: 40px; line-height: 1.6;}
                        code {background: #f2f2f2; padding: 2px 4px; border-radius: 4px;}
                    </style>
                </head>
                <body>
                    <h1>Frontend build missing</h1>
                    <p>
                        The API is running, but no frontend build was found. Build the frontend
                        and copy it to <code>studyplanner/static/dist</code>, then restart the app.
                    </p>
                </body>
            </html>
            """
        )

        @app.get("/", response_class=HTMLResponse)
        async def frontend_missing_root() -> HTMLResponse:
            return missing_frontend_message

        @app.get("/{full_path:path}", response_class=HTMLResponse)
        async def frontend_missing(full_path: str) -> HTMLResponse:
            if full_path.startswith("api/"):
                raise HTTPException(404, "Not found")
            return missing_frontend_message
