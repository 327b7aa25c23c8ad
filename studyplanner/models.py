import re
import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

GradeCategory = Literal["exam", "homework", "project", "quiz", "participation"]
AssignmentPriority = Literal["low", "medium", "high"]
AssignmentStatus = Literal["pending", "in-progress", "completed"]
AssignmentCategory = Literal["homework", "project", "exam", "quiz", "reading"]
ScheduleType = Literal["lecture", "lab", "tutorial", "seminar"]
ReminderType = Literal["assignment", "exam", "event", "personal"]
EventType = Literal["class", "assignment", "exam", "event"]

TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def _wall_clock(value: datetime) -> datetime:
    # Times are local wall-clock; offsets are converted and dropped.
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class PlannerModel(BaseModel):
    """Base for all planner records: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Course(PlannerModel):
    id: str = Field(default_factory=generate_id)
    name: str
    code: str
    credits: int
    color: str = ""
    instructor: Optional[str] = None
    semester: str = ""


class Grade(PlannerModel):
    id: str = Field(default_factory=generate_id)
    course_id: str
    assignment_name: str
    grade: float
    max_points: float
    weight: float
    category: GradeCategory
    date: date


class Assignment(PlannerModel):
    id: str = Field(default_factory=generate_id)
    course_id: str
    title: str
    description: Optional[str] = None
    due_date: datetime
    priority: AssignmentPriority = "medium"
    status: AssignmentStatus = "pending"
    category: AssignmentCategory = "homework"

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime) -> datetime:
        return _wall_clock(value)


class ScheduleEntry(PlannerModel):
    id: str = Field(default_factory=generate_id)
    course_id: str
    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: str
    end_time: str
    location: Optional[str] = None
    type: ScheduleType = "lecture"

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value: str) -> str:
        value = value.strip()
        if not TIME_RE.match(value):
            raise ValueError("Expected wall-clock time in HH:MM format")
        return value


class Reminder(PlannerModel):
    id: str = Field(default_factory=generate_id)
    title: str
    description: Optional[str] = None
    date: datetime
    type: ReminderType = "personal"
    is_completed: bool = False
    assignment_id: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return _wall_clock(value)


class User(PlannerModel):
    id: str = Field(default_factory=generate_id)
    name: str
    email: str
    current_semester: str
    gpa_target: Optional[float] = None


class CalendarEvent(PlannerModel):
    id: str
    title: str
    start: datetime
    end: datetime
    type: EventType
    course_id: Optional[str] = None
    color: str


class CourseGPA(PlannerModel):
    course_id: str
    gpa: float
    letter_grade: str
    percentage: float


class GPACalculation(PlannerModel):
    overall: float
    semester: float
    courses: List[CourseGPA] = []
