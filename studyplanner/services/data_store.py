from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..agenda import color_from_string
from ..models import Assignment, Course, Grade, Reminder, ScheduleEntry, User

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

# Collection key (as stored on disk and in exports) -> record model.
COLLECTIONS: Dict[str, Type[BaseModel]] = {
    "courses": Course,
    "grades": Grade,
    "assignments": Assignment,
    "schedule": ScheduleEntry,
    "reminders": Reminder,
}

# Records that belong to a course and are removed together with it.
CASCADE_ON_COURSE_DELETE = ("grades", "assignments", "schedule")

ModelT = TypeVar("ModelT", bound=BaseModel)
Payload = Union[BaseModel, Mapping[str, Any]]


class UnknownEntityError(KeyError):
    """Raised when an id does not exist in the requested collection."""

    def __init__(self, collection: str, entity_id: str) -> None:
        super().__init__(f"{collection}: {entity_id}")
        self.collection = collection
        self.entity_id = entity_id


def _validate(model: Type[ModelT], payload: Payload) -> ModelT:
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True)
    return model.model_validate(dict(payload))


def merge_record(record: ModelT, updates: Mapping[str, Any]) -> ModelT:
    """Return a re-validated copy of ``record`` with ``updates`` applied.

    Keys may use either the Python attribute name or the camelCase alias. The
    id never changes.
    """

    model = type(record)
    data = record.model_dump(by_alias=True)
    for key, value in updates.items():
        field = model.model_fields.get(key)
        alias = field.alias if field is not None and field.alias else key
        data[alias] = value
    data["id"] = record.id
    return model.model_validate(data)


class DataStore:
    """Owns the planner collections and persists them as one JSON state file."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: Dict[str, List[BaseModel]] = {name: [] for name in COLLECTIONS}
        self._user: Optional[User] = None
        self._default_base = self._determine_default_base()
        self._configure(self._default_base)

    @staticmethod
    def _user_data_base() -> Path:
        if sys.platform == "win32":
            root = Path(os.getenv("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
        elif sys.platform == "darwin":
            root = Path.home() / "Library" / "Application Support"
        else:
            root = Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")
        return root / "StudyPlanner"

    def _determine_default_base(self) -> Path:
        custom_data = os.getenv("STUDYPLANNER_DATA_DIR")
        if custom_data:
            return Path(custom_data)

        if getattr(sys, "frozen", False):
            return self._user_data_base() / "storage"

        return Path(__file__).resolve().parent.parent / "storage"

    def _configure(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._state_file = self._base_path / "state.json"
        self.ensure_ready()
        self.load()

    def ensure_ready(self) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def state_file(self) -> Path:
        return self._state_file

    def set_base_path(self, base_path: Path) -> None:
        self._configure(Path(base_path))

    def reset_base_path(self) -> None:
        self._configure(self._default_base)

    # Persistence

    def load(self) -> None:
        """Read the state file; a missing or unreadable file means an empty store."""

        with self._lock:
            self._clear()
            if not self._state_file.exists():
                return
            try:
                with self._state_file.open("r", encoding="utf-8") as handle:
                    payload = json.load(handle)
                self._replace(payload)
            except (OSError, json.JSONDecodeError, ValidationError, ValueError) as exc:
                logger.warning("Could not read state file %s: %s", self._state_file, exc)
                self._clear()

    def save(self) -> None:
        with self._lock:
            self.ensure_ready()
            payload = self._serialize()
            self._state_file.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )

    def _clear(self) -> None:
        self._collections = {name: [] for name in COLLECTIONS}
        self._user = None

    def _serialize(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            name: [record.model_dump(mode="json", by_alias=True) for record in records]
            for name, records in self._collections.items()
        }
        payload["user"] = (
            self._user.model_dump(mode="json", by_alias=True) if self._user else None
        )
        return payload

    def _replace(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            raise ValueError("Expected a JSON object with planner collections")
        collections: Dict[str, List[BaseModel]] = {}
        for name, model in COLLECTIONS.items():
            raw_items = payload.get(name) or []
            if not isinstance(raw_items, list):
                raise ValueError(f"'{name}' must be a list")
            records = [model.model_validate(item) for item in raw_items]
            seen: set = set()
            for record in records:
                if record.id in seen:
                    raise ValueError(f"Duplicate id '{record.id}' in {name}")
                seen.add(record.id)
            collections[name] = records
        raw_user = payload.get("user")
        user = User.model_validate(raw_user) if raw_user else None
        self._collections = collections
        self._user = user

    # Export / import

    def export_payload(self) -> Dict[str, Any]:
        with self._lock:
            payload = self._serialize()
        payload["version"] = EXPORT_VERSION
        payload["exportDate"] = datetime.now().isoformat()
        return payload

    def import_payload(self, payload: Any) -> None:
        """Replace every collection with the exported ``payload``.

        Nothing changes when any record fails validation.
        """

        with self._lock:
            self._replace(payload)
            self.save()
        logger.info(
            "Imported %s",
            ", ".join(f"{len(records)} {name}" for name, records in self._collections.items()),
        )

    # Snapshots

    def _snapshot(self, name: str) -> List[Any]:
        with self._lock:
            return list(self._collections[name])

    def get_courses(self) -> List[Course]:
        return self._snapshot("courses")

    def get_grades(self) -> List[Grade]:
        return self._snapshot("grades")

    def get_assignments(self) -> List[Assignment]:
        return self._snapshot("assignments")

    def get_schedule_entries(self) -> List[ScheduleEntry]:
        return self._snapshot("schedule")

    def get_reminders(self) -> List[Reminder]:
        return self._snapshot("reminders")

    def get_user(self) -> Optional[User]:
        return self._user

    def set_user(self, user: Optional[Payload]) -> Optional[User]:
        with self._lock:
            self._user = _validate(User, user) if user is not None else None
            self.save()
            return self._user

    def find(self, name: str, entity_id: str) -> Any:
        with self._lock:
            for record in self._collections[name]:
                if record.id == entity_id:
                    return record
        raise UnknownEntityError(name, entity_id)

    # Generic mutations

    def _add(self, name: str, payload: Payload) -> Any:
        record = _validate(COLLECTIONS[name], payload)
        with self._lock:
            if any(existing.id == record.id for existing in self._collections[name]):
                raise ValueError(f"Duplicate id '{record.id}' in {name}")
            self._collections[name] = [*self._collections[name], record]
            self.save()
        logger.debug("Added %s %s", name, record.id)
        return record

    def _update(self, name: str, entity_id: str, updates: Mapping[str, Any]) -> Any:
        with self._lock:
            records = self._collections[name]
            for index, record in enumerate(records):
                if record.id == entity_id:
                    updated = merge_record(record, updates)
                    self._collections[name] = [*records[:index], updated, *records[index + 1:]]
                    self.save()
                    return updated
        raise UnknownEntityError(name, entity_id)

    def _delete(self, name: str, entity_id: str) -> None:
        with self._lock:
            records = self._collections[name]
            remaining = [record for record in records if record.id != entity_id]
            if len(remaining) == len(records):
                raise UnknownEntityError(name, entity_id)
            self._collections[name] = remaining
            self.save()
        logger.debug("Deleted %s %s", name, entity_id)

    # Courses

    def add_course(self, payload: Payload) -> Course:
        course = _validate(Course, payload)
        if not course.color:
            course = course.model_copy(update={"color": color_from_string(course.name)})
        return self._add("courses", course)

    def update_course(self, course_id: str, updates: Mapping[str, Any]) -> Course:
        return self._update("courses", course_id, updates)

    def delete_course(self, course_id: str) -> None:
        with self._lock:
            self.find("courses", course_id)
            for name in CASCADE_ON_COURSE_DELETE:
                self._collections[name] = [
                    record for record in self._collections[name] if record.course_id != course_id
                ]
            self._delete("courses", course_id)
        logger.info("Deleted course %s including its grades, assignments and classes", course_id)

    # Grades

    def add_grade(self, payload: Payload) -> Grade:
        return self._add("grades", payload)

    def update_grade(self, grade_id: str, updates: Mapping[str, Any]) -> Grade:
        return self._update("grades", grade_id, updates)

    def delete_grade(self, grade_id: str) -> None:
        self._delete("grades", grade_id)

    # Assignments

    def add_assignment(self, payload: Payload) -> Assignment:
        return self._add("assignments", payload)

    def update_assignment(self, assignment_id: str, updates: Mapping[str, Any]) -> Assignment:
        return self._update("assignments", assignment_id, updates)

    def delete_assignment(self, assignment_id: str) -> None:
        self._delete("assignments", assignment_id)

    # Schedule

    def add_schedule_entry(self, payload: Payload) -> ScheduleEntry:
        return self._add("schedule", payload)

    def update_schedule_entry(self, entry_id: str, updates: Mapping[str, Any]) -> ScheduleEntry:
        return self._update("schedule", entry_id, updates)

    def delete_schedule_entry(self, entry_id: str) -> None:
        self._delete("schedule", entry_id)

    # Reminders

    def add_reminder(self, payload: Payload) -> Reminder:
        return self._add("reminders", payload)

    def update_reminder(self, reminder_id: str, updates: Mapping[str, Any]) -> Reminder:
        return self._update("reminders", reminder_id, updates)

    def delete_reminder(self, reminder_id: str) -> None:
        self._delete("reminders", reminder_id)

    def is_empty(self) -> bool:
        with self._lock:
            return not any(self._collections.values())


data_store = DataStore()
