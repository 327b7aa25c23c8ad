"""Demo data for a first start, so the dashboard is not empty."""

from __future__ import annotations

import logging
import os

from .models import Assignment, Course, Grade, ScheduleEntry
from .services.data_store import DataStore

logger = logging.getLogger(__name__)

SEED_ENV_VAR = "STUDYPLANNER_SEED_SAMPLE"


def seed_requested() -> bool:
    return os.getenv(SEED_ENV_VAR, "0").strip().lower() in {"1", "true", "yes", "on"}


def seed_sample_data(store: DataStore) -> bool:
    """Fill an empty store with a small fall semester. Returns whether it seeded."""

    if not store.is_empty():
        return False

    cs = store.add_course(
        Course(
            name="Introduction to Computer Science",
            code="CS 101",
            credits=3,
            color="#3B82F6",
            instructor="Dr. Smith",
            semester="Fall 2024",
        )
    )
    calculus = store.add_course(
        Course(
            name="Calculus I",
            code="MATH 151",
            credits=4,
            color="#10B981",
            instructor="Prof. Johnson",
            semester="Fall 2024",
        )
    )
    store.add_course(
        Course(
            name="English Composition",
            code="ENG 101",
            credits=3,
            color="#F59E0B",
            instructor="Dr. Williams",
            semester="Fall 2024",
        )
    )

    store.add_grade(
        Grade(
            course_id=cs.id,
            assignment_name="Midterm Exam",
            grade=85,
            max_points=100,
            weight=0.3,
            category="exam",
            date="2024-10-15",
        )
    )
    store.add_grade(
        Grade(
            course_id=cs.id,
            assignment_name="Programming Project 1",
            grade=92,
            max_points=100,
            weight=0.2,
            category="project",
            date="2024-09-30",
        )
    )

    store.add_assignment(
        Assignment(
            course_id=cs.id,
            title="Final Project",
            description="Build a web application",
            due_date="2024-12-15T00:00:00",
            priority="high",
            status="in-progress",
            category="project",
        )
    )
    store.add_assignment(
        Assignment(
            course_id=calculus.id,
            title="Homework 5",
            description="Integration problems",
            due_date="2024-11-20T00:00:00",
            priority="medium",
            status="pending",
            category="homework",
        )
    )

    for day_of_week in (1, 3):
        store.add_schedule_entry(
            ScheduleEntry(
                course_id=cs.id,
                day_of_week=day_of_week,
                start_time="09:00",
                end_time="10:30",
                location="Room 101",
                type="lecture",
            )
        )

    logger.info("Seeded sample data into %s", store.state_file)
    return True
