"""Study planner: courses, grades, assignments, weekly classes and reminders.

The two pure entry points are re-exported here; everything else lives in its
own module (``studyplanner.app`` for the HTTP API, ``studyplanner.services``
for storage).
"""

from .calendar_events import project_events
from .grades import compute_gpa

__all__ = ["compute_gpa", "project_events"]
