"""Compatibility module for plain ``uvicorn app:app --reload`` commands.

The FastAPI app is exported directly from :mod:`studyplanner.app`.
"""

from studyplanner.app import app

__all__ = ["app"]
