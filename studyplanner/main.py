"""Compatibility module so ``uvicorn studyplanner.main:app`` keeps working.

The application itself lives in :mod:`studyplanner.app`.
"""

from __future__ import annotations

from .app import app

__all__ = ["app"]
