"""Shared logging helpers for the runner and the ASGI app."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Final

LOG_HANDLER_NAME: Final = "studyplanner-file"
LOG_LEVEL_ENV_VAR: Final = "STUDYPLANNER_LOG_LEVEL"
LOG_FILE_ENV_VAR: Final = "STUDYPLANNER_LOG_FILE"
FILE_FORMAT: Final = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_FILE_HANDLER_SETTINGS: dict[str, Any] | None = None


def get_configured_log_level(default: int = logging.INFO) -> int:
    """Resolve the desired log level from the environment."""

    value = os.getenv(LOG_LEVEL_ENV_VAR)
    if not value:
        return default

    value = value.strip()
    if not value:
        return default

    # Numeric levels ("10") as well as names ("DEBUG").
    try:
        numeric_level = int(value)
    except ValueError:
        resolved = getattr(logging, value.upper(), None)
        if isinstance(resolved, int):
            return resolved
        return default
    else:
        return numeric_level


def _default_log_path() -> Path:
    override = os.getenv(LOG_FILE_ENV_VAR)
    if override:
        return Path(override).expanduser()

    if getattr(sys, "frozen", False):
        exe_path = Path(sys.executable).resolve()
        return exe_path.parent / "studyplanner.log"

    return Path.cwd() / "studyplanner.log"


def configure_file_logging(default_level: int = logging.INFO) -> dict[str, Any] | None:
    """Attach the planner file handler to the root logger (once)."""

    global _FILE_HANDLER_SETTINGS

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if getattr(handler, "name", "") == LOG_HANDLER_NAME:
            if isinstance(handler, logging.FileHandler):
                _FILE_HANDLER_SETTINGS = {
                    "path": Path(handler.baseFilename),
                    "level": handler.level,
                }
            return _FILE_HANDLER_SETTINGS

    log_path = _default_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - depends on IO
        logging.getLogger(__name__).warning("Could not open log file: %s", exc)
        _FILE_HANDLER_SETTINGS = None
        return None

    log_level = get_configured_log_level(default_level)
    file_handler.set_name(LOG_HANDLER_NAME)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root_logger.addHandler(file_handler)
    if root_logger.level > log_level or root_logger.level == logging.NOTSET:
        root_logger.setLevel(log_level)

    _FILE_HANDLER_SETTINGS = {"path": log_path, "level": log_level}
    logging.getLogger(__name__).info("Log file: %s", log_path)
    return _FILE_HANDLER_SETTINGS


def announce_log_destination() -> None:
    """Print where the logs go so developers know where to look."""

    settings = _FILE_HANDLER_SETTINGS
    if not settings:
        print("[logging] Console logging only (no log file configured).")
        return

    path = settings["path"]
    level = logging.getLevelName(settings["level"])
    print(
        f"[logging] Backend logs are written to {path} (level {level}).",
        f"Set {LOG_LEVEL_ENV_VAR}=DEBUG for more detail.",
    )


def get_file_handler_settings() -> dict[str, Any] | None:
    """Return the stored handler metadata so other systems can reuse it."""

    return _FILE_HANDLER_SETTINGS
