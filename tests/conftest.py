import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Keep the module-level store out of the working tree during test runs.
os.environ.setdefault("STUDYPLANNER_DATA_DIR", tempfile.mkdtemp(prefix="studyplanner-tests-"))


@pytest.fixture()
def store(tmp_path):
    from studyplanner.services.data_store import DataStore

    instance = DataStore()
    instance.set_base_path(tmp_path)
    return instance
