from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from core import time_utils
from core.dependencies import get_store
from main import app
from models.habit import Habit
from storage.local import LocalHabitStore

# Wednesday
FIXED_NOW = datetime(2024, 1, 10, 12, 0)


@pytest.fixture
def fixed_clock():
    time_utils.set_clock(lambda: FIXED_NOW)
    yield FIXED_NOW
    time_utils.reset_clock()


@pytest.fixture
def make_habit():
    def _make(history=None, **kwargs):
        kwargs.setdefault("title", "Read")
        kwargs.setdefault("frequency", "daily")
        kwargs.setdefault("created_at", datetime(2024, 1, 1))
        return Habit(history=history or {}, **kwargs)
    return _make


@pytest.fixture
def store(tmp_path):
    return LocalHabitStore(str(tmp_path / "habits.json"))


@pytest.fixture
def client(store, fixed_clock):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
