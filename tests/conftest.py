from datetime import date

import pytest

from repo_json import JSONRepo
from tracker import HabitTracker

# 2024-01-01 was a Monday
MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
WEDNESDAY = date(2024, 1, 3)


@pytest.fixture
def repo(tmp_path):
    return JSONRepo(str(tmp_path / "data" / "habits.json"))


@pytest.fixture
def tracker(repo):
    return HabitTracker(repo)
