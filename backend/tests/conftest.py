from datetime import date, timedelta
from typing import Callable

import pytest

from focus_engine.config import ScheduleConfig
from focus_engine.models import Category, TimeBlock

# A Wednesday
TODAY = date(2025, 3, 12)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def settings() -> ScheduleConfig:
    # Ignore any .env in the working directory
    return ScheduleConfig(_env_file=None)


@pytest.fixture
def make_block() -> Callable[..., TimeBlock]:
    def _make(
        day: date = TODAY,
        hour: int = 9,
        minute: int = 0,
        duration: int = 25,
        category=Category.WORK,
        completed: bool = True,
        title: str = None,
    ) -> TimeBlock:
        return TimeBlock(
            date=day,
            hour=hour,
            start_minute=minute,
            duration_minutes=duration,
            category=category,
            completed=completed,
            title=title,
        )
    return _make


@pytest.fixture
def days_ago() -> Callable[[int], date]:
    return lambda n: TODAY - timedelta(days=n)


@pytest.fixture
def assert_no_overlap() -> Callable:
    def _check(intervals):
        """Every pair of (start, end) intervals is disjoint."""
        ordered = sorted(intervals)
        for (_, first_end), (second_start, _) in zip(ordered, ordered[1:]):
            assert first_end <= second_start, ordered
    return _check
