"""Configuration for pytest."""
import sys
import os

# Add the project root to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Common test fixtures can be defined here
from datetime import date
from unittest.mock import Mock

import pytest

from reading_quest.models.plan_structure import ReadingPlan, UserPlan


@pytest.fixture
def mock_settings():
    """Mock application settings for testing."""
    settings = Mock()
    settings.app_name = "Test Reading Quest API"
    settings.debug = True
    settings.db_name = "test_db"
    settings.db_user = "test_user"
    settings.db_password = "test_password"
    settings.db_host = "localhost"
    settings.db_port = 5432
    settings.default_streak_minimum = 3
    settings.max_streak_minimum = 50
    settings.default_timezone = "UTC"
    settings.cache_ttl_plans = 0
    settings.allowed_origins = ["http://localhost:3000"]
    return settings


def _chapters(count):
    return list(range(1, count + 1))


@pytest.fixture
def cycling_plan():
    """Two lists: the four Gospels (89 chapters) and Acts (28)."""
    return ReadingPlan.model_validate(
        {
            "id": 1,
            "slug": "gospels-and-acts",
            "name": "Gospels and Acts",
            "duration_days": 0,
            "daily_structure": {
                "type": "cycling_lists",
                "lists": [
                    {
                        "id": "gospels",
                        "label": "Gospels",
                        "books": [
                            {"book": "Matthew", "chapters": _chapters(28)},
                            {"book": "Mark", "chapters": _chapters(16)},
                            {"book": "Luke", "chapters": _chapters(24)},
                            {"book": "John", "chapters": _chapters(21)},
                        ],
                    },
                    {
                        "id": "acts",
                        "label": "Acts",
                        "books": [{"book": "Acts", "chapters": _chapters(28)}],
                    },
                ],
            },
        }
    )


@pytest.fixture
def sequential_plan():
    return ReadingPlan.model_validate(
        {
            "id": 2,
            "slug": "mark-in-a-week",
            "name": "Mark in a Week",
            "duration_days": 3,
            "daily_structure": {
                "type": "sequential",
                "chapters_per_day": 3,
                "readings": [
                    {"day": 1, "passages": ["Mark 1", "Mark 2", "Mark 3"]},
                    {"day": 2, "passages": ["Mark 4", "Mark 5", "Mark 6"]},
                    {"day": 3, "passages": ["Mark 7", "Mark 8"], "chapters": 2},
                ],
            },
        }
    )


@pytest.fixture
def split_plan():
    """Sequential plan where every chapter is checked off on its own."""
    return ReadingPlan.model_validate(
        {
            "id": 3,
            "slug": "mark-by-chapter",
            "name": "Mark by Chapter",
            "duration_days": 2,
            "daily_structure": {
                "type": "sequential",
                "chapters_per_day": 2,
                "split_chapters": True,
                "readings": [
                    {"day": 1, "passages": ["Mark 1", "Mark 2"]},
                    {"day": 2, "passages": ["Mark 3", "Mark 4"]},
                ],
            },
        }
    )


@pytest.fixture
def sectional_plan():
    def day(number):
        return {
            "day": number,
            "sections": [
                {"id": "psalm", "label": "Psalm", "passages": [f"Psalm {number}"]},
                {"id": "proverb", "label": "Proverb", "passages": [f"Proverbs {number}"]},
                {"id": "gospel", "label": "Gospel", "passages": [f"John {number}"]},
            ],
        }

    return ReadingPlan.model_validate(
        {
            "id": 4,
            "slug": "wisdom-and-gospel",
            "name": "Wisdom and Gospel",
            "duration_days": 3,
            "daily_structure": {
                "type": "sectional",
                "sections_per_day": 3,
                "readings": [day(1), day(2), day(3)],
            },
        }
    )


@pytest.fixture
def make_user_plan():
    """Build a UserPlan for ``plan`` with field overrides."""
    def _make(plan, **overrides):
        base = {
            "id": 100,
            "user_id": 42,
            "plan_id": plan.id,
            "start_date": date(2026, 3, 1),
        }
        base.update(overrides)
        return UserPlan.model_validate(base)

    return _make
