"""Repository modules for database operations.

All repository classes are re-exported here for convenient imports.
"""
from reading_quest.repositories.reading_plan import ReadingPlanRepository
from reading_quest.repositories.user_reading_plan import UserReadingPlanRepository
from reading_quest.repositories.daily_progress import DailyProgressRepository
from reading_quest.repositories.user_profile import UserProfileRepository

__all__ = [
    "ReadingPlanRepository",
    "UserReadingPlanRepository",
    "DailyProgressRepository",
    "UserProfileRepository",
]
