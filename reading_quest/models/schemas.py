"""Pydantic models for API requests and responses."""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from reading_quest.models.plan_structure import DailyStructure, ReadingUnit


class HealthCheck(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime


class ReadingPlanSummary(BaseModel):
    """Catalog entry without its day-by-day content."""
    id: int
    slug: str
    name: str
    description: Optional[str] = None
    duration_days: int
    structure_type: str


class ReadingPlanDetail(ReadingPlanSummary):
    """Catalog entry including its reading structure."""
    daily_structure: DailyStructure


class UserReadingPlanCreate(BaseModel):
    """Request payload for enrolling in a plan."""
    plan_slug: str = Field(..., min_length=1)
    start_date: Optional[str] = Field(default=None, description="YYYY-MM-DD, defaults to today")
    nickname: Optional[str] = Field(default=None, max_length=100)


class UserReadingPlanSummary(BaseModel):
    """A tracked plan and its position."""
    id: int
    plan: ReadingPlanSummary
    start_date: Optional[str] = None
    nickname: Optional[str] = None
    current_day: int
    list_positions: Dict[str, int] = Field(default_factory=dict)
    is_completed: bool
    completed_at: Optional[str] = None
    is_archived: bool
    version: int
    created_at: Optional[str] = None
    percent_complete: int


class DailyGoalResponse(BaseModel):
    chapters_read: int
    goal: int
    progress: int
    met: bool
    remaining: int


class UserReadingPlanDetailResponse(UserReadingPlanSummary):
    """A tracked plan with the readings due on ``progress_date``."""
    progress_date: str
    readings: List[ReadingUnit]
    day_complete: bool
    list_cycle_progress: Dict[str, int] = Field(default_factory=dict)
    days_on_plan: int
    schedule_offset: Optional[int] = Field(default=None, description="Days ahead (+) or behind (-); day-based plans only")
    chapters_read_today: int
    daily_goal: DailyGoalResponse


class ProgressMutationResponse(UserReadingPlanDetailResponse):
    """Plan state after a completion or advance."""
    cycle_completed: bool = False
    plan_completed: bool = False


class _MutationRequest(BaseModel):
    local_date: Optional[str] = Field(default=None, description="User's local date, YYYY-MM-DD")
    expected_version: Optional[int] = Field(default=None, ge=0, description="Version the client last saw")


class CompletionToggleRequest(_MutationRequest):
    """Flip a reading unit between read and unread."""
    unit_id: str = Field(..., min_length=1, description="Completion token from the readings list")


class CompletionUpdateRequest(CompletionToggleRequest):
    """Explicitly mark a reading unit read or unread."""
    is_complete: bool


class AdvanceRequest(_MutationRequest):
    """Move on to the next chapter (cycling lists) or day."""
    list_id: Optional[str] = Field(default=None, description="Required for cycling list plans")


class StreakRankResponse(BaseModel):
    rank: str
    next_rank: Optional[str] = None
    days_to_next: int


class UserStatsResponse(BaseModel):
    """Reading statistics across every plan a user tracks."""
    total_chapters_read: int
    current_streak: int
    longest_streak: int
    total_days_reading: int
    plans_completed: int
    plans_active: int
    streak_minimum: int
    rank: StreakRankResponse
    daily_goal: DailyGoalResponse


class StreakMinimumUpdate(BaseModel):
    streak_minimum: int = Field(..., ge=1, description="Chapters per day needed to keep a streak")


class StreakMinimumResponse(BaseModel):
    streak_minimum: int
