"""Routes for a user's reading preferences."""
from fastapi import APIRouter, Depends

from reading_quest.auth import get_current_user_dependency
from reading_quest.models.schemas import StreakMinimumResponse, StreakMinimumUpdate
from reading_quest.services.reading_plan_tracking_service import (
    ReadingPlanTrackingService,
    get_reading_plan_tracking_service,
)

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("/streak-minimum", response_model=StreakMinimumResponse)
async def get_streak_minimum(
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.get_streak_minimum(user_id=current_user["id"])


@router.put("/streak-minimum", response_model=StreakMinimumResponse)
async def update_streak_minimum(
    payload: StreakMinimumUpdate,
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.update_streak_minimum(
        user_id=current_user["id"], streak_minimum=payload.streak_minimum
    )
