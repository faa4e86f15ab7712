"""Routes for browsing the reading plan catalog."""
from typing import List

from fastapi import APIRouter, Depends

from reading_quest.models.schemas import ReadingPlanDetail, ReadingPlanSummary
from reading_quest.services.reading_plan_tracking_service import (
    ReadingPlanTrackingService,
    get_reading_plan_tracking_service,
)

router = APIRouter(prefix="/api/reading-plans", tags=["reading-plans"])


@router.get("", response_model=List[ReadingPlanSummary])
async def list_reading_plans(
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.list_plans()


@router.get("/{plan_slug}", response_model=ReadingPlanDetail)
async def get_reading_plan(
    plan_slug: str,
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.get_plan_detail(plan_slug)
