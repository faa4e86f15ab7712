"""Routes for managing user-specific reading plan progress."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response

from reading_quest.auth import get_current_user_dependency
from reading_quest.models.schemas import (
    AdvanceRequest,
    CompletionToggleRequest,
    CompletionUpdateRequest,
    ProgressMutationResponse,
    UserReadingPlanCreate,
    UserReadingPlanDetailResponse,
    UserReadingPlanSummary,
    UserStatsResponse,
)
from reading_quest.services.reading_plan_tracking_service import (
    ReadingPlanTrackingService,
    get_reading_plan_tracking_service,
)

router = APIRouter(prefix="/api/user-reading-plans", tags=["reading-plan-tracking"])


@router.get("", response_model=List[UserReadingPlanSummary])
async def list_user_reading_plans(
    include_archived: bool = Query(False),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.list_user_plans(current_user["id"], include_archived=include_archived)


@router.post("", response_model=UserReadingPlanSummary, status_code=201)
async def start_user_reading_plan(
    payload: UserReadingPlanCreate,
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.start_plan(
        user_id=current_user["id"],
        plan_slug=payload.plan_slug,
        start_date=payload.start_date,
        nickname=payload.nickname,
    )


@router.get("/stats", response_model=UserStatsResponse)
async def get_user_reading_stats(
    local_date: Optional[str] = Query(None, description="User's local date, YYYY-MM-DD"),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.get_user_stats(user_id=current_user["id"], local_date=local_date)


@router.get("/{user_plan_id}", response_model=UserReadingPlanDetailResponse)
async def get_user_reading_plan_detail(
    user_plan_id: int = Path(..., ge=1),
    local_date: Optional[str] = Query(None, description="User's local date, YYYY-MM-DD"),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.get_user_plan_detail(
        user_id=current_user["id"], user_plan_id=user_plan_id, local_date=local_date
    )


@router.post("/{user_plan_id}/completions/toggle", response_model=ProgressMutationResponse)
async def toggle_reading_completion(
    payload: CompletionToggleRequest,
    user_plan_id: int = Path(..., ge=1),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.toggle_completion(
        user_id=current_user["id"],
        user_plan_id=user_plan_id,
        unit_id=payload.unit_id,
        local_date=payload.local_date,
        expected_version=payload.expected_version,
    )


@router.put("/{user_plan_id}/completions", response_model=ProgressMutationResponse)
async def update_reading_completion(
    payload: CompletionUpdateRequest,
    user_plan_id: int = Path(..., ge=1),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.set_completion(
        user_id=current_user["id"],
        user_plan_id=user_plan_id,
        unit_id=payload.unit_id,
        is_complete=payload.is_complete,
        local_date=payload.local_date,
        expected_version=payload.expected_version,
    )


@router.post("/{user_plan_id}/advance", response_model=ProgressMutationResponse)
async def advance_user_reading_plan(
    payload: AdvanceRequest,
    user_plan_id: int = Path(..., ge=1),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.advance(
        user_id=current_user["id"],
        user_plan_id=user_plan_id,
        list_id=payload.list_id,
        local_date=payload.local_date,
        expected_version=payload.expected_version,
    )


@router.post("/{user_plan_id}/archive", response_model=UserReadingPlanSummary)
async def archive_user_reading_plan(
    user_plan_id: int = Path(..., ge=1),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.set_archived(user_id=current_user["id"], user_plan_id=user_plan_id, archived=True)


@router.post("/{user_plan_id}/unarchive", response_model=UserReadingPlanSummary)
async def unarchive_user_reading_plan(
    user_plan_id: int = Path(..., ge=1),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    return service.set_archived(user_id=current_user["id"], user_plan_id=user_plan_id, archived=False)


@router.delete("/{user_plan_id}", status_code=204)
async def delete_user_reading_plan(
    user_plan_id: int = Path(..., ge=1),
    current_user=Depends(get_current_user_dependency),
    service: ReadingPlanTrackingService = Depends(get_reading_plan_tracking_service),
):
    service.delete_plan(user_id=current_user["id"], user_plan_id=user_plan_id)
    return Response(status_code=204)
