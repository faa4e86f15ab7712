"""Business logic for user reading plan tracking."""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional

import psycopg2

from reading_quest.config import Settings, get_settings
from reading_quest.models.plan_structure import (
    CyclingListsStructure,
    DailyProgressRecord,
    ReadingPlan,
    UserPlan,
)
from reading_quest.repositories import (
    DailyProgressRepository,
    ReadingPlanRepository,
    UserProfileRepository,
    UserReadingPlanRepository,
)
from reading_quest.services import progress_mutator
from reading_quest.services.cache_service import CacheService
from reading_quest.services.progress_aggregator import (
    days_on_plan,
    list_cycle_progress,
    percent_complete,
    schedule_offset,
)
from reading_quest.services.reading_resolver import is_day_complete, resolve_readings
from reading_quest.services.streak_calculator import (
    chapters_for_record,
    compute_streaks,
    daily_goal_status,
    get_streak_rank,
)
from reading_quest.utils.dates import parse_local_date
from reading_quest.utils.exceptions import (
    DatabaseError,
    PlanNotFoundError,
    UserPlanNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ReadingPlanTrackingService:
    """Coordinates storage and retrieval of user-specific reading plan progress.

    The reading engine is pure; this service loads the state it needs,
    hands it to the engine, and persists the result in one transaction.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    # Catalog

    def list_plans(self) -> List[Dict[str, Any]]:
        plans = [ReadingPlan.model_validate(row) for row in ReadingPlanRepository.list_plans()]
        return [self._serialize_plan(plan) for plan in plans]

    def get_plan_detail(self, plan_slug: str) -> Dict[str, Any]:
        plan = self._load_plan_by_slug(plan_slug)
        summary = self._serialize_plan(plan)
        summary["daily_structure"] = plan.daily_structure.model_dump(mode="json")
        return summary

    # Enrollment

    def list_user_plans(self, user_id: int, include_archived: bool = False) -> List[Dict[str, Any]]:
        rows = UserReadingPlanRepository.list_user_plans(user_id, include_archived=include_archived)
        summaries = []
        for row in rows:
            user_plan = UserPlan.model_validate(row)
            summaries.append(self._serialize_summary(user_plan, self._load_plan(user_plan.plan_id)))
        return summaries

    def start_plan(
        self,
        *,
        user_id: int,
        plan_slug: str,
        start_date: Optional[str] = None,
        nickname: Optional[str] = None,
    ) -> Dict[str, Any]:
        plan = self._load_plan_by_slug(plan_slug)
        if not plan.is_active:
            raise ValidationError("Reading plan is not open for enrollment")

        normalized_start = parse_local_date(start_date, self.settings.default_timezone, "start_date")
        cleaned_nickname = nickname.strip() if nickname else None

        positions: Dict[str, int] = {}
        if isinstance(plan.daily_structure, CyclingListsStructure):
            positions = {reading_list.id: 0 for reading_list in plan.daily_structure.lists}

        row = UserReadingPlanRepository.create_user_plan(
            user_id=user_id,
            plan_id=plan.id,
            start_date=normalized_start,
            nickname=cleaned_nickname or None,
            list_positions=positions,
        )
        logger.info(f"User {user_id} started plan '{plan.slug}'")
        return self._serialize_summary(UserPlan.model_validate(row), plan)

    def set_archived(self, *, user_id: int, user_plan_id: int, archived: bool) -> Dict[str, Any]:
        self._load_user_plan(user_id, user_plan_id)
        if not UserReadingPlanRepository.set_archived(user_id, user_plan_id, archived):
            raise UserPlanNotFoundError()
        user_plan = self._load_user_plan(user_id, user_plan_id)
        return self._serialize_summary(user_plan, self._load_plan(user_plan.plan_id))

    def delete_plan(self, *, user_id: int, user_plan_id: int) -> None:
        self._load_user_plan(user_id, user_plan_id)
        if not UserReadingPlanRepository.delete_plan(user_id, user_plan_id):
            raise UserPlanNotFoundError()

    # Progress

    def get_user_plan_detail(
        self,
        *,
        user_id: int,
        user_plan_id: int,
        local_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        progress_date = parse_local_date(local_date, self.settings.default_timezone)
        user_plan = self._load_user_plan(user_id, user_plan_id)
        plan = self._load_plan(user_plan.plan_id)
        record = self._load_record(user_plan_id, progress_date)
        return self._serialize_detail(user_plan, plan, record, progress_date, self._streak_minimum(user_id))

    def toggle_completion(
        self,
        *,
        user_id: int,
        user_plan_id: int,
        unit_id: str,
        local_date: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        def apply(plan, user_plan, record, progress_date):
            return progress_mutator.toggle_completion(plan, user_plan, record, unit_id, progress_date)

        return self._mutate(user_id, user_plan_id, local_date, expected_version, apply)

    def set_completion(
        self,
        *,
        user_id: int,
        user_plan_id: int,
        unit_id: str,
        is_complete: bool,
        local_date: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        def apply(plan, user_plan, record, progress_date):
            return progress_mutator.mark_completion(
                plan, user_plan, record, unit_id, progress_date, completed=is_complete
            )

        return self._mutate(user_id, user_plan_id, local_date, expected_version, apply)

    def advance(
        self,
        *,
        user_id: int,
        user_plan_id: int,
        list_id: Optional[str] = None,
        local_date: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        def apply(plan, user_plan, record, progress_date):
            return progress_mutator.advance(plan, user_plan, record, list_id=list_id)

        return self._mutate(user_id, user_plan_id, local_date, expected_version, apply)

    def _mutate(self, user_id, user_plan_id, local_date, expected_version, apply) -> Dict[str, Any]:
        progress_date = parse_local_date(local_date, self.settings.default_timezone)
        user_plan = self._load_user_plan(user_id, user_plan_id)
        progress_mutator.check_version(user_plan, expected_version)
        plan = self._load_plan(user_plan.plan_id)
        record = self._load_record(user_plan_id, progress_date)

        result = apply(plan, user_plan, record, progress_date)

        saved_record = result.record
        record_changed = saved_record is not None and saved_record != record
        saved_plan = user_plan
        if record_changed or result.user_plan != user_plan:
            try:
                row = UserReadingPlanRepository.save_progress(
                    user_plan_id,
                    expected_version=user_plan.version,
                    current_day=result.user_plan.current_day,
                    list_positions=result.user_plan.list_positions,
                    is_completed=result.user_plan.is_completed,
                    completed_at=result.user_plan.completed_at,
                    record=saved_record.model_dump() if record_changed else None,
                )
            except psycopg2.Error as exc:
                logger.error(f"Failed to save progress for user plan {user_plan_id}: {exc}")
                raise DatabaseError("Failed to save reading progress") from exc
            saved_plan = UserPlan.model_validate(row)

        payload = self._serialize_detail(
            saved_plan, plan, saved_record, progress_date, self._streak_minimum(user_id)
        )
        payload["cycle_completed"] = result.cycle_completed
        payload["plan_completed"] = result.plan_completed
        return payload

    # Statistics

    def get_user_stats(self, *, user_id: int, local_date: Optional[str] = None) -> Dict[str, Any]:
        today = parse_local_date(local_date, self.settings.default_timezone)
        threshold = self._streak_minimum(user_id)

        user_plans = [
            UserPlan.model_validate(row)
            for row in UserReadingPlanRepository.list_user_plans(user_id, include_archived=True)
        ]
        structures = {up.id: self._load_plan(up.plan_id).daily_structure for up in user_plans}

        records = [
            DailyProgressRecord.model_validate(row)
            for row in DailyProgressRepository.get_progress_history(user_id=user_id, end_date=today)
        ]

        streaks = compute_streaks(
            records,
            threshold,
            structures=structures,
            today=today,
            default_threshold=self.settings.default_streak_minimum,
        )
        chapters_today = sum(
            chapters_for_record(record, structures.get(record.user_plan_id))
            for record in records
            if record.progress_date == today
        )

        return {
            "total_chapters_read": sum(
                chapters_for_record(record, structures.get(record.user_plan_id)) for record in records
            ),
            "current_streak": streaks.current_streak,
            "longest_streak": streaks.longest_streak,
            "total_days_reading": streaks.qualifying_day_count,
            "plans_completed": sum(1 for up in user_plans if up.is_completed),
            "plans_active": sum(1 for up in user_plans if not up.is_completed and not up.is_archived),
            "streak_minimum": streaks.daily_threshold,
            "rank": asdict(get_streak_rank(streaks.current_streak)),
            "daily_goal": asdict(daily_goal_status(chapters_today, streaks.daily_threshold)),
        }

    def get_streak_minimum(self, *, user_id: int) -> Dict[str, int]:
        return {"streak_minimum": self._streak_minimum(user_id)}

    def update_streak_minimum(self, *, user_id: int, streak_minimum: int) -> Dict[str, int]:
        if streak_minimum < 1 or streak_minimum > self.settings.max_streak_minimum:
            raise ValidationError(
                f"streak_minimum must be between 1 and {self.settings.max_streak_minimum}"
            )
        stored = UserProfileRepository.set_streak_minimum(user_id, streak_minimum)
        if stored is None:
            raise ValidationError("User not found")
        return {"streak_minimum": stored}

    # Loading helpers

    def _load_plan(self, plan_id: int) -> ReadingPlan:
        cached = CacheService.get_plan(plan_id)
        if cached is not None:
            return ReadingPlan.model_validate(cached)

        row = ReadingPlanRepository.get_plan(plan_id)
        if not row:
            raise PlanNotFoundError()
        plan = ReadingPlan.model_validate(row)
        CacheService.set_plan(plan_id, plan.model_dump(mode="json"))
        return plan

    def _load_plan_by_slug(self, plan_slug: str) -> ReadingPlan:
        cached = CacheService.get_plan_by_slug(plan_slug)
        if cached is not None:
            return ReadingPlan.model_validate(cached)

        row = ReadingPlanRepository.get_plan_by_slug(plan_slug)
        if not row:
            raise PlanNotFoundError()
        plan = ReadingPlan.model_validate(row)
        CacheService.set_plan_by_slug(plan_slug, plan.model_dump(mode="json"))
        return plan

    @staticmethod
    def _load_user_plan(user_id: int, user_plan_id: int) -> UserPlan:
        row = UserReadingPlanRepository.get_user_plan(user_id, user_plan_id)
        if not row:
            raise UserPlanNotFoundError()
        return UserPlan.model_validate(row)

    @staticmethod
    def _load_record(user_plan_id: int, progress_date: date) -> Optional[DailyProgressRecord]:
        row = DailyProgressRepository.get_progress_record(user_plan_id, progress_date)
        return DailyProgressRecord.model_validate(row) if row else None

    def _streak_minimum(self, user_id: int) -> int:
        value = UserProfileRepository.get_streak_minimum(user_id)
        if value is None or value <= 0:
            return self.settings.default_streak_minimum
        return value

    # Serialization

    @staticmethod
    def _serialize_plan(plan: ReadingPlan) -> Dict[str, Any]:
        return {
            "id": plan.id,
            "slug": plan.slug,
            "name": plan.name,
            "description": plan.description,
            "duration_days": plan.duration_days,
            "structure_type": plan.daily_structure.type,
        }

    @classmethod
    def _serialize_summary(cls, user_plan: UserPlan, plan: ReadingPlan) -> Dict[str, Any]:
        return {
            "id": user_plan.id,
            "plan": cls._serialize_plan(plan),
            "start_date": user_plan.start_date.isoformat(),
            "nickname": user_plan.nickname,
            "current_day": user_plan.current_day,
            "list_positions": dict(user_plan.list_positions),
            "is_completed": user_plan.is_completed,
            "completed_at": user_plan.completed_at.isoformat() if user_plan.completed_at else None,
            "is_archived": user_plan.is_archived,
            "version": user_plan.version,
            "created_at": user_plan.created_at.isoformat() if user_plan.created_at else None,
            "percent_complete": percent_complete(user_plan, plan),
        }

    @classmethod
    def _serialize_detail(
        cls,
        user_plan: UserPlan,
        plan: ReadingPlan,
        record: Optional[DailyProgressRecord],
        progress_date: date,
        streak_minimum: int,
    ) -> Dict[str, Any]:
        readings = resolve_readings(plan, user_plan, record)
        chapters_today = chapters_for_record(record, plan.daily_structure) if record else 0

        summary = cls._serialize_summary(user_plan, plan)
        summary.update(
            {
                "progress_date": progress_date.isoformat(),
                "readings": [unit.model_dump() for unit in readings],
                "day_complete": bool(readings) and is_day_complete(readings),
                "list_cycle_progress": list_cycle_progress(user_plan, plan),
                "days_on_plan": days_on_plan(user_plan.start_date, progress_date),
                "schedule_offset": None if plan.is_cycling else schedule_offset(user_plan, progress_date),
                "chapters_read_today": chapters_today,
                "daily_goal": asdict(daily_goal_status(chapters_today, streak_minimum)),
            }
        )
        return summary


def get_reading_plan_tracking_service() -> ReadingPlanTrackingService:
    return ReadingPlanTrackingService()
