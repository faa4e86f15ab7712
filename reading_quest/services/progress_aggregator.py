"""Percent-complete and schedule figures for a tracked plan."""
from __future__ import annotations

from datetime import date
from typing import Dict

from reading_quest.models.plan_structure import (
    CyclingListsStructure,
    ReadingPlan,
    SectionalStructure,
    SequentialStructure,
    UserPlan,
    assert_never_structure,
)


def list_cycle_progress(user_plan: UserPlan, plan: ReadingPlan) -> Dict[str, int]:
    """Percent through the current cycle of each list; empty for day-based plans."""
    structure = plan.daily_structure
    if not isinstance(structure, CyclingListsStructure):
        return {}
    progress: Dict[str, int] = {}
    for reading_list in structure.lists:
        position = user_plan.list_positions.get(reading_list.id, 0) % reading_list.total_chapters
        progress[reading_list.id] = round(position / reading_list.total_chapters * 100)
    return progress


def percent_complete(user_plan: UserPlan, plan: ReadingPlan) -> int:
    """Overall progress as an integer percentage in [0, 100].

    Cycling plans never end, so they report the mean progress through the
    current cycle of their lists instead.
    """
    structure = plan.daily_structure
    if isinstance(structure, CyclingListsStructure):
        cycles = list_cycle_progress(user_plan, plan)
        return round(sum(cycles.values()) / len(cycles)) if cycles else 0
    if isinstance(structure, (SequentialStructure, SectionalStructure)):
        if user_plan.is_completed:
            return 100
        if plan.duration_days <= 0:
            return 0
        percent = round((user_plan.current_day - 1) / plan.duration_days * 100)
        return max(0, min(100, percent))
    assert_never_structure(structure)


def days_on_plan(start_date: date, today: date) -> int:
    """Calendar days since enrolling, counting the start date as day 1."""
    return (today - start_date).days + 1


def schedule_offset(user_plan: UserPlan, today: date) -> int:
    """Days ahead (positive) or behind (negative) of a one-day-per-day pace."""
    return user_plan.current_day - days_on_plan(user_plan.start_date, today)
