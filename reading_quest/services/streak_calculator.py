"""Streak, rank and daily-goal statistics derived from progress history."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from reading_quest.models.plan_structure import (
    CyclingListsStructure,
    DailyProgressRecord,
    DailyStructure,
    SectionalStructure,
    SequentialStructure,
    assert_never_structure,
)
from reading_quest.services.reading_resolver import current_day_entry

logger = logging.getLogger(__name__)

DEFAULT_STREAK_MINIMUM = 3

# (rank, minimum streak days), highest first
STREAK_RANKS = (
    ("LEGENDARY", 90),
    ("VETERAN", 60),
    ("WARRIOR", 30),
    ("SOLDIER", 7),
    ("RECRUIT", 0),
)


@dataclass(frozen=True)
class StreakSummary:
    current_streak: int
    longest_streak: int
    qualifying_day_count: int
    daily_threshold: int


@dataclass(frozen=True)
class StreakRank:
    rank: str
    next_rank: Optional[str]
    days_to_next: int


@dataclass(frozen=True)
class DailyGoal:
    chapters_read: int
    goal: int
    progress: int
    met: bool
    remaining: int


def effective_threshold(daily_threshold: Optional[int], default: int = DEFAULT_STREAK_MINIMUM) -> int:
    """Fall back to ``default`` for a missing or non-positive threshold."""
    if daily_threshold is None or daily_threshold <= 0:
        logger.warning(f"Streak threshold {daily_threshold!r} is misconfigured, using {default}")
        return default
    return daily_threshold


def _day_unit_chapters(structure: SequentialStructure, token: str) -> int:
    scope = token.partition(":")[0]
    entry = current_day_entry(structure, int(scope)) if scope.isascii() and scope.isdigit() else None
    if entry is None:
        return structure.chapters_per_day
    return structure.required_chapters(entry)


def chapters_for_record(
    record: DailyProgressRecord,
    structure: Optional[DailyStructure] = None,
) -> int:
    """Chapters a record represents.

    A whole-day unit of a sequential plan stands for that day's chapter
    quota; every other token is one chapter.
    """
    count = len(record.completed_sections)
    if structure is None:
        return count
    if isinstance(structure, SequentialStructure):
        if structure.split_chapters:
            return count
        return sum(_day_unit_chapters(structure, token) for token in record.completed_sections)
    if isinstance(structure, (CyclingListsStructure, SectionalStructure)):
        return count
    assert_never_structure(structure)


def chapters_by_date(
    records: Iterable[DailyProgressRecord],
    structures: Optional[Mapping[int, DailyStructure]] = None,
) -> Dict[date, int]:
    """Total chapters per local date, summed over every plan with a record that day."""
    structures = structures or {}
    totals: Dict[date, int] = defaultdict(int)
    for record in records:
        totals[record.progress_date] += chapters_for_record(record, structures.get(record.user_plan_id))
    return dict(totals)


def _run_length(dates_desc: List[date], start: int) -> int:
    length = 1
    for index in range(start + 1, len(dates_desc)):
        if dates_desc[index - 1] - dates_desc[index] != timedelta(days=1):
            break
        length += 1
    return length


def compute_streaks(
    records: Iterable[DailyProgressRecord],
    daily_threshold: Optional[int],
    structures: Optional[Mapping[int, DailyStructure]] = None,
    today: Optional[date] = None,
    default_threshold: int = DEFAULT_STREAK_MINIMUM,
) -> StreakSummary:
    """Derive current and longest streaks from a progress history.

    Args:
        records: Progress records in any order, for one plan or all of a user's plans.
        daily_threshold: Chapters needed for a day to count.
        structures: Plan structure per ``user_plan_id`` for chapter weighting.
        today: The user's local date; a streak is current only if its newest day
            is today or yesterday.
    """
    threshold = effective_threshold(daily_threshold, default_threshold)
    today = today or date.today()

    qualifying = sorted(
        (day for day, chapters in chapters_by_date(records, structures).items() if chapters >= threshold),
        reverse=True,
    )
    if not qualifying:
        return StreakSummary(0, 0, 0, threshold)

    longest = 0
    index = 0
    while index < len(qualifying):
        run = _run_length(qualifying, index)
        longest = max(longest, run)
        index += run

    current = 0
    if qualifying[0] in (today, today - timedelta(days=1)):
        current = _run_length(qualifying, 0)

    return StreakSummary(
        current_streak=current,
        longest_streak=longest,
        qualifying_day_count=len(qualifying),
        daily_threshold=threshold,
    )


def get_streak_rank(days: int) -> StreakRank:
    """Map a streak length to its rank and the distance to the next one."""
    for position, (rank, minimum) in enumerate(STREAK_RANKS):
        if days >= minimum:
            if position == 0:
                return StreakRank(rank=rank, next_rank=None, days_to_next=0)
            next_rank, next_minimum = STREAK_RANKS[position - 1]
            return StreakRank(rank=rank, next_rank=next_rank, days_to_next=next_minimum - days)
    # negative input
    return StreakRank(rank="RECRUIT", next_rank="SOLDIER", days_to_next=7)


def daily_goal_status(chapters_today: int, threshold: Optional[int], default_threshold: int = DEFAULT_STREAK_MINIMUM) -> DailyGoal:
    goal = effective_threshold(threshold, default_threshold)
    return DailyGoal(
        chapters_read=chapters_today,
        goal=goal,
        progress=min(chapters_today, goal),
        met=chapters_today >= goal,
        remaining=max(goal - chapters_today, 0),
    )
