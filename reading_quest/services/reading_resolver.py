"""Resolve the readings that are due for a tracked plan right now."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from reading_quest.models.plan_structure import (
    CyclingListsStructure,
    DailyProgressRecord,
    DayReading,
    ReadingList,
    ReadingPlan,
    ReadingUnit,
    SectionalStructure,
    SequentialDay,
    SequentialStructure,
    UserPlan,
    assert_never_structure,
    completion_token,
    sequential_unit_id,
)

logger = logging.getLogger(__name__)


def list_chapter_refs(reading_list: ReadingList) -> List[Tuple[str, int]]:
    """Flatten a list's books into ``(book, chapter)`` pairs in reading order."""
    return [(entry.book, chapter) for entry in reading_list.books for chapter in entry.chapters]


def normalize_position(reading_list: ReadingList, position: int) -> int:
    if reading_list.total_chapters <= 0:
        return 0
    normalized = position % reading_list.total_chapters
    if normalized != position:
        logger.warning(
            f"List '{reading_list.id}' position {position} out of range, wrapped to {normalized}"
        )
    return normalized


def resolve_chapter(reading_list: ReadingList, index: int) -> str:
    """Return the passage label (``"Matthew 5"``) at a chapter index, wrapping if needed."""
    book, chapter = list_chapter_refs(reading_list)[normalize_position(reading_list, index)]
    return f"{book} {chapter}"


def current_day_entry(
    structure: Union[SequentialStructure, SectionalStructure],
    current_day: int,
) -> Optional[Union[SequentialDay, DayReading]]:
    """Day entries are addressed 1-based; past the last entry there is nothing due."""
    if current_day < 1 or current_day > len(structure.readings):
        return None
    return structure.readings[current_day - 1]


def _tokens(progress: Optional[DailyProgressRecord]) -> frozenset:
    return progress.completed_sections if progress is not None else frozenset()


def _resolve_cycling(
    structure: CyclingListsStructure,
    user_plan: UserPlan,
    tokens: frozenset,
) -> List[ReadingUnit]:
    units: List[ReadingUnit] = []
    for reading_list in structure.lists:
        index = normalize_position(reading_list, user_plan.list_positions.get(reading_list.id, 0))
        token = completion_token(reading_list.id, index)
        units.append(
            ReadingUnit(
                id=token,
                label=reading_list.label,
                passage=resolve_chapter(reading_list, index),
                is_completed=token in tokens,
                list_id=reading_list.id,
                chapter_index=index,
            )
        )
    return units


def _resolve_sequential(
    structure: SequentialStructure,
    user_plan: UserPlan,
    tokens: frozenset,
) -> List[ReadingUnit]:
    entry = current_day_entry(structure, user_plan.current_day)
    if entry is None:
        return []

    day = user_plan.current_day
    if not structure.split_chapters:
        token = completion_token(day, sequential_unit_id())
        return [
            ReadingUnit(
                id=token,
                label=f"Day {day}",
                passage=", ".join(entry.passages),
                is_completed=token in tokens,
            )
        ]

    units: List[ReadingUnit] = []
    required = structure.required_chapters(entry)
    for index in range(required):
        token = completion_token(day, sequential_unit_id(index))
        if index < len(entry.passages):
            passage = entry.passages[index]
        else:
            passage = ", ".join(entry.passages)
        units.append(
            ReadingUnit(
                id=token,
                label=f"Chapter {index + 1} of {required}",
                passage=passage,
                is_completed=token in tokens,
            )
        )
    return units


def _resolve_sectional(
    structure: SectionalStructure,
    user_plan: UserPlan,
    tokens: frozenset,
) -> List[ReadingUnit]:
    entry = current_day_entry(structure, user_plan.current_day)
    if entry is None:
        return []

    units: List[ReadingUnit] = []
    for section in entry.sections:
        token = completion_token(user_plan.current_day, section.id)
        units.append(
            ReadingUnit(
                id=token,
                label=section.label,
                passage=", ".join(section.passages),
                is_completed=token in tokens,
            )
        )
    return units


def resolve_readings(
    plan: ReadingPlan,
    user_plan: UserPlan,
    progress: Optional[DailyProgressRecord] = None,
) -> List[ReadingUnit]:
    """Return the reading units due now, each flagged with today's completion state.

    ``progress`` is the record for the user's current local date, or ``None``
    when nothing has been read yet today. An empty list for a day-based plan
    means the plan has no content left to read.
    """
    structure = plan.daily_structure
    tokens = _tokens(progress)

    if isinstance(structure, CyclingListsStructure):
        return _resolve_cycling(structure, user_plan, tokens)
    if isinstance(structure, SequentialStructure):
        return _resolve_sequential(structure, user_plan, tokens)
    if isinstance(structure, SectionalStructure):
        return _resolve_sectional(structure, user_plan, tokens)
    assert_never_structure(structure)


def is_day_complete(units: List[ReadingUnit]) -> bool:
    """A day with nothing left to read counts as complete."""
    return all(unit.is_completed for unit in units)


def completed_day_units(day: int, tokens: frozenset) -> int:
    """Count the tokens that belong to ``day`` of a day-based plan."""
    prefix = f"{day}:"
    return sum(1 for token in tokens if token.startswith(prefix))


def required_day_units(structure: Union[SequentialStructure, SectionalStructure], day: int) -> int:
    entry = current_day_entry(structure, day)
    if entry is None:
        return 0
    if isinstance(structure, SequentialStructure):
        return structure.required_chapters(entry) if structure.split_chapters else 1
    return len(entry.sections)
