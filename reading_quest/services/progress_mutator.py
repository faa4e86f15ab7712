"""Apply completion and advancement events to a tracked plan.

Every function here is pure: it takes the current ``UserPlan`` and the day's
``DailyProgressRecord`` and returns new values in a ``MutationResult``. The
caller persists the result and is responsible for serializing mutations per
user plan (see ``check_version``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from reading_quest.models.plan_structure import (
    CyclingListsStructure,
    DailyProgressRecord,
    ReadingPlan,
    SectionalStructure,
    SequentialStructure,
    UserPlan,
    assert_never_structure,
    completion_token,
    parse_completion_token,
    sequential_unit_id,
)
from reading_quest.services.reading_resolver import (
    completed_day_units,
    current_day_entry,
    is_day_complete,
    normalize_position,
    required_day_units,
    resolve_readings,
)
from reading_quest.utils.exceptions import (
    InvalidAddressingError,
    OutOfOrderAdvanceError,
    PlanCompletedError,
    StaleStateError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    user_plan: UserPlan
    record: Optional[DailyProgressRecord]
    cycle_completed: bool = False
    plan_completed: bool = False


def check_version(user_plan: UserPlan, expected_version: Optional[int]) -> None:
    """Reject a mutation computed from an outdated copy of the user plan."""
    if expected_version is not None and expected_version != user_plan.version:
        logger.info(
            f"Stale state for user plan {user_plan.id}: expected v{expected_version}, current v{user_plan.version}"
        )
        raise StaleStateError()


def _is_index(value: str) -> bool:
    return value.isascii() and value.isdigit()


def validate_token(plan: ReadingPlan, token: str) -> None:
    """Raise ``InvalidAddressingError`` unless ``token`` addresses a unit of ``plan``."""
    try:
        scope, unit = parse_completion_token(token)
    except ValueError as err:
        raise InvalidAddressingError(str(err)) from err

    structure = plan.daily_structure
    if isinstance(structure, CyclingListsStructure):
        reading_list = structure.get_list(scope)
        if reading_list is None:
            raise InvalidAddressingError(f"Unknown reading list '{scope}'")
        if not _is_index(unit) or int(unit) >= reading_list.total_chapters:
            raise InvalidAddressingError(f"Chapter index {unit} is out of range for list '{scope}'")
        return

    if not _is_index(scope):
        raise InvalidAddressingError(f"Invalid day in completion token {token!r}")
    entry = current_day_entry(structure, int(scope))
    if entry is None:
        raise InvalidAddressingError(f"Day {scope} does not exist in this plan")

    if isinstance(structure, SequentialStructure):
        if structure.split_chapters:
            valid = {sequential_unit_id(i) for i in range(structure.required_chapters(entry))}
        else:
            valid = {sequential_unit_id()}
    elif isinstance(structure, SectionalStructure):
        valid = {section.id for section in entry.sections}
    else:
        assert_never_structure(structure)

    if unit not in valid:
        raise InvalidAddressingError(f"'{unit}' is not a reading for day {scope}")


def _ensure_record(
    user_plan: UserPlan,
    record: Optional[DailyProgressRecord],
    progress_date: date,
) -> DailyProgressRecord:
    if record is None:
        return DailyProgressRecord.empty(user_plan.id, progress_date, user_plan.current_day)
    if record.user_plan_id != user_plan.id or record.progress_date != progress_date:
        raise ValueError(
            f"Progress record ({record.user_plan_id}, {record.progress_date}) "
            f"does not belong to user plan {user_plan.id} on {progress_date}"
        )
    return record


def _with_tokens(
    plan: ReadingPlan,
    user_plan: UserPlan,
    record: DailyProgressRecord,
    tokens: frozenset,
) -> DailyProgressRecord:
    structure = plan.daily_structure
    if isinstance(structure, CyclingListsStructure):
        return record.model_copy(update={"completed_sections": tokens, "is_complete": False})

    day = user_plan.current_day
    required = required_day_units(structure, day)
    is_complete = required > 0 and completed_day_units(day, tokens) >= required
    return record.model_copy(
        update={"completed_sections": tokens, "day_number": day, "is_complete": is_complete}
    )


def toggle_completion(
    plan: ReadingPlan,
    user_plan: UserPlan,
    record: Optional[DailyProgressRecord],
    target: str,
    progress_date: date,
) -> MutationResult:
    """Mark ``target`` if it is unmarked, unmark it otherwise.

    Marking is limited to the units resolved for the current position. Any
    well-formed token already on the record may be unmarked, so a reader can
    undo a chapter after advancing past it. Positions never change here.
    """
    record = _ensure_record(user_plan, record, progress_date)
    tokens = record.completed_sections

    if target in tokens:
        validate_token(plan, target)
        new_tokens = tokens - {target}
    else:
        due = {unit.id for unit in resolve_readings(plan, user_plan, record)}
        if target not in due:
            validate_token(plan, target)
            raise InvalidAddressingError(f"'{target}' is not due for the current position")
        new_tokens = tokens | {target}

    return MutationResult(user_plan=user_plan, record=_with_tokens(plan, user_plan, record, new_tokens))


def mark_completion(
    plan: ReadingPlan,
    user_plan: UserPlan,
    record: Optional[DailyProgressRecord],
    target: str,
    progress_date: date,
    completed: bool = True,
) -> MutationResult:
    """Set-based variant of ``toggle_completion``; repeating a call is a no-op."""
    current = _ensure_record(user_plan, record, progress_date)
    if (target in current.completed_sections) == completed:
        validate_token(plan, target)
        return MutationResult(user_plan=user_plan, record=current)
    return toggle_completion(plan, user_plan, current, target, progress_date)


def _advance_cycling(
    structure: CyclingListsStructure,
    user_plan: UserPlan,
    record: Optional[DailyProgressRecord],
    list_id: Optional[str],
) -> MutationResult:
    """Move one list forward a chapter.

    Only today's record is consulted, so a list whose every chapter was
    marked today (always the case for a one-chapter list once read) may be
    advanced again without new reading. Tokens are not added here, so the
    repeat never changes chapter counts.
    """
    reading_list = structure.get_list(list_id) if list_id else None
    if reading_list is None:
        raise InvalidAddressingError(f"Unknown reading list '{list_id}'")

    position = normalize_position(reading_list, user_plan.list_positions.get(reading_list.id, 0))
    tokens = record.completed_sections if record is not None else frozenset()
    if completion_token(reading_list.id, position) not in tokens:
        raise OutOfOrderAdvanceError(f"Mark {reading_list.label} chapter as read before continuing")

    next_position = position + 1
    cycle_completed = next_position >= reading_list.total_chapters
    if cycle_completed:
        next_position = 0
        logger.info(f"User plan {user_plan.id} finished a cycle of list '{reading_list.id}'")

    positions = {**user_plan.list_positions, reading_list.id: next_position}
    updated = user_plan.model_copy(update={"list_positions": positions})
    return MutationResult(user_plan=updated, record=record, cycle_completed=cycle_completed)


def _advance_day(
    plan: ReadingPlan,
    user_plan: UserPlan,
    record: Optional[DailyProgressRecord],
    now: datetime,
) -> MutationResult:
    if user_plan.is_completed:
        raise PlanCompletedError()

    units = resolve_readings(plan, user_plan, record)
    if not is_day_complete(units):
        remaining = sum(1 for unit in units if not unit.is_completed)
        raise OutOfOrderAdvanceError(
            f"Day {user_plan.current_day} still has {remaining} unfinished reading(s)"
        )

    next_day = user_plan.current_day + 1
    duration = plan.duration_days
    if duration > 0 and next_day > duration:
        updated = user_plan.model_copy(
            update={
                "current_day": duration + 1,
                "is_completed": True,
                "completed_at": now,
            }
        )
        logger.info(f"User plan {user_plan.id} completed '{plan.slug}'")
        return MutationResult(user_plan=updated, record=record, plan_completed=True)

    updated = user_plan.model_copy(update={"current_day": next_day})
    return MutationResult(user_plan=updated, record=record)


def advance(
    plan: ReadingPlan,
    user_plan: UserPlan,
    record: Optional[DailyProgressRecord],
    list_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> MutationResult:
    """Move the position forward once the current readings are complete.

    Cycling plans advance one list (``list_id``) by a chapter and wrap to the
    start at the end of the list. Day-based plans advance ``current_day`` and
    become completed once it passes ``duration_days``.
    """
    if record is not None and record.user_plan_id != user_plan.id:
        raise ValueError(f"Progress record does not belong to user plan {user_plan.id}")

    structure = plan.daily_structure
    if isinstance(structure, CyclingListsStructure):
        return _advance_cycling(structure, user_plan, record, list_id)
    if isinstance(structure, (SequentialStructure, SectionalStructure)):
        if list_id is not None:
            raise InvalidAddressingError("list_id only applies to cycling list plans")
        return _advance_day(plan, user_plan, record, now or datetime.now(timezone.utc))
    assert_never_structure(structure)
