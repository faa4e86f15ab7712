"""Typed reading plan structures, enrollment state and progress records.

A plan's ``daily_structure`` is one of three variants, discriminated by its
``type`` field:

* ``cycling_lists``: independent lists that wrap around when finished.
* ``sequential``: a fixed run of days, each with a chapter quota.
* ``sectional``: a fixed run of days, each split into named sections.

All models are frozen. Position changes are produced with ``model_copy`` so
callers never observe a shared object being mutated.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, NoReturn, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

SEQUENTIAL_DAY_UNIT = "day"
SEQUENTIAL_CHAPTER_PREFIX = "chapter-"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class BookChapters(_Frozen):
    """A run of chapters from one book."""
    book: str
    chapters: List[int] = Field(..., min_length=1)


class ReadingList(_Frozen):
    """A cycling list; chapter indexes address the flattened book/chapter pairs."""
    id: str = Field(..., min_length=1)
    label: str
    books: List[BookChapters] = Field(..., min_length=1)
    total_chapters: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("total_chapters"):
            books = data.get("books") or []
            total = sum(
                len(entry["chapters"] if isinstance(entry, dict) else entry.chapters)
                for entry in books
            )
            data = {**data, "total_chapters": total}
        return data

    @model_validator(mode="after")
    def _check_total(self) -> "ReadingList":
        if ":" in self.id:
            raise ValueError(f"list id '{self.id}' must not contain ':'")
        flattened = sum(len(entry.chapters) for entry in self.books)
        if self.total_chapters != flattened:
            raise ValueError(
                f"list '{self.id}' declares {self.total_chapters} chapters but defines {flattened}"
            )
        return self


class CyclingListsStructure(_Frozen):
    type: Literal["cycling_lists"] = "cycling_lists"
    lists: List[ReadingList] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _unique_ids(self) -> "CyclingListsStructure":
        ids = [reading_list.id for reading_list in self.lists]
        if len(ids) != len(set(ids)):
            raise ValueError("cycling list ids must be unique")
        return self

    def get_list(self, list_id: str) -> Optional[ReadingList]:
        for reading_list in self.lists:
            if reading_list.id == list_id:
                return reading_list
        return None


class SequentialDay(_Frozen):
    day: int = Field(..., ge=1)
    passages: List[str] = Field(default_factory=list)
    chapters: Optional[int] = Field(default=None, ge=1)


class SequentialStructure(_Frozen):
    """Each day has a chapter quota.

    With ``split_chapters`` off, a day is one unit worth ``chapters_per_day``
    chapters; with it on, every chapter is its own unit.
    """
    type: Literal["sequential"] = "sequential"
    chapters_per_day: int = Field(default=3, ge=1)
    split_chapters: bool = False
    readings: List[SequentialDay] = Field(default_factory=list)

    def required_chapters(self, entry: SequentialDay) -> int:
        return entry.chapters or self.chapters_per_day


class ReadingSection(_Frozen):
    id: str = Field(..., min_length=1)
    label: str
    passages: List[str] = Field(default_factory=list)


class DayReading(_Frozen):
    day: int = Field(..., ge=1)
    sections: List[ReadingSection] = Field(..., min_length=1)


class SectionalStructure(_Frozen):
    type: Literal["sectional"] = "sectional"
    sections_per_day: int = Field(..., ge=1)
    readings: List[DayReading] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_days(self) -> "SectionalStructure":
        for entry in self.readings:
            ids = [section.id for section in entry.sections]
            if len(ids) != self.sections_per_day:
                raise ValueError(
                    f"day {entry.day} declares {len(ids)} sections, expected {self.sections_per_day}"
                )
            if len(ids) != len(set(ids)):
                raise ValueError(f"day {entry.day} repeats a section id")
        return self


DailyStructure = Annotated[
    Union[CyclingListsStructure, SequentialStructure, SectionalStructure],
    Field(discriminator="type"),
]

DayBasedStructure = Union[SequentialStructure, SectionalStructure]


def assert_never_structure(structure: Any) -> NoReturn:
    """Fail loudly when a branch on the structure variant is not exhaustive."""
    raise TypeError(f"Unsupported plan structure: {type(structure).__name__}")


class ReadingPlan(_Frozen):
    """Catalog entry authored by content editors; never changed by users."""
    id: int
    slug: str
    name: str
    description: Optional[str] = None
    duration_days: int = Field(default=0, ge=0)
    daily_structure: DailyStructure
    is_active: bool = True

    @property
    def is_cycling(self) -> bool:
        return isinstance(self.daily_structure, CyclingListsStructure)


class UserPlan(_Frozen):
    """A user's enrollment in a plan and its current position."""
    id: int
    user_id: int
    plan_id: int
    start_date: date
    current_day: int = Field(default=1, ge=1)
    list_positions: Dict[str, int] = Field(default_factory=dict)
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    is_archived: bool = False
    version: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    nickname: Optional[str] = None


class DailyProgressRecord(_Frozen):
    """What a user completed for one plan on one local calendar day."""
    user_plan_id: int
    progress_date: date
    day_number: int = Field(default=1, ge=1)
    completed_sections: FrozenSet[str] = Field(default_factory=frozenset)
    is_complete: bool = False
    notes: Optional[str] = None

    @classmethod
    def empty(cls, user_plan_id: int, progress_date: date, day_number: int = 1) -> "DailyProgressRecord":
        return cls(user_plan_id=user_plan_id, progress_date=progress_date, day_number=day_number)


class ReadingUnit(BaseModel):
    """One addressable reading due now; ``id`` is its completion token."""
    id: str
    label: str
    passage: str
    is_completed: bool = False
    list_id: Optional[str] = None
    chapter_index: Optional[int] = None


def completion_token(scope: Union[str, int], unit: Union[str, int]) -> str:
    """Build a token: ``list_id:chapter_index`` or ``day:unit_id``."""
    return f"{scope}:{unit}"


def parse_completion_token(token: str) -> Tuple[str, str]:
    """Split a token at its first ``:``; raises ``ValueError`` when malformed."""
    scope, sep, unit = token.partition(":")
    if not sep or not scope or not unit:
        raise ValueError(f"Malformed completion token: {token!r}")
    return scope, unit


def sequential_unit_id(index: Optional[int] = None) -> str:
    if index is None:
        return SEQUENTIAL_DAY_UNIT
    return f"{SEQUENTIAL_CHAPTER_PREFIX}{index}"
