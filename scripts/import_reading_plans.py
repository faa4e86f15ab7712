"""Publish curated reading plans from a JSON file into the reading_plans table.

Plans are immutable once published: a slug that already exists is skipped,
never overwritten. Ship a new slug to change a plan's content.
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure the backend package is importable when the script is run directly.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import argparse  # noqa: E402
import json  # noqa: E402
import logging  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

from pydantic import BaseModel, Field, ValidationError, model_validator  # noqa: E402

from reading_quest.models.plan_structure import CyclingListsStructure, DailyStructure  # noqa: E402
from reading_quest.repositories import ReadingPlanRepository  # noqa: E402

logger = logging.getLogger("reading-plan-import")

DEFAULT_PLANS_PATH = BACKEND_DIR / "data" / "reading_plans.json"


class PlanDefinition(BaseModel):
    """A plan as authored, before it has a database id."""
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9-]+$")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_days: int = Field(default=0, ge=0)
    daily_structure: DailyStructure

    @model_validator(mode="after")
    def _check_duration(self) -> "PlanDefinition":
        structure = self.daily_structure
        if isinstance(structure, CyclingListsStructure):
            return self
        if self.duration_days != len(structure.readings):
            raise ValueError(
                f"plan '{self.slug}' lasts {self.duration_days} days but defines {len(structure.readings)}"
            )
        days = [entry.day for entry in structure.readings]
        if days != list(range(1, len(days) + 1)):
            raise ValueError(f"plan '{self.slug}' days must run 1..{len(days)} in order")
        return self


def load_definitions(path: Path) -> List[PlanDefinition]:
    with path.open("r", encoding="utf-8") as handle:
        raw: List[Dict[str, Any]] = json.load(handle)
    return [PlanDefinition.model_validate(entry) for entry in raw]


def publish_definitions(definitions: List[PlanDefinition], dry_run: bool = False) -> int:
    """Publish each definition and return how many new plans were created."""
    created = 0
    for definition in definitions:
        if dry_run:
            logger.info("Validated plan '%s' (%s)", definition.slug, definition.daily_structure.type)
            continue
        plan_id = ReadingPlanRepository.publish_plan(
            slug=definition.slug,
            name=definition.name,
            description=definition.description,
            duration_days=definition.duration_days,
            daily_structure=definition.daily_structure.model_dump(mode="json"),
        )
        if plan_id is None:
            logger.info("Plan '%s' already published, skipping", definition.slug)
            continue
        logger.info("Published plan '%s' as id %s", definition.slug, plan_id)
        created += 1
    return created


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish curated reading plans")
    parser.add_argument(
        "--path",
        default=str(DEFAULT_PLANS_PATH),
        help="JSON file containing a list of plan definitions",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing to the database",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)
    path = Path(args.path).expanduser().resolve()
    if not path.exists():
        raise SystemExit(f"Plan file {path} does not exist")

    try:
        definitions = load_definitions(path)
    except ValidationError as exc:
        raise SystemExit(f"Invalid plan file {path}:\n{exc}")

    created = publish_definitions(definitions, dry_run=args.dry_run)
    logger.info("Import complete: %s of %s plan(s) newly published", created, len(definitions))


if __name__ == "__main__":
    main()
