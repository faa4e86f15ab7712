"""Repository backing curated reading plans."""
import json
from typing import Any, Dict, List, Optional

from reading_quest.database import get_db_connection


class ReadingPlanRepository:
    """Repository backing curated reading plans."""

    PLAN_FIELDS = "id, slug, name, description, duration_days, daily_structure, is_active"

    @staticmethod
    def _normalize_structure(row: Dict[str, Any]) -> Dict[str, Any]:
        structure = row.get("daily_structure")
        if isinstance(structure, str):
            row["daily_structure"] = json.loads(structure)
        return row

    @classmethod
    def list_plans(cls, active_only: bool = True) -> List[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {cls.PLAN_FIELDS}
                    FROM reading_plans
                    WHERE is_active = TRUE OR %s = FALSE
                    ORDER BY name ASC
                    """,
                    (active_only,),
                )
                rows = cur.fetchall()
        return [cls._normalize_structure(dict(row)) for row in rows]

    @classmethod
    def get_plan(cls, plan_id: int) -> Optional[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {cls.PLAN_FIELDS}
                    FROM reading_plans
                    WHERE id = %s
                    LIMIT 1
                    """,
                    (plan_id,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return cls._normalize_structure(dict(row))

    @classmethod
    def get_plan_by_slug(cls, slug: str) -> Optional[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {cls.PLAN_FIELDS}
                    FROM reading_plans
                    WHERE LOWER(slug) = LOWER(%s)
                    LIMIT 1
                    """,
                    (slug,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return cls._normalize_structure(dict(row))

    @staticmethod
    def publish_plan(
        *,
        slug: str,
        name: str,
        description: Optional[str],
        duration_days: int,
        daily_structure: Dict[str, Any],
    ) -> Optional[int]:
        """Publish a plan definition; an existing slug is left untouched and yields None."""
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO reading_plans (slug, name, description, duration_days, daily_structure)
                    VALUES (%s, %s, %s, %s, %s::jsonb)
                    ON CONFLICT (slug) DO NOTHING
                    RETURNING id
                    """,
                    (slug, name, description, duration_days, json.dumps(daily_structure)),
                )
                row = cur.fetchone()
                conn.commit()
        return row["id"] if row else None
