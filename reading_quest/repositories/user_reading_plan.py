"""Repository for user-specific reading plan enrollments and their position."""
import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from reading_quest.database import get_db_connection
from reading_quest.utils.exceptions import StaleStateError


class UserReadingPlanRepository:
    """Repository for user-specific reading plan enrollments and their position."""

    SUMMARY_FIELDS = (
        "id, user_id, plan_id, start_date, current_day, list_positions, is_completed, "
        "completed_at, is_archived, version, nickname, created_at"
    )

    @staticmethod
    def _normalize_positions(row: Dict[str, Any]) -> Dict[str, Any]:
        positions = row.get("list_positions")
        if isinstance(positions, str):
            row["list_positions"] = json.loads(positions)
        elif positions is None:
            row["list_positions"] = {}
        return row

    @classmethod
    def create_user_plan(
        cls,
        *,
        user_id: int,
        plan_id: int,
        start_date: date,
        nickname: Optional[str],
        list_positions: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO user_reading_plans
                        (user_id, plan_id, start_date, nickname, list_positions)
                    VALUES (%s, %s, %s, %s, %s::jsonb)
                    RETURNING {cls.SUMMARY_FIELDS}
                    """,
                    (user_id, plan_id, start_date, nickname, json.dumps(list_positions or {})),
                )
                row = cur.fetchone()
                conn.commit()
        return cls._normalize_positions(dict(row))

    @classmethod
    def list_user_plans(cls, user_id: int, include_archived: bool = False) -> List[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {cls.SUMMARY_FIELDS}
                    FROM user_reading_plans
                    WHERE user_id = %s AND (is_archived = FALSE OR %s = TRUE)
                    ORDER BY created_at DESC
                    """,
                    (user_id, include_archived),
                )
                rows = cur.fetchall()
        return [cls._normalize_positions(dict(row)) for row in rows]

    @classmethod
    def get_user_plan(cls, user_id: int, user_plan_id: int) -> Optional[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {cls.SUMMARY_FIELDS}
                    FROM user_reading_plans
                    WHERE user_id = %s AND id = %s
                    LIMIT 1
                    """,
                    (user_id, user_plan_id),
                )
                row = cur.fetchone()
        if not row:
            return None
        return cls._normalize_positions(dict(row))

    @classmethod
    def save_progress(
        cls,
        user_plan_id: int,
        *,
        expected_version: int,
        current_day: int,
        list_positions: Dict[str, int],
        is_completed: bool,
        completed_at: Optional[datetime],
        record: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Persist a position and the day's progress record in one transaction.

        The position update only applies while the stored version still equals
        ``expected_version``; otherwise nothing is written and
        ``StaleStateError`` is raised. Every successful save bumps the version.
        """
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE user_reading_plans
                    SET current_day = %s,
                        list_positions = %s::jsonb,
                        is_completed = %s,
                        completed_at = %s,
                        version = version + 1
                    WHERE id = %s AND version = %s
                    RETURNING {cls.SUMMARY_FIELDS}
                    """,
                    (
                        current_day,
                        json.dumps(list_positions),
                        is_completed,
                        completed_at,
                        user_plan_id,
                        expected_version,
                    ),
                )
                row = cur.fetchone()
                if row is None:
                    conn.rollback()
                    raise StaleStateError()

                if record is not None:
                    cur.execute(
                        """
                        INSERT INTO daily_progress
                            (user_plan_id, progress_date, day_number, completed_sections, is_complete)
                        VALUES (%s, %s, %s, %s, %s)
                        ON CONFLICT (user_plan_id, progress_date)
                        DO UPDATE SET day_number = EXCLUDED.day_number,
                                      completed_sections = EXCLUDED.completed_sections,
                                      is_complete = EXCLUDED.is_complete,
                                      updated_at = CURRENT_TIMESTAMP
                        """,
                        (
                            user_plan_id,
                            record["progress_date"],
                            record["day_number"],
                            sorted(record["completed_sections"]),
                            record["is_complete"],
                        ),
                    )
                conn.commit()
        return cls._normalize_positions(dict(row))

    @staticmethod
    def set_archived(user_id: int, user_plan_id: int, archived: bool) -> bool:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE user_reading_plans
                    SET is_archived = %s
                    WHERE id = %s AND user_id = %s
                    RETURNING id
                    """,
                    (archived, user_plan_id, user_id),
                )
                updated = cur.fetchone() is not None
                conn.commit()
        return updated

    @staticmethod
    def delete_plan(user_id: int, user_plan_id: int) -> bool:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM user_reading_plans
                    WHERE id = %s AND user_id = %s
                    RETURNING id
                    """,
                    (user_plan_id, user_id),
                )
                deleted = cur.fetchone() is not None
                conn.commit()
        return deleted
