"""Repository for per-day reading progress records."""
from datetime import date
from typing import Any, Dict, List, Optional

from reading_quest.database import get_db_connection


class DailyProgressRepository:
    """Repository for per-day reading progress records."""

    RECORD_FIELDS = (
        "dp.user_plan_id, dp.progress_date, dp.day_number, dp.completed_sections, "
        "dp.is_complete, dp.notes"
    )

    @staticmethod
    def _normalize_sections(row: Dict[str, Any]) -> Dict[str, Any]:
        row["completed_sections"] = list(row.get("completed_sections") or [])
        return row

    @classmethod
    def get_progress_record(cls, user_plan_id: int, progress_date: date) -> Optional[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {cls.RECORD_FIELDS}
                    FROM daily_progress dp
                    WHERE dp.user_plan_id = %s AND dp.progress_date = %s
                    LIMIT 1
                    """,
                    (user_plan_id, progress_date),
                )
                row = cur.fetchone()
        if not row:
            return None
        return cls._normalize_sections(dict(row))

    @classmethod
    def get_progress_history(
        cls,
        *,
        user_plan_id: Optional[int] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """Records for one tracked plan or for all of a user's plans, oldest first."""
        if user_plan_id is None and user_id is None:
            raise ValueError("user_plan_id or user_id is required")

        clauses: List[str] = []
        params: List[Any] = []
        if user_plan_id is not None:
            clauses.append("dp.user_plan_id = %s")
            params.append(user_plan_id)
        if user_id is not None:
            clauses.append("urp.user_id = %s")
            params.append(user_id)
        if start_date is not None:
            clauses.append("dp.progress_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("dp.progress_date <= %s")
            params.append(end_date)

        query = [
            f"SELECT {cls.RECORD_FIELDS}",
            "FROM daily_progress dp",
            "JOIN user_reading_plans urp ON urp.id = dp.user_plan_id",
            "WHERE " + " AND ".join(clauses),
            "ORDER BY dp.progress_date ASC, dp.user_plan_id ASC",
        ]

        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("\n".join(query), tuple(params))
                rows = cur.fetchall()
        return [cls._normalize_sections(dict(row)) for row in rows]
