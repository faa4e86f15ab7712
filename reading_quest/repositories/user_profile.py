"""Repository for per-user reading preferences."""
from typing import Any, Dict, Optional

from reading_quest.database import get_db_connection


class UserProfileRepository:
    """Repository for per-user reading preferences."""

    @staticmethod
    def get_user(user_id: int) -> Optional[Dict[str, Any]]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, email, username, is_active, streak_minimum, created_at
                    FROM users
                    WHERE id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()
        return dict(row) if row else None

    @staticmethod
    def get_streak_minimum(user_id: int) -> Optional[int]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT streak_minimum FROM users WHERE id = %s",
                    (user_id,),
                )
                row = cur.fetchone()
        return row["streak_minimum"] if row else None

    @staticmethod
    def set_streak_minimum(user_id: int, streak_minimum: int) -> Optional[int]:
        with get_db_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE users
                    SET streak_minimum = %s
                    WHERE id = %s
                    RETURNING streak_minimum
                    """,
                    (streak_minimum, user_id),
                )
                row = cur.fetchone()
                conn.commit()
        return row["streak_minimum"] if row else None
