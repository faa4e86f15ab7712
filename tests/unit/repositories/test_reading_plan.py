"""Tests for ReadingPlanRepository."""
import json

from reading_quest.repositories.reading_plan import ReadingPlanRepository

repository_module = "reading_quest.repositories.reading_plan"

STRUCTURE = {"type": "sequential", "chapters_per_day": 3, "readings": []}


def _plan_row(**overrides):
    base = {
        "id": 1, "slug": "mark-in-a-week", "name": "Mark in a Week",
        "description": "desc", "duration_days": 7,
        "daily_structure": STRUCTURE, "is_active": True,
    }
    base.update(overrides)
    return base


class TestReadingPlanRepository:

    def test_list_plans(self, mock_db):
        conn, cur = mock_db
        cur.fetchall.return_value = [_plan_row()]

        result = ReadingPlanRepository.list_plans()

        assert len(result) == 1
        assert result[0]["slug"] == "mark-in-a-week"
        assert cur.execute.call_args[0][1] == (True,)

    def test_list_plans_deserializes_structure_string(self, mock_db):
        conn, cur = mock_db
        cur.fetchall.return_value = [_plan_row(daily_structure=json.dumps(STRUCTURE))]

        result = ReadingPlanRepository.list_plans(active_only=False)

        assert result[0]["daily_structure"] == STRUCTURE
        assert cur.execute.call_args[0][1] == (False,)

    def test_get_plan(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = _plan_row()

        result = ReadingPlanRepository.get_plan(1)

        assert result["id"] == 1
        assert cur.execute.call_args[0][1] == (1,)

    def test_get_plan_by_slug(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = _plan_row()

        result = ReadingPlanRepository.get_plan_by_slug("Mark-In-A-Week")

        assert result["name"] == "Mark in a Week"
        assert "LOWER(slug)" in cur.execute.call_args[0][0]

    def test_get_plan_by_slug_not_found(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = None

        assert ReadingPlanRepository.get_plan_by_slug("nonexistent") is None

    def test_publish_plan_returns_new_id(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = {"id": 12}

        plan_id = ReadingPlanRepository.publish_plan(
            slug="mark-in-a-week", name="Mark in a Week", description=None,
            duration_days=7, daily_structure=STRUCTURE,
        )

        assert plan_id == 12
        sql, params = cur.execute.call_args[0]
        assert "ON CONFLICT (slug) DO NOTHING" in sql
        assert json.loads(params[4]) == STRUCTURE
        conn.commit.assert_called_once()

    def test_publish_existing_slug_returns_none(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = None

        plan_id = ReadingPlanRepository.publish_plan(
            slug="mark-in-a-week", name="Mark in a Week", description=None,
            duration_days=7, daily_structure=STRUCTURE,
        )

        assert plan_id is None
