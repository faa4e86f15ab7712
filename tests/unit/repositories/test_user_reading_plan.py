"""Tests for UserReadingPlanRepository."""
import json
from datetime import date, datetime

import pytest

from reading_quest.repositories.user_reading_plan import UserReadingPlanRepository
from reading_quest.utils.exceptions import StaleStateError

repository_module = "reading_quest.repositories.user_reading_plan"


def _sample_plan_row(**overrides):
    base = {
        "id": 100, "user_id": 42, "plan_id": 1, "start_date": date(2026, 3, 1),
        "current_day": 1, "list_positions": {"gospels": 3}, "is_completed": False,
        "completed_at": None, "is_archived": False, "version": 0,
        "nickname": None, "created_at": datetime(2026, 3, 1),
    }
    base.update(overrides)
    return base


class TestUserReadingPlanRepository:

    def test_normalize_positions_dict(self):
        row = {"list_positions": {"gospels": 3}}
        assert UserReadingPlanRepository._normalize_positions(row)["list_positions"] == {"gospels": 3}

    def test_normalize_positions_string(self):
        row = {"list_positions": '{"gospels": 3}'}
        assert UserReadingPlanRepository._normalize_positions(row)["list_positions"] == {"gospels": 3}

    def test_normalize_positions_null(self):
        row = {"list_positions": None}
        assert UserReadingPlanRepository._normalize_positions(row)["list_positions"] == {}

    def test_create_user_plan(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = _sample_plan_row()

        result = UserReadingPlanRepository.create_user_plan(
            user_id=42, plan_id=1, start_date=date(2026, 3, 1), nickname=None,
            list_positions={"gospels": 0},
        )

        assert result["id"] == 100
        params = cur.execute.call_args[0][1]
        assert json.loads(params[4]) == {"gospels": 0}
        conn.commit.assert_called_once()

    def test_list_user_plans(self, mock_db):
        conn, cur = mock_db
        cur.fetchall.return_value = [_sample_plan_row()]

        result = UserReadingPlanRepository.list_user_plans(user_id=42)

        assert len(result) == 1
        assert cur.execute.call_args[0][1] == (42, False)

    def test_get_user_plan_not_found(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = None

        assert UserReadingPlanRepository.get_user_plan(user_id=42, user_plan_id=7) is None

    def test_save_progress_writes_position_and_record(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = _sample_plan_row(version=4)
        record = {
            "user_plan_id": 100, "progress_date": date(2026, 3, 2), "day_number": 1,
            "completed_sections": frozenset({"gospels:3", "acts:0"}), "is_complete": False,
        }

        result = UserReadingPlanRepository.save_progress(
            100, expected_version=3, current_day=1, list_positions={"gospels": 4},
            is_completed=False, completed_at=None, record=record,
        )

        assert result["version"] == 4
        assert cur.execute.call_count == 2
        update_sql, update_params = cur.execute.call_args_list[0][0]
        assert "version = version + 1" in update_sql
        assert update_params[-2:] == (100, 3)
        upsert_sql, upsert_params = cur.execute.call_args_list[1][0]
        assert "ON CONFLICT (user_plan_id, progress_date)" in upsert_sql
        assert upsert_params[3] == ["acts:0", "gospels:3"]
        conn.commit.assert_called_once()

    def test_save_progress_without_record_skips_upsert(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = _sample_plan_row(version=1)

        UserReadingPlanRepository.save_progress(
            100, expected_version=0, current_day=2, list_positions={},
            is_completed=False, completed_at=None,
        )

        assert cur.execute.call_count == 1

    def test_save_progress_stale_version(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = None

        with pytest.raises(StaleStateError):
            UserReadingPlanRepository.save_progress(
                100, expected_version=3, current_day=1, list_positions={},
                is_completed=False, completed_at=None,
                record={"progress_date": date(2026, 3, 2), "day_number": 1,
                        "completed_sections": frozenset(), "is_complete": False},
            )

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        assert cur.execute.call_count == 1

    def test_set_archived(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = {"id": 100}

        assert UserReadingPlanRepository.set_archived(42, 100, True) is True
        assert cur.execute.call_args[0][1] == (True, 100, 42)

    def test_delete_plan_not_found(self, mock_db):
        conn, cur = mock_db
        cur.fetchone.return_value = None

        assert UserReadingPlanRepository.delete_plan(42, 100) is False
