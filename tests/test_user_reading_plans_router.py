"""Tests for user reading plan tracking endpoints."""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from reading_quest.main import app
from reading_quest.auth import get_current_user_dependency
from reading_quest.routers import user_reading_plans
from reading_quest.services.reading_plan_tracking_service import ReadingPlanTrackingService
from reading_quest.utils.exceptions import (
    InvalidAddressingError,
    OutOfOrderAdvanceError,
    StaleStateError,
)

client = TestClient(app)


@pytest.fixture(autouse=True)
def clear_overrides():
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_user():
    return {"id": 42, "email": "user@example.com", "is_active": True}


def _mock_service() -> Mock:
    return Mock(spec=ReadingPlanTrackingService)


def _apply_common_overrides(service_mock: Mock, user: dict):
    app.dependency_overrides[get_current_user_dependency] = lambda: user
    app.dependency_overrides[user_reading_plans.get_reading_plan_tracking_service] = lambda: service_mock


def _summary(**overrides):
    base = {
        "id": 1,
        "plan": {
            "id": 4,
            "slug": "wisdom-and-gospel",
            "name": "Wisdom and Gospel",
            "description": "",
            "duration_days": 3,
            "structure_type": "sectional",
        },
        "start_date": "2026-03-01",
        "nickname": None,
        "current_day": 1,
        "list_positions": {},
        "is_completed": False,
        "completed_at": None,
        "is_archived": False,
        "version": 0,
        "created_at": "2026-03-01T00:00:00+00:00",
        "percent_complete": 0,
    }
    base.update(overrides)
    return base


def _detail(**overrides):
    base = _summary()
    base.update(
        {
            "progress_date": "2026-03-01",
            "readings": [
                {"id": "1:psalm", "label": "Psalm", "passage": "Psalm 1", "is_completed": True},
                {"id": "1:proverb", "label": "Proverb", "passage": "Proverbs 1", "is_completed": False},
            ],
            "day_complete": False,
            "list_cycle_progress": {},
            "days_on_plan": 1,
            "schedule_offset": 0,
            "chapters_read_today": 1,
            "daily_goal": {"chapters_read": 1, "goal": 3, "progress": 1, "met": False, "remaining": 2},
        }
    )
    base.update(overrides)
    return base


def test_list_user_reading_plans_returns_payload(mock_user):
    service_mock = _mock_service()
    service_mock.list_user_plans.return_value = [_summary()]
    _apply_common_overrides(service_mock, mock_user)

    response = client.get("/api/user-reading-plans?include_archived=true")

    assert response.status_code == 200
    assert response.json()[0]["plan"]["slug"] == "wisdom-and-gospel"
    service_mock.list_user_plans.assert_called_once_with(mock_user["id"], include_archived=True)


def test_start_user_reading_plan_creates_entry(mock_user):
    service_mock = _mock_service()
    service_mock.start_plan.return_value = _summary(id=2, nickname="Family")
    _apply_common_overrides(service_mock, mock_user)

    response = client.post(
        "/api/user-reading-plans",
        json={"plan_slug": "wisdom-and-gospel", "nickname": "Family"},
    )

    assert response.status_code == 201
    assert response.json()["nickname"] == "Family"
    service_mock.start_plan.assert_called_once_with(
        user_id=mock_user["id"], plan_slug="wisdom-and-gospel", start_date=None, nickname="Family"
    )


def test_get_detail_passes_local_date(mock_user):
    service_mock = _mock_service()
    service_mock.get_user_plan_detail.return_value = _detail()
    _apply_common_overrides(service_mock, mock_user)

    response = client.get("/api/user-reading-plans/1?local_date=2026-03-01")

    assert response.status_code == 200
    assert response.json()["readings"][0]["id"] == "1:psalm"
    service_mock.get_user_plan_detail.assert_called_once_with(
        user_id=mock_user["id"], user_plan_id=1, local_date="2026-03-01"
    )


def test_toggle_completion(mock_user):
    service_mock = _mock_service()
    service_mock.toggle_completion.return_value = {**_detail(version=1), "cycle_completed": False, "plan_completed": False}
    _apply_common_overrides(service_mock, mock_user)

    response = client.post(
        "/api/user-reading-plans/1/completions/toggle",
        json={"unit_id": "1:psalm", "local_date": "2026-03-01", "expected_version": 0},
    )

    assert response.status_code == 200
    assert response.json()["version"] == 1
    service_mock.toggle_completion.assert_called_once_with(
        user_id=mock_user["id"], user_plan_id=1, unit_id="1:psalm",
        local_date="2026-03-01", expected_version=0,
    )


def test_set_completion(mock_user):
    service_mock = _mock_service()
    service_mock.set_completion.return_value = _detail()
    _apply_common_overrides(service_mock, mock_user)

    response = client.put(
        "/api/user-reading-plans/1/completions",
        json={"unit_id": "1:psalm", "is_complete": True},
    )

    assert response.status_code == 200
    assert response.json()["cycle_completed"] is False
    service_mock.set_completion.assert_called_once_with(
        user_id=mock_user["id"], user_plan_id=1, unit_id="1:psalm",
        is_complete=True, local_date=None, expected_version=None,
    )


def test_advance_reports_cycle_completion(mock_user):
    service_mock = _mock_service()
    service_mock.advance.return_value = {**_detail(), "cycle_completed": True, "plan_completed": False}
    _apply_common_overrides(service_mock, mock_user)

    response = client.post("/api/user-reading-plans/1/advance", json={"list_id": "gospels"})

    assert response.status_code == 200
    assert response.json()["cycle_completed"] is True
    service_mock.advance.assert_called_once_with(
        user_id=mock_user["id"], user_plan_id=1, list_id="gospels",
        local_date=None, expected_version=None,
    )


@pytest.mark.parametrize(
    "error,status_code",
    [
        (OutOfOrderAdvanceError(), 409),
        (StaleStateError(), 409),
        (InvalidAddressingError("Unknown reading list 'romans'"), 422),
    ],
)
def test_advance_errors_are_mapped(mock_user, error, status_code):
    service_mock = _mock_service()
    service_mock.advance.side_effect = error
    _apply_common_overrides(service_mock, mock_user)

    response = client.post("/api/user-reading-plans/1/advance", json={})

    assert response.status_code == status_code
    assert response.json()["detail"] == error.detail


def test_empty_unit_id_rejected(mock_user):
    service_mock = _mock_service()
    _apply_common_overrides(service_mock, mock_user)

    response = client.post("/api/user-reading-plans/1/completions/toggle", json={"unit_id": ""})

    assert response.status_code == 422
    service_mock.toggle_completion.assert_not_called()


def test_stats(mock_user):
    service_mock = _mock_service()
    service_mock.get_user_stats.return_value = {
        "total_chapters_read": 40,
        "current_streak": 8,
        "longest_streak": 12,
        "total_days_reading": 14,
        "plans_completed": 1,
        "plans_active": 2,
        "streak_minimum": 3,
        "rank": {"rank": "SOLDIER", "next_rank": "WARRIOR", "days_to_next": 22},
        "daily_goal": {"chapters_read": 3, "goal": 3, "progress": 3, "met": True, "remaining": 0},
    }
    _apply_common_overrides(service_mock, mock_user)

    response = client.get("/api/user-reading-plans/stats?local_date=2026-03-10")

    assert response.status_code == 200
    assert response.json()["rank"]["rank"] == "SOLDIER"
    service_mock.get_user_stats.assert_called_once_with(user_id=mock_user["id"], local_date="2026-03-10")


def test_archive_and_unarchive(mock_user):
    service_mock = _mock_service()
    service_mock.set_archived.return_value = _summary(is_archived=True)
    _apply_common_overrides(service_mock, mock_user)

    assert client.post("/api/user-reading-plans/1/archive").status_code == 200
    assert client.post("/api/user-reading-plans/1/unarchive").status_code == 200
    assert service_mock.set_archived.call_args_list[0][1] == {"user_id": 42, "user_plan_id": 1, "archived": True}
    assert service_mock.set_archived.call_args_list[1][1] == {"user_id": 42, "user_plan_id": 1, "archived": False}


def test_delete_user_reading_plan_returns_no_content(mock_user):
    service_mock = _mock_service()
    _apply_common_overrides(service_mock, mock_user)

    response = client.delete("/api/user-reading-plans/1")

    assert response.status_code == 204
    service_mock.delete_plan.assert_called_once_with(user_id=mock_user["id"], user_plan_id=1)


def test_requires_authentication():
    response = client.get("/api/user-reading-plans")

    assert response.status_code == 401
