# tests/test_api.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from tracker import config
from tracker.db.config import get_session, get_session_factory
from tracker.main import app


@pytest.fixture()
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_session_factory] = lambda: (lambda: Session(engine))
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    token = jwt.encode({"sub": user_id, "email": "user@example.com"}, config.AUTH_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_metrics_lists_engine_counters(client) -> None:
    counters = client.get("/metrics").json()["counters"]

    assert "occurrences_materialized_total" in counters
    assert "sweep_runs_total" in counters


def test_create_task(client, make_user) -> None:
    user = make_user()

    response = client.post(
        f"/api/{user.id}/tasks",
        json={
            "title": "Water plants",
            "scheduled_date": "2024-06-10T09:00:00Z",
            "is_recurring": True,
            "recurring_pattern": {"frequency": "weekly", "interval": 1, "endDate": "2024-12-31T00:00:00Z"},
        },
        headers=auth_headers(user.id),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Water plants"
    assert body["scheduled_date"] == "2024-06-10T09:00:00"
    assert body["is_recurring"] is True
    assert body["depth"] == 0


def test_create_rejects_fourth_level(client, make_user, make_task) -> None:
    user = make_user()
    grandchild = make_task(user, title="Leaf", depth=2)

    response = client.post(
        f"/api/{user.id}/tasks",
        json={"title": "Too deep", "parent_id": grandchild.id},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 400


def test_missing_token_is_unauthorized(client, make_user) -> None:
    user = make_user()

    response = client.post(f"/api/{user.id}/tasks", json={"title": "No auth"})

    assert response.status_code == 401


def test_other_users_resources_are_forbidden(client, make_user) -> None:
    owner = make_user()
    intruder = make_user()

    response = client.get(f"/api/{owner.id}/streak", headers=auth_headers(intruder.id))

    assert response.status_code == 403


def test_complete_returns_next_occurrence(client, make_user, make_task) -> None:
    user = make_user()
    task = make_task(user, title="Standup", pattern={"frequency": "daily", "interval": 1},
                     scheduled_date=datetime(2024, 6, 10, 9))

    response = client.patch(f"/api/{user.id}/tasks/{task.id}/complete", headers=auth_headers(user.id))

    assert response.status_code == 200
    body = response.json()
    assert body["task"]["is_completed"] is True
    assert body["next_occurrence"]["scheduled_date"] == "2024-06-11T09:00:00"
    assert body["next_occurrence"]["recurring_parent_id"] == task.id
    assert body["next_occurrence"]["is_completed"] is False


def test_complete_unknown_task_is_not_found(client, make_user) -> None:
    user = make_user()

    response = client.patch(f"/api/{user.id}/tasks/9999/complete", headers=auth_headers(user.id))

    assert response.status_code == 404


def test_uncomplete_reopens_task(client, make_user, make_task) -> None:
    user = make_user()
    task = make_task(user, is_completed=True, completed_at=datetime(2024, 6, 10, 9))

    response = client.patch(f"/api/{user.id}/tasks/{task.id}/uncomplete", headers=auth_headers(user.id))

    assert response.status_code == 200
    assert response.json()["is_completed"] is False
    assert response.json()["completed_at"] is None


def test_schedule_includes_virtual_occurrences(client, make_user, make_task) -> None:
    user = make_user()
    anchor = make_task(user, title="Journal", pattern={"frequency": "daily", "interval": 1},
                       scheduled_date=datetime(2024, 6, 10, 12))

    response = client.get(
        f"/api/{user.id}/schedule",
        params={"start": "2024-06-10", "days": 7},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 200
    schedule = response.json()
    assert sorted(schedule) == [f"2024-06-{d:02d}" for d in range(10, 17)]
    assert schedule["2024-06-10"][0]["id"] == anchor.id
    assert schedule["2024-06-10"][0]["is_virtual"] is False
    virtual = [entry for day in schedule.values() for entry in day if entry["is_virtual"]]
    assert len(virtual) == 6
    assert virtual[0]["id"] == f"{anchor.id}-recurring-2024-06-11"


def test_schedule_rejects_oversized_window(client, make_user) -> None:
    user = make_user()

    response = client.get(f"/api/{user.id}/schedule", params={"days": 90}, headers=auth_headers(user.id))

    assert response.status_code == 422


def test_streak_endpoint(client, make_user) -> None:
    user = make_user(current_streak=3, longest_streak=8)

    response = client.get(f"/api/{user.id}/streak", headers=auth_headers(user.id))

    assert response.status_code == 200
    assert response.json()["current_streak"] == 3
    assert response.json()["longest_streak"] == 8


def test_cron_requires_shared_secret(client) -> None:
    assert client.post("/api/cron/check-streaks").status_code == 401
    response = client.post("/api/cron/check-streaks", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_cron_runs_sweep(client, make_user, method) -> None:
    make_user()

    response = client.request(
        method,
        "/api/cron/check-streaks",
        headers={"Authorization": f"Bearer {config.CRON_SECRET}"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "processed" in body and "skipped" in body


def test_serverless_handler_wraps_app() -> None:
    from tracker.wsgi import handler

    assert handler.app is app


def test_cors_preflight_from_local_client(client) -> None:
    response = client.options(
        "/api/someone/schedule",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_recurring_sub_task_is_rejected(client, make_user, make_task) -> None:
    user = make_user()
    parent = make_task(user, title="Workout")

    response = client.post(
        f"/api/{user.id}/tasks",
        json={"title": "Stretch", "parent_id": parent.id, "is_recurring": True,
              "recurring_pattern": {"frequency": "daily"}},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 400


def test_cron_is_closed_without_a_configured_secret(client, monkeypatch) -> None:
    monkeypatch.setattr(config, "CRON_SECRET", "")

    response = client.post("/api/cron/check-streaks", headers={"Authorization": "Bearer guess"})

    assert response.status_code == 503
