import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def habit_id(client):
    response = client.post("/api/habits", json={"title": "Read", "frequency": "Daily"})
    assert response.status_code == 201
    return response.json()["id"]


def seed(store, habit):
    asyncio.run(store.save(habit))
    return habit.id


def test_root(client):
    assert client.get("/").json() == {"message": "Welcome to HabitTrack API"}


def test_create_habit(client):
    response = client.post(
        "/api/habits",
        json={"title": "Gym", "frequency": "custom", "selectedDays": ["mon", "thu"], "reminderTime": "07:30"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["frequency"] == "custom"
    assert body["selectedDays"] == ["mon", "thu"]
    assert body["history"] == {}
    assert body["createdAt"] == "2024-01-10T12:00:00"


@pytest.mark.parametrize(
    "payload",
    [
        {"title": ""},
        {"title": "x" * 101},
        {"title": "Gym", "frequency": "hourly"},
        {"title": "Gym", "selectedDays": ["someday"]},
        {"title": "Gym", "reminderTime": "25:00"},
    ],
)
def test_create_habit_validation(client, payload):
    assert client.post("/api/habits", json=payload).status_code == 422


def test_list_habits(client, habit_id):
    response = client.get("/api/habits")
    assert response.status_code == 200
    assert [h["id"] for h in response.json()] == [habit_id]


def test_get_habit_includes_recent_completions(client, store, make_habit):
    habit_id = seed(
        store,
        make_habit(history={"2023-11-01": True, "2024-01-02": True, "2024-01-09": False}),
    )
    body = client.get(f"/api/habits/{habit_id}").json()
    assert body["title"] == "Read"
    assert [c["date"] for c in body["completions"]] == ["2024-01-09", "2024-01-02"]
    assert body["completions"][0] == {"habitId": habit_id, "date": "2024-01-09", "isCompleted": False}


def test_unknown_habit_is_404(client):
    assert client.get("/api/habits/nope").status_code == 404
    assert client.patch("/api/habits/nope", json={"title": "x"}).status_code == 404
    assert client.delete("/api/habits/nope").status_code == 404
    assert client.post("/api/habits/nope/toggle/2024-01-10").status_code == 404
    assert client.get("/api/habits/nope/stats").json() == {"detail": "Habit not found"}


def test_patch_habit(client, habit_id):
    response = client.patch(f"/api/habits/{habit_id}", json={"description": "20 pages"})
    assert response.status_code == 200
    body = response.json()
    assert body["description"] == "20 pages"
    assert body["title"] == "Read"
    assert body["createdAt"] == "2024-01-10T12:00:00"


def test_delete_habit(client, habit_id):
    assert client.delete(f"/api/habits/{habit_id}").status_code == 204
    assert client.get(f"/api/habits/{habit_id}").status_code == 404


def test_toggle_is_an_idempotent_flip(client, habit_id):
    url = f"/api/habits/{habit_id}/toggle/2024-01-10"
    assert client.post(url).json()["isCompleted"] is True
    assert client.post(url).json()["isCompleted"] is False

    history = client.get(f"/api/habits/{habit_id}").json()["history"]
    assert history == {"2024-01-10": False}


def test_toggle_rejects_non_canonical_date(client, habit_id):
    response = client.post(f"/api/habits/{habit_id}/toggle/2024-1-10")
    assert response.status_code == 400


def test_completions_endpoint(client, store, make_habit):
    habit_id = seed(store, make_habit(history={"2024-01-02": True, "2024-01-05": True, "2024-01-09": True}))
    response = client.get(
        f"/api/habits/{habit_id}/completions",
        params={"startDate": "2024-01-03", "endDate": "2024-01-09"},
    )
    assert [c["date"] for c in response.json()] == ["2024-01-09", "2024-01-05"]
    assert client.get(f"/api/habits/{habit_id}/completions", params={"startDate": "soon"}).status_code == 400


def test_stats_endpoint(client, store, make_habit):
    habit_id = seed(
        store,
        make_habit(history={"2024-01-06": True, "2024-01-08": True, "2024-01-09": True}),
    )
    body = client.get(f"/api/habits/{habit_id}/stats").json()
    # Today (Jan 10) still open, so the Jan 8-9 run counts
    assert body == {"currentStreak": 2, "bestStreak": 2, "completionRate": 30, "streakText": "2 day streak"}


def test_calendar_endpoint(client, store, make_habit):
    habit_id = seed(store, make_habit(history={"2024-01-02": True}))
    days = client.get(f"/api/habits/{habit_id}/calendar").json()
    assert len(days) == 31
    assert days[1]["isCompleted"] is True
    assert days[9]["isToday"] is True

    february = client.get(f"/api/habits/{habit_id}/calendar", params={"month": "2024-02"}).json()
    assert len(february) == 29
    assert client.get(f"/api/habits/{habit_id}/calendar", params={"month": "2024-13"}).status_code == 400


def test_accepts_browser_blob_shape(client, store, make_habit):
    habit = make_habit(created_at=datetime(2024, 1, 1))
    seed(store, habit)
    body = client.get("/api/habits").json()[0]
    assert set(body) >= {"id", "title", "frequency", "selectedDays", "reminderEnabled", "createdAt", "history"}


def test_unreadable_store_fails_writes_with_500(client, store):
    store.path.write_text("{not json", encoding="utf-8")
    quiet_client = TestClient(client.app, raise_server_exceptions=False)

    response = quiet_client.post("/api/habits", json={"title": "Walk"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert store.path.read_text(encoding="utf-8") == "{not json"
