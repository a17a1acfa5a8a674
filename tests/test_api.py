import jwt
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from medlink.core.config import settings
from medlink.database import get_session
from medlink.main import app
from medlink.routers.deps import get_ai_provider

SECRET = "test-secret-key-with-enough-length-for-hs256"
MONDAY = "2030-01-07"


class FakeAI:
    reply = '[{"alert_type": "oxygen", "title": "Low SpO2", "severity": "high"}]'

    def generate_text(self, prompt):
        return self.reply


@pytest.fixture
def client(engine, monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY", SECRET)

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_ai_provider] = lambda: FakeAI()
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id, role):
    token = jwt.encode({"userId": user_id, "role": role}, SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


DOCTOR = auth(3, "doctor")
PATIENT = auth(8, "patient")


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["service"] == settings.APP_NAME


def test_missing_token_uses_error_envelope(client):
    res = client.get("/api/trends/")
    assert res.status_code == 401
    assert res.json() == {"success": False, "data": None, "error": "Access token required"}


def test_invalid_token_rejected(client):
    res = client.get("/api/trends/", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_sub_claim_accepted(client):
    token = jwt.encode({"sub": "8", "role": "patient"}, SECRET, algorithm="HS256")
    res = client.get("/api/trends/", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200


def test_role_enforced(client):
    res = client.post("/api/appointments/availability", json={"day_of_week": 1, "start_time": "09:00", "end_time": "11:00"}, headers=PATIENT)
    assert res.status_code == 403


def test_validation_errors_are_400(client):
    res = client.put("/api/appointments/1/status", json={}, headers=PATIENT)
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_booking_flow(client):
    res = client.post("/api/appointments/availability", json={"day_of_week": 1, "start_time": "09:00", "end_time": "11:00"}, headers=DOCTOR)
    assert res.status_code == 201
    assert res.json()["availability"]["day_name"] == "Monday"

    slots = client.get(f"/api/appointments/available-slots/3/{MONDAY}").json()
    assert [s["start_time"] for s in slots] == ["09:00", "10:00"]

    body = {"doctor_id": 3, "appointment_date": MONDAY, "start_time": "09:00", "end_time": "10:00", "appointment_type": "consultation"}
    res = client.post("/api/appointments/", json=body, headers=PATIENT)
    assert res.status_code == 201
    appointment_id = res.json()["appointment"]["id"]

    slots = client.get(f"/api/appointments/available-slots/3/{MONDAY}").json()
    assert [s["start_time"] for s in slots] == ["10:00"]

    clash = dict(body, start_time="09:30", end_time="10:30")
    res = client.post("/api/appointments/", json=clash, headers=auth(9, "patient"))
    assert res.status_code == 409
    assert res.json()["error"] == "Time slot is no longer available"

    res = client.put(f"/api/appointments/{appointment_id}/status", json={"status": "confirmed"}, headers=DOCTOR)
    assert res.json()["appointment"]["status"] == "confirmed"
    assert len(client.get("/api/appointments/doctor", headers=DOCTOR).json()) == 1


def test_slots_reject_bad_date(client):
    res = client.get("/api/appointments/available-slots/3/2030-13-40")
    assert res.status_code == 400


def test_ingest_and_trends(client):
    body = {"data": {"metrics": [
        {"name": "heart_rate", "units": "count/min", "data": [{"Avg": 70, "date": "2024-05-06 08:30:00"}]},
        {"name": "blood_oxygen_saturation", "units": "%", "data": [{"qty": 97, "date": "2024-05-06 08:00:00"}]},
    ]}}
    res = client.post("/api/data", json=body)
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Processed 2 health records", "inserted": 2}

    summary = client.get("/api/health/summary", headers=PATIENT).json()
    assert (summary["realtime"], summary["aggregated"]) == (1, 1)

    trends = client.get("/api/trends/", headers=PATIENT).json()
    assert set(trends) == {"daily", "weekly", "monthly"}
    assert len(trends["daily"]) == 18


def test_ingest_rejects_bad_payload(client):
    res = client.post("/api/data", json={"data": {}})
    assert res.status_code == 400


def test_alert_generation_requires_doctor_link(client):
    res = client.post("/api/alerts/generate", headers=PATIENT)
    assert res.status_code == 400
    assert res.json()["error"] == "Patient is not assigned to a doctor"


def test_alert_lifecycle(client):
    client.post("/api/patients/connect-doctor", json={"doctor_id": 3}, headers=PATIENT)
    assert client.get("/api/patients/connected-doctor", headers=PATIENT).json() == {"doctor_id": 3}

    res = client.post("/api/alerts/generate", headers=PATIENT)
    assert res.status_code == 200
    data = res.json()
    assert data["alerts_created"] == 1
    alert_id = data["alerts"][0]["id"]
    assert data["alerts"][0]["message"] == "Abnormal health pattern detected"

    assert [a["id"] for a in client.get("/api/alerts/doctor", headers=DOCTOR).json()] == [alert_id]
    assert client.put(f"/api/alerts/{alert_id}/read", headers=DOCTOR).json()["alert"]["is_read"] is True
    assert client.put(f"/api/alerts/{alert_id}/dismiss", headers=auth(9, "patient")).status_code == 404
    assert client.put(f"/api/alerts/{alert_id}/dismiss", headers=PATIENT).status_code == 200
    assert client.get("/api/alerts/", headers=PATIENT).json() == []


def test_chat_round_trip(client):
    res = client.post("/api/ai/chat", json={"message": "How did I sleep?"}, headers=PATIENT)
    assert res.status_code == 200
    assert res.json()["message"] == "AI response generated"
    history = client.get("/api/ai/conversations", headers=PATIENT).json()
    assert [m["sender"] for m in history] == ["user", "assistant"]
    assert client.get("/api/doctor/ai/conversations", headers=DOCTOR).json() == []


def test_chat_requires_message(client):
    res = client.post("/api/doctor/ai/chat", json={"message": ""}, headers=DOCTOR)
    assert res.status_code == 400
