"""
Integration tests for the HTTP API.
Requests go through the real routers, auth dependencies and error handling,
against the in-memory test database.
"""

import pytest
from fastapi.testclient import TestClient

from skilllink.config import settings
from skilllink.infrastructure.auth.dependencies import get_jwt_handler
from skilllink.infrastructure.auth.jwt_handler import JWTHandler
from skilllink.infrastructure.db.database import get_db
from skilllink.infrastructure.rate_limiting.limiter import get_rate_limiter
from skilllink.main import app


API = settings.api_prefix
JWT = JWTHandler(jwt_secret="integration-test-secret")


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {JWT.generate_test_token(user_id)}"}


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_jwt_handler] = lambda: JWT
    get_rate_limiter().reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


JOB = {
    "title": "Flutter developer for delivery app",
    "description": "Build the rider app for our Lagos delivery service.",
    "budget_min": 500,
    "budget_max": 900,
    "required_skills": ["Flutter", "Dart"],
    "remote": True,
}


class TestPlatform:
    """Test cases for the endpoints outside the routers."""

    def test_health(self, client):
        response = client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json()["dependencies"] == {"database": "ok"}

    def test_root(self, client):
        assert client.get("/").json()["health"] == f"{API}/health"

    def test_unknown_route_envelope(self, client):
        response = client.get(f"{API}/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Not Found"
        assert body["status_code"] == 404

    def test_missing_entity_keeps_message(self, client, marketplace):
        response = client.get(f"{API}/jobs/does-not-exist")

        assert response.status_code == 404
        assert "does-not-exist" in response.json()["message"]


class TestAuthentication:

    def test_token_required(self, client):
        response = client.get(f"{API}/payments/wallet")
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.get(f"{API}/payments/wallet", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_wallet_for_signed_in_user(self, client, marketplace):
        response = client.get(f"{API}/payments/wallet", headers=auth("talent-1"))

        assert response.status_code == 200
        assert response.json()["balance_minor_units"] == 0


class TestJobFlow:
    """Post, moderate, search and apply."""

    def test_post_moderate_and_apply(self, client, marketplace):
        posted = client.post(f"{API}/jobs", json=JOB, headers=auth("employer-1"))
        assert posted.status_code == 201
        job = posted.json()
        assert job["verification_status"] == "unverified"

        awaiting_review = client.get(f"{API}/jobs")
        assert job["id"] in [j["id"] for j in awaiting_review.json()["items"]]

        moderated = client.post(f"{API}/admin/jobs/{job['id']}/moderate", json={"approve": True}, headers=auth("admin-1"))
        assert moderated.status_code == 200
        assert moderated.json()["verification_status"] == "verified"

        listed = client.get(f"{API}/jobs", params={"query": "Flutter"})
        assert [j["id"] for j in listed.json()["items"]] == [job["id"]]

        applied = client.post(
            f"{API}/jobs/{job['id']}/applications",
            json={"proposal_text": "I have shipped three Flutter delivery apps."},
            headers=auth("talent-1")
        )
        assert applied.status_code == 201
        assert applied.json()["status"] == "pending"

        again = client.post(
            f"{API}/jobs/{job['id']}/applications",
            json={"proposal_text": "Applying a second time to be sure."},
            headers=auth("talent-1")
        )
        assert again.status_code == 409

    def test_rejected_job_is_hidden(self, client, marketplace):
        """Test moderation rejection removes a posting from search."""
        job = client.post(f"{API}/jobs", json=JOB, headers=auth("employer-1")).json()

        rejected = client.post(f"{API}/admin/jobs/{job['id']}/moderate", json={"approve": False}, headers=auth("admin-1"))
        assert rejected.status_code == 200
        assert rejected.json()["verification_status"] == "rejected"

        listed = client.get(f"{API}/jobs")
        assert job["id"] not in [j["id"] for j in listed.json()["items"]]

    def test_talent_cannot_post_jobs(self, client, marketplace):
        response = client.post(f"{API}/jobs", json=JOB, headers=auth("talent-1"))
        assert response.status_code == 403

    def test_invalid_body(self, client, marketplace):
        response = client.post(f"{API}/jobs", json={**JOB, "budget_min": 0}, headers=auth("employer-1"))
        assert response.status_code == 422


class TestAdminAndTasks:

    def test_admin_routes_require_admin(self, client, marketplace):
        response = client.get(f"{API}/admin/jobs", headers=auth("employer-1"))

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_cron_secret(self, client, marketplace, monkeypatch):
        """Test the scheduler's shared secret runs tasks without a token."""
        monkeypatch.setattr(settings, "cron_secret", "cron-test-secret")

        allowed = client.post(f"{API}/tasks/escalate-disputes", headers={"X-Cron-Secret": "cron-test-secret"})
        wrong = client.post(f"{API}/tasks/escalate-disputes", headers={"X-Cron-Secret": "guess"})

        assert allowed.status_code == 200
        assert allowed.json()["escalated"] == 0
        assert wrong.status_code == 401

    def test_admin_token_runs_tasks(self, client, marketplace):
        assert client.post(f"{API}/tasks/milestone-reminders", headers=auth("admin-1")).status_code == 200
        assert client.post(f"{API}/tasks/milestone-reminders", headers=auth("talent-1")).status_code == 403

    def test_job_alert_round_trip(self, client, marketplace):
        """Test a saved alert is emailed about a new matching job, then removed."""
        alert = client.post(f"{API}/jobs/alerts", json={"skills": ["flutter"], "frequency": "instant"},
                            headers=auth("talent-1"))
        assert alert.status_code == 201
        client.post(f"{API}/jobs", json=JOB, headers=auth("employer-1"))

        sent = client.post(f"{API}/tasks/send-job-alerts", headers=auth("admin-1"))

        assert sent.status_code == 200
        assert sent.json()["alert_ids"] == [alert.json()["id"]]
        [saved] = client.get(f"{API}/jobs/alerts", headers=auth("talent-1")).json()
        assert saved["last_sent_at"] is not None

        deleted = client.delete(f"{API}/jobs/alerts/{saved['id']}", headers=auth("talent-1"))
        assert deleted.status_code == 204
        assert client.get(f"{API}/jobs/alerts", headers=auth("talent-1")).json() == []


class TestWebhook:

    def test_signature_enforced_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "flutterwave_webhook_hash", "hook-secret")
        payload = {"event": "charge.completed", "data": {"tx_ref": "job-1-1", "status": "successful"}}

        rejected = client.post(f"{API}/payments/webhook", json=payload, headers={"verif-hash": "nope"})

        assert rejected.status_code == 401

    def test_unrelated_event_acknowledged(self, client, monkeypatch):
        monkeypatch.setattr(settings, "flutterwave_webhook_hash", "hook-secret")

        response = client.post(
            f"{API}/payments/webhook",
            json={"event": "transfer.completed", "data": {}},
            headers={"verif-hash": "hook-secret"}
        )

        assert response.status_code == 200
        assert response.json()["handled"] is False
