"""HTTP-level tests for the v1 API."""

import pytest
from fastapi.testclient import TestClient

from gigmarket.api.deps import get_job_service, get_profile_inspector, get_session_factory
from gigmarket.core.security import create_access_token
from gigmarket.main import app
from gigmarket.utils.constants import ROLE_STUDENT

JOB_PAYLOAD = {
    "title": "Weekend barista",
    "description": "Serve coffee at a two-day event",
    "category": "hospitality",
    "budget": "500.00",
    "duration": "7 days",
    "job_type": "offline",
    "location": {"city": "Pune", "address": "FC Road"},
}


@pytest.fixture
def client(session_factory):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


def post_job(client, employer, **overrides):
    response = client.post("/api/v1/jobs", json={**JOB_PAYLOAD, **overrides}, headers=auth(employer))
    assert response.status_code == 201, response.text
    return response.json()["job"]


class TestAuth:
    def test_missing_token(self, client):
        response = client.get("/api/v1/wallet")
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/wallet", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_admin_routes_require_admin(self, client, student):
        response = client.post(
            f"/api/v1/wallet/users/{student.id}/credit", json={"amount": "10.00"}, headers=auth(student)
        )
        assert response.status_code == 403


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["message"] == "Gig Marketplace API"

    def test_health_reports_scheduler(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["scheduler"] == {"running": False}


class TestJobsApi:
    def test_student_cannot_post_job(self, client, student):
        response = client.post("/api/v1/jobs", json=JOB_PAYLOAD, headers=auth(student))

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Only employers can create jobs",
            "kind": "forbidden",
        }

    def test_invalid_job_type_rejected_by_schema(self, client, employer):
        response = client.post("/api/v1/jobs", json={**JOB_PAYLOAD, "job_type": "hybrid"}, headers=auth(employer))
        assert response.status_code == 422

    def test_incomplete_profile_lists_missing_fields(self, client, make_user):
        employer = make_user("employer", profile={})

        response = client.post("/api/v1/jobs", json=JOB_PAYLOAD, headers=auth(employer))

        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "validation"
        assert body["missing_fields"] == ["businessName", "businessLocation"]

    def test_apply_is_idempotent(self, client, employer, student):
        job = post_job(client, employer)

        first = client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=auth(student))
        second = client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=auth(student))

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["message"] == "You have already applied for this job"
        assert first.json()["application"]["id"] == second.json()["application"]["id"]

    def test_students_only_see_their_own_application(self, client, employer, student, make_user):
        job = post_job(client, employer)
        other = make_user(ROLE_STUDENT)
        client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=auth(student))
        client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=auth(other))

        as_student = client.get(f"/api/v1/jobs/{job['id']}", headers=auth(student)).json()["job"]
        as_owner = client.get(f"/api/v1/jobs/{job['id']}", headers=auth(employer)).json()["job"]

        assert [a["student_id"] for a in as_student["applications"]] == [str(student.id)]
        assert len(as_owner["applications"]) == 2

    def test_unknown_job(self, client, student):
        response = client.get("/api/v1/jobs/6c1f0b52-1e1e-4a8b-9a51-000000000000", headers=auth(student))
        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    def test_full_flow_over_http(self, client, employer, student):
        job = post_job(client, employer)
        job_url = f"/api/v1/jobs/{job['id']}"

        application = client.post(f"{job_url}/apply", json={}, headers=auth(student)).json()["application"]
        accepted = client.post(f"{job_url}/applications/{application['id']}/accept", headers=auth(employer))
        assert accepted.status_code == 200, accepted.text

        assert client.post(f"{job_url}/accept-assignment", headers=auth(student)).status_code == 200

        funded = client.post(f"/api/v1/payments/jobs/{job['id']}/fund", headers=auth(employer))
        assert funded.status_code == 200, funded.text
        assert funded.json()["transaction"]["type"] == "payment"

        submitted = client.post(
            f"{job_url}/submit", json={"description": "Done", "attachments": []}, headers=auth(student)
        ).json()
        assert submitted["on_time_awarded"] is True

        approved = client.post(f"{job_url}/approve", headers=auth(employer)).json()
        assert approved["completion_awarded"] is True

        released = client.post(f"/api/v1/payments/jobs/{job['id']}/release", headers=auth(employer))
        assert released.status_code == 200, released.text
        body = released.json()
        assert body["payout"] == "475.00"
        assert body["commission_amount"] == "25.00"
        assert body["job"]["status"] == "paid"

        again = client.post(f"/api/v1/payments/jobs/{job['id']}/release", headers=auth(employer))
        assert again.status_code == 400
        assert again.json()["kind"] == "conflict"

        score = client.get("/api/v1/users/me/score", headers=auth(student)).json()
        assert score["score"] == 47
        assert [h["event"] for h in score["history"]] == ["job_completed", "on_time_submission"]

        history = client.get("/api/v1/wallet/transactions", headers=auth(student)).json()
        assert history["total"] == 1
        assert history["transactions"][0]["type"] == "earning"


class TestWalletApi:
    def test_missing_wallet(self, client, admin):
        response = client.get("/api/v1/wallet", headers=auth(admin))
        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    def test_create_wallet_is_idempotent(self, client, make_user):
        user = make_user(ROLE_STUDENT)

        created = client.post("/api/v1/wallet", headers=auth(user))
        assert created.status_code == 201
        assert created.json()["wallet"]["user_id"] == str(user.id)

        again = client.post("/api/v1/wallet", headers=auth(user))
        assert again.json()["wallet"]["id"] == created.json()["wallet"]["id"]

    def test_unverified_phone_cannot_create_wallet(self, client, make_user):
        user = make_user(ROLE_STUDENT, verified=False)

        response = client.post("/api/v1/wallet", headers=auth(user))

        assert response.status_code == 400
        assert response.json()["kind"] == "validation"

    def test_admin_credit_and_withdraw(self, client, admin, student):
        credited = client.post(
            f"/api/v1/wallet/users/{student.id}/credit", json={"amount": "200.00"}, headers=auth(admin)
        )
        assert credited.status_code == 201, credited.text

        withdrawal = client.post("/api/v1/wallet/withdraw", json={"amount": "50.00"}, headers=auth(student))
        assert withdrawal.status_code == 201
        assert withdrawal.json()["transaction"]["status"] == "pending"

        too_much = client.post("/api/v1/wallet/withdraw", json={"amount": "500.00"}, headers=auth(student))
        assert too_much.status_code == 400
        assert too_much.json()["kind"] == "insufficient_funds"

        deposits = client.get("/api/v1/wallet/transactions?type=deposit", headers=auth(student)).json()
        assert deposits["total"] == 1


class TestNotificationsApi:
    def test_inbox_flow(self, client, employer, student):
        job = post_job(client, employer)
        client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=auth(student))
        client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=auth(student))

        listed = client.get("/api/v1/notifications", headers=auth(employer)).json()
        assert listed["unread_count"] == 1
        [notification] = listed["notifications"]
        assert notification["event"] == "application_received"

        assert client.get("/api/v1/notifications", headers=auth(student)).json()["total"] == 0
        foreign = client.put(f"/api/v1/notifications/{notification['id']}/read", headers=auth(student))
        assert foreign.status_code == 404

        read = client.put(f"/api/v1/notifications/{notification['id']}/read", headers=auth(employer))
        assert read.json()["notification"]["is_read"] is True

        stats = client.get("/api/v1/notifications/stats", headers=auth(employer)).json()["stats"]
        assert stats["by_event"] == {"application_received": {"total": 1, "unread": 0}}

        deleted = client.delete(f"/api/v1/notifications/{notification['id']}", headers=auth(employer))
        assert deleted.status_code == 200
        assert client.get("/api/v1/notifications", headers=auth(employer)).json()["total"] == 0

    def test_mark_read_requires_ids(self, client, student):
        response = client.put("/api/v1/notifications/mark-read", json={"notification_ids": []}, headers=auth(student))
        assert response.status_code == 422


class TestReviewsApi:
    def test_review_after_payment(self, client, employer, student):
        job = post_job(client, employer)
        job_url = f"/api/v1/jobs/{job['id']}"
        application = client.post(f"{job_url}/apply", json={}, headers=auth(student)).json()["application"]
        client.post(f"{job_url}/applications/{application['id']}/accept", headers=auth(employer))

        early = client.post("/api/v1/reviews", json={"job_id": job["id"], "rating": 5}, headers=auth(employer))
        assert early.status_code == 400
        assert early.json()["message"] == "Can only review completed jobs"

        client.post(f"{job_url}/accept-assignment", headers=auth(student))
        client.post(f"/api/v1/payments/jobs/{job['id']}/fund", headers=auth(employer))
        client.post(f"{job_url}/submit", json={"description": "Done", "attachments": []}, headers=auth(student))
        client.post(f"{job_url}/approve", headers=auth(employer))
        client.post(f"/api/v1/payments/jobs/{job['id']}/release", headers=auth(employer))

        pending = client.get("/api/v1/reviews/pending", headers=auth(employer)).json()["pending"]
        assert [p["job"]["id"] for p in pending] == [job["id"]]

        bad = client.post("/api/v1/reviews", json={"job_id": job["id"], "rating": 6}, headers=auth(employer))
        assert bad.status_code == 422

        created = client.post(
            "/api/v1/reviews",
            json={"job_id": job["id"], "rating": 4, "aspect_ratings": {"quality": 5}},
            headers=auth(employer),
        )
        assert created.status_code == 201, created.text
        review = created.json()["review"]
        assert review["reviewee_id"] == str(student.id)

        duplicate = client.post("/api/v1/reviews", json={"job_id": job["id"], "rating": 4}, headers=auth(employer))
        assert duplicate.status_code == 400
        assert duplicate.json()["message"] == "You have already reviewed this job"

        responded = client.put(
            f"/api/v1/reviews/{review['id']}/respond", json={"comment": "Thank you!"}, headers=auth(student)
        )
        assert responded.json()["review"]["response_comment"] == "Thank you!"

        listed = client.get(f"/api/v1/reviews/user/{student.id}", headers=auth(employer)).json()
        assert listed["total"] == 1
        assert listed["stats"]["average_rating"] == 4.0
        assert listed["stats"]["average_aspect_ratings"]["quality"] == 5.0

        stats = client.get(f"/api/v1/reviews/stats/{student.id}", headers=auth(student)).json()
        assert stats["distribution"] == {"4": 1}

        given = client.get("/api/v1/reviews/my-reviews?type=given", headers=auth(employer)).json()
        assert len(given["reviews"]) == 1


class TestServiceWiring:
    def test_requests_share_one_profile_inspector(self, session_factory):
        first = get_job_service(session_factory, None, None, get_profile_inspector())
        second = get_job_service(session_factory, None, None, get_profile_inspector())

        assert first.inspection_queue.inspector is second.inspection_queue.inspector
        assert first._owns_inspector is False
