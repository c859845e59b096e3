"""End-to-end tests for the HTTP API and the live channel."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from jobboard.api import create_app
from jobboard.config import AppConfig, EnvironmentConfig
from jobboard.domain.models import JobStatus, UserRole
from jobboard.realtime import events
from tests.helpers import make_job, make_jobseeker, make_profile, make_user

SECRET = "api-test-secret-0123456789"


@pytest.fixture
def client(tmp_path):
    env_config = EnvironmentConfig(jwt_secret=SECRET, database_url=f"sqlite:///{tmp_path / 'api.db'}")
    app = create_app(AppConfig(), env_config)
    with TestClient(app) as client:
        yield client


def token_for(client, user):
    return client.app.state.token_service.issue(user.id, user.role)


def auth(client, user):
    return {"Authorization": f"Bearer {token_for(client, user)}"}


def receive_event(ws, name, limit=10):
    """Read frames until one with the given event name arrives."""
    for _ in range(limit):
        frame = ws.receive_json()
        if frame["event"] == name:
            return frame["data"]
    raise AssertionError(f"no {name} frame received")


def open_live(client, user):
    ws = client.websocket_connect(f"/ws?token={token_for(client, user)}")
    ws.__enter__()
    # A ping round trip guarantees the connection has joined its room
    ws.send_json({"event": "ping"})
    receive_event(ws, events.PONG)
    return ws


class TestAuthentication:
    def test_missing_token_is_401(self, client):
        response = client.get("/notifications")

        assert response.status_code == 401
        assert response.json() == {"detail": "Missing bearer token", "error": "unauthorized"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token_is_401(self, client):
        response = client.get("/notifications", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_wrong_role_is_403(self, client):
        seeker = make_user("Jane")
        response = client.post(
            "/jobs",
            json={"title": "Dev", "company": "Acme", "description": "d"},
            headers=auth(client, seeker),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_admin_routes_require_admin(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        assert client.get("/admin/users", headers=auth(client, recruiter)).status_code == 403
        assert client.get("/admin/users").status_code == 401


class TestRequestContext:
    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"x-request-id": "abc-123"})

        assert response.headers["x-request-id"] == "abc-123"
        assert response.json() == {"status": "ok", "connections": 0}

    def test_request_id_is_generated(self, client):
        response = client.get("/jobs")
        assert response.headers["x-request-id"]

    def test_domain_errors_carry_kind(self, client):
        response = client.get("/jobs/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Job not found", "error": "not_found"}
        assert "x-request-id" in response.headers

    def test_non_numeric_id_is_422(self, client):
        assert client.get("/jobs/abc").status_code == 422


class TestJobsApi:
    def test_create_job_returns_camel_case(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)

        response = client.post(
            "/jobs",
            json={
                "title": "Data Engineer",
                "company": "Acme",
                "description": "Pipelines",
                "skills": "python, sql",
                "salaryMin": 100,
                "salaryMax": 200,
                "jobType": "contract",
            },
            headers=auth(client, recruiter),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["postedBy"] == recruiter.id
        assert body["status"] == "open"
        assert body["jobType"] == "contract"
        assert body["salaryMin"] == 100

    def test_invalid_salary_range_is_422(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        response = client.post(
            "/jobs",
            json={"title": "Dev", "company": "Acme", "description": "d", "salaryMin": 5, "salaryMax": 1},
            headers=auth(client, recruiter),
        )
        assert response.status_code == 422

    def test_saved_route_is_not_taken_for_a_job_id(self, client):
        seeker = make_user("Jane")
        job = make_job(None)
        headers = auth(client, seeker)

        assert client.get("/jobs/saved", headers=headers).json() == []
        assert client.post(f"/jobs/{job.id}/save", headers=headers).status_code == 201
        assert client.post(f"/jobs/{job.id}/save", headers=headers).status_code == 201

        [entry] = client.get("/jobs/saved", headers=headers).json()
        assert entry["jobId"] == job.id
        assert entry["job"]["title"] == job.title

        assert client.delete(f"/jobs/{job.id}/save", headers=headers).status_code == 204
        missing = client.delete(f"/jobs/{job.id}/save", headers=headers)
        assert missing.status_code == 404
        assert missing.json()["detail"] == "Saved job not found"

    def test_recommend_response(self, client):
        seeker = make_jobseeker("Jane", skills="python")
        make_job(None, title="Py", skills="python, go")
        make_job(None, title="Closed", skills="python", status=JobStatus.CLOSED)

        response = client.get("/jobs/recommend", headers=auth(client, seeker))

        assert response.status_code == 200
        assert [(job["title"], job["score"]) for job in response.json()] == [("Py", 50)]

    def test_search_response(self, client):
        make_job(None, title="Python Developer", skills="python", job_type="contract")
        make_job(None, title="Accountant", company="Ledger Co", skills="excel")

        response = client.get("/jobs/search", params={"keyword": "python", "jobType": "contract"})

        assert response.status_code == 200
        first, second = response.json()
        assert first["title"] == "Python Developer"
        assert first["matchScore"] == 5 + 3 + 4 + 2
        assert first["matchPercentage"] == round(14 * 100 / 18)
        assert second["matchScore"] == 0
        assert second["matchPercentage"] == 0

    def test_search_rejects_unknown_job_type(self, client):
        assert client.get("/jobs/search", params={"jobType": "freelance"}).status_code == 422

    def test_matched_candidates_response(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        seeker = make_jobseeker("Jane", skills="python", headline="Dev")
        job = make_job(recruiter.id, skills="python, sql")

        response = client.get(f"/jobs/{job.id}/matched-candidates", headers=auth(client, recruiter))

        assert response.status_code == 200
        body = response.json()
        assert body["job"]["id"] == job.id
        assert body["totalMatches"] == 1
        [candidate] = body["candidates"]
        assert candidate["userId"] == seeker.id
        assert candidate["matchScore"] == 50
        assert candidate["headline"] == "Dev"

    def test_matched_candidates_of_someone_elses_job(self, client):
        owner = make_user("Rita", role=UserRole.RECRUITER)
        other = make_user("Ron", role=UserRole.RECRUITER)
        job = make_job(owner.id)

        response = client.get(f"/jobs/{job.id}/matched-candidates", headers=auth(client, other))

        assert response.status_code == 403
        assert response.json() == {"detail": "Not your job", "error": "forbidden"}

    def test_invalid_status_is_400(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        job = make_job(recruiter.id)

        response = client.patch(
            f"/jobs/{job.id}/status", json={"status": "archived"}, headers=auth(client, recruiter)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestApplicationsApi:
    def test_duplicate_application_is_409(self, client):
        seeker = make_jobseeker("Jane")
        job = make_job(None)
        headers = auth(client, seeker)

        assert client.post(f"/applications/{job.id}", headers=headers).status_code == 201
        response = client.post(f"/applications/{job.id}", headers=headers)

        assert response.status_code == 409
        assert response.json() == {"detail": "You have already applied", "error": "conflict"}

        [mine] = client.get("/applications/me", headers=headers).json()
        assert mine["job"]["id"] == job.id
        assert mine["status"] == "pending"

    @pytest.mark.parametrize("role", [UserRole.RECRUITER, UserRole.ADMIN])
    def test_only_jobseekers_may_apply(self, client, role):
        owner = make_user("Rita", role=UserRole.RECRUITER)
        job = make_job(owner.id)
        outsider = make_user("Ron", role=role)
        # A résumé on file, so only the role can stop the application
        make_profile(outsider.id)

        response = client.post(f"/applications/{job.id}", headers=auth(client, outsider))

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        assert client.get(f"/applications/job/{job.id}", headers=auth(client, owner)).json() == []

    def test_recruiter_lists_and_decides(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        seeker = make_jobseeker("Jane", headline="Dev")
        job = make_job(recruiter.id)
        application = client.post(f"/applications/{job.id}", headers=auth(client, seeker)).json()

        [applicant] = client.get(f"/applications/job/{job.id}", headers=auth(client, recruiter)).json()
        assert applicant["applicant"]["name"] == "Jane"
        assert applicant["profile"]["headline"] == "Dev"

        response = client.patch(
            f"/applications/{application['id']}/status",
            json={"status": "accepted"},
            headers=auth(client, recruiter),
        )
        assert response.json()["status"] == "approved"


class TestNotificationsApi:
    def test_inbox_flow(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        seeker = make_jobseeker("Jane Doe")
        job = make_job(recruiter.id, title="SRE")
        client.post(f"/applications/{job.id}", headers=auth(client, seeker))
        headers = auth(client, recruiter)

        [notification] = client.get("/notifications", headers=headers).json()
        assert notification["type"] == "newApplication"
        assert notification["isRead"] is False
        assert notification["message"] == "New application received for SRE from Jane Doe"
        assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 1}

        read = client.patch(f"/notifications/{notification['id']}/read", headers=headers)
        assert read.json()["isRead"] is True
        assert client.patch("/notifications/read-all", headers=headers).json() == {"updated": 0}

    def test_cannot_read_someone_elses_notification(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        seeker = make_jobseeker("Jane")
        job = make_job(recruiter.id)
        client.post(f"/applications/{job.id}", headers=auth(client, seeker))
        [notification] = client.get("/notifications", headers=auth(client, recruiter)).json()

        response = client.patch(f"/notifications/{notification['id']}/read", headers=auth(client, seeker))

        assert response.status_code == 404


class TestAdminApi:
    def test_suspend_recruiter(self, client):
        admin = make_user("Admin", role=UserRole.ADMIN)
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        job = make_job(recruiter.id)

        response = client.patch(
            f"/admin/users/{recruiter.id}/status", json={"status": "suspended"}, headers=auth(client, admin)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "suspended"
        assert client.get(f"/jobs/{job.id}").json()["status"] == "paused"

    def test_list_jobs_with_recruiter(self, client):
        admin = make_user("Admin", role=UserRole.ADMIN)
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        make_job(recruiter.id)

        [job] = client.get("/admin/jobs", headers=auth(client, admin)).json()

        assert job["recruiterName"] == "Rita"
        assert job["recruiterStatus"] == "active"

    def test_delete_job(self, client):
        admin = make_user("Admin", role=UserRole.ADMIN)
        job = make_job(None, title="Spam")

        response = client.delete(f"/admin/jobs/{job.id}", headers=auth(client, admin))

        assert response.json() == {"message": "Job deleted successfully", "jobId": job.id, "jobTitle": "Spam"}
        assert client.get(f"/jobs/{job.id}").status_code == 404


class TestProfileApi:
    def test_partial_updates_keep_other_fields(self, client):
        seeker = make_user("Jane")
        headers = auth(client, seeker)

        assert client.get("/profile", headers=headers).json() is None
        client.post("/profile", json={"skills": "python", "headline": "Dev"}, headers=headers)
        profile = client.post("/profile", json={"resumeUrl": "https://cv.example.com"}, headers=headers).json()

        assert profile["skills"] == "python"
        assert profile["headline"] == "Dev"
        assert profile["resumeUrl"] == "https://cv.example.com"


class TestLiveChannel:
    def test_bad_token_is_rejected_with_policy_violation(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws?token=nope"):
                pass
        assert exc_info.value.code == 1008

    def test_missing_token_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws"):
                pass
        assert exc_info.value.code == 1008

    def test_header_token_ping_and_register(self, client):
        seeker = make_user("Jane")
        with client.websocket_connect("/ws", headers=auth(client, seeker)) as ws:
            ws.send_json({"event": "ping"})
            assert ws.receive_json()["event"] == events.PONG

            ws.send_json({"event": "register", "data": {"userId": seeker.id}})
            assert ws.receive_json() == {"event": "registered", "data": {"ok": True, "room": f"user_{seeker.id}"}}

            assert client.get("/health").json()["connections"] == 1

    def test_binary_and_malformed_frames_are_ignored(self, client):
        seeker = make_user("Jane")
        with client.websocket_connect(f"/ws?token={token_for(client, seeker)}") as ws:
            ws.send_bytes(b"\x00\x01binary")
            ws.send_text("not json")
            ws.send_json({"event": "ping"})

            assert ws.receive_json()["event"] == events.PONG
            assert client.get("/health").json()["connections"] == 1

    def test_application_reaches_recruiter_live(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        seeker = make_jobseeker("Jane")
        job = make_job(recruiter.id, title="SRE")

        ws = open_live(client, recruiter)
        try:
            client.post(f"/applications/{job.id}", headers=auth(client, seeker))
            data = receive_event(ws, events.APP_NEW)
        finally:
            ws.__exit__(None, None, None)

        assert data["jobId"] == job.id
        assert data["applicant"]["name"] == "Jane"

    def test_new_job_reaches_matching_seeker(self, client):
        recruiter = make_user("Rita", role=UserRole.RECRUITER)
        seeker = make_jobseeker("Jane", skills="python")

        ws = open_live(client, seeker)
        try:
            created = client.post(
                "/jobs",
                json={"title": "Dev", "company": "Acme", "description": "d", "skills": "python, go"},
                headers=auth(client, recruiter),
            ).json()
            announced = receive_event(ws, events.JOB_NEW)
            recommended = receive_event(ws, events.JOB_RECOMMENDED)
        finally:
            ws.__exit__(None, None, None)

        assert announced["id"] == created["id"]
        assert recommended["matchScore"] == 50
        [notification] = client.get("/notifications", headers=auth(client, seeker)).json()
        assert notification["type"] == "recommendedJob"
        assert notification["data"] == {"jobId": created["id"], "matchScore": 50}
