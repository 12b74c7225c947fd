"""
Integration Tests for API Endpoints

Тестируем:
1. API endpoints работают корректно
2. Валидация входных данных
3. Аутентификация и авторизация
4. Живую ленту задач (WebSocket)

Each test gets its own SQLite file and a full application lifespan.
"""

import asyncio
import threading
import time

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from transtrack.api.app import create_app
from transtrack.config import (
    DatabaseSettings,
    PipelineSettings,
    SecuritySettings,
    Settings,
    TranslationSettings,
)

API = "/api/v1"
ADMIN = {"username": "admin", "password": "adminpass"}


class GatedTranslator:
    """Holds every translation until the test releases it."""

    def __init__(self):
        self.release = threading.Event()

    async def translate(self, text, source_language, target_language):
        while not self.release.is_set():
            await asyncio.sleep(0.01)
        return f"[{target_language}] {text}"


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        env="testing",
        debug=False,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"),
        security=SecuritySettings(
            bootstrap_admin_username=ADMIN["username"],
            bootstrap_admin_password=ADMIN["password"],
        ),
        pipeline=PipelineSettings(ingest_delay=0, reconcile_on_startup=False),
        translation=TranslationSettings(success_rate=1.0, min_delay=0, max_delay=0),
    )


@pytest.fixture
def client(app_settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def gated_client(app_settings):
    translator = GatedTranslator()
    with TestClient(create_app(app_settings, translator=translator)) as test_client:
        yield test_client
        translator.release.set()


def login(client, username, password):
    response = client.post(f"{API}/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def create_user(client, admin_headers, username, role="user"):
    response = client.post(
        f"{API}/users",
        json={"username": username, "password": f"{username}-pass", "role": role},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json(), login(client, username, f"{username}-pass")


def submit(client, headers, file_name="report.pdf", **overrides):
    payload = {
        "fileName": file_name,
        "fileSize": 2048,
        "sourceLanguage": "English",
        "targetLanguage": "French",
        **overrides,
    }
    return client.post(f"{API}/jobs", json=payload, headers=headers)


def wait_for_status(client, headers, job_id, statuses, timeout=5.0):
    deadline = time.monotonic() + timeout
    while True:
        job = client.get(f"{API}/jobs/{job_id}", headers=headers).json()
        if job["status"] in statuses:
            return job
        if time.monotonic() > deadline:
            raise AssertionError(f"Job {job_id} stuck in {job['status']}")
        time.sleep(0.02)


class TestHealthEndpoints:
    """Тесты для health check endpoints"""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["app"] == "TransTrack"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestAuthEndpoints:
    def test_login_and_me(self, client):
        headers = login(client, **ADMIN)

        me = client.get(f"{API}/auth/me", headers=headers).json()
        assert me["username"] == "admin"
        assert me["role"] == "admin"

    def test_bad_credentials(self, client):
        response = client.post(f"{API}/auth/login", json={"username": "admin", "password": "nope"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_missing_token(self, client):
        response = client.get(f"{API}/jobs")

        assert response.status_code == 401
        assert response.json()["error"] == "NOT_AUTHENTICATED"

    def test_garbage_token(self, client):
        response = client.get(f"{API}/jobs", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_deleted_account_loses_access(self, client):
        admin_headers = login(client, **ADMIN)
        alice, alice_headers = create_user(client, admin_headers, "alice")

        assert client.delete(f"{API}/users/{alice['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"{API}/jobs", headers=alice_headers).status_code == 401


class TestLanguageEndpoints:
    def test_language_options(self, client):
        data = client.get(f"{API}/languages").json()

        assert len(data["source"]) == 12
        assert len(data["target"]) == 14
        assert "Arabic" in data["target"]
        assert "Arabic" not in data["source"]


class TestJobEndpoints:
    """Submission, pipeline, visibility"""

    def test_submit_and_complete(self, client):
        headers = login(client, **ADMIN)

        response = submit(client, headers)

        assert response.status_code == 201
        created = response.json()
        assert created["fileName"] == "report.pdf"
        assert created["ownerName"] == "admin"
        assert created["status"] in {"queued", "processing", "translating", "completed"}

        job = wait_for_status(client, headers, created["id"], {"completed", "error"})
        assert job["status"] == "completed"
        assert "completedDate" in job
        assert "errorMessage" not in job

    def test_invalid_language(self, client):
        headers = login(client, **ADMIN)

        response = submit(client, headers, sourceLanguage="Klingon")

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert client.get(f"{API}/jobs", headers=headers).json()["jobs"] == []

    def test_oversized_file(self, client):
        headers = login(client, **ADMIN)

        response = submit(client, headers, fileSize=11 * 1024 * 1024)

        assert response.status_code == 422
        assert "10MB" in response.json()["message"]

    def test_malformed_body(self, client):
        headers = login(client, **ADMIN)

        response = client.post(f"{API}/jobs", json={"fileName": "a.pdf"}, headers=headers)

        assert response.status_code == 422
        assert response.json()["details"]

    def test_visibility_by_role(self, client):
        admin_headers = login(client, **ADMIN)
        _, alice_headers = create_user(client, admin_headers, "alice")
        alice_job = submit(client, alice_headers, "alice.pdf").json()
        admin_job = submit(client, admin_headers, "admin.pdf").json()

        alice_view = client.get(f"{API}/jobs", headers=alice_headers).json()
        admin_view = client.get(f"{API}/jobs", headers=admin_headers).json()

        assert [j["id"] for j in alice_view["jobs"]] == [alice_job["id"]]
        assert {j["id"] for j in admin_view["jobs"]} == {alice_job["id"], admin_job["id"]}
        assert admin_view["counts"]["total"] == 2
        assert client.get(f"{API}/jobs/{admin_job['id']}", headers=alice_headers).status_code == 404
        assert client.get(f"{API}/jobs/{alice_job['id']}", headers=admin_headers).status_code == 200

    def test_list_filters(self, client):
        headers = login(client, **ADMIN)
        first = submit(client, headers, "invoice.pdf").json()
        submit(client, headers, "memo.docx")
        wait_for_status(client, headers, first["id"], {"completed"})

        by_name = client.get(f"{API}/jobs", params={"search": "INVOICE"}, headers=headers).json()
        assert [j["fileName"] for j in by_name["jobs"]] == ["invoice.pdf"]

        bad = client.get(f"{API}/jobs", params={"status": "bogus"}, headers=headers)
        assert bad.status_code == 422

    def test_batch_submission(self, client):
        headers = login(client, **ADMIN)
        payload = {
            "files": [
                {"fileName": "a.pdf", "fileSize": 100},
                {"fileName": "b.pptx", "fileSize": 200},
            ],
            "sourceLanguage": "German",
            "targetLanguage": "Turkish",
        }

        response = client.post(f"{API}/jobs/batch", json=payload, headers=headers)

        assert response.status_code == 201
        assert [j["fileName"] for j in response.json()] == ["a.pdf", "b.pptx"]

    def test_batch_is_all_or_nothing(self, client):
        headers = login(client, **ADMIN)
        payload = {
            "files": [
                {"fileName": "a.pdf", "fileSize": 100},
                {"fileName": "virus.exe", "fileSize": 200},
            ],
            "sourceLanguage": "German",
            "targetLanguage": "Turkish",
        }

        assert client.post(f"{API}/jobs/batch", json=payload, headers=headers).status_code == 422
        assert client.get(f"{API}/jobs", headers=headers).json()["counts"]["total"] == 0


class TestStatusCorrection:
    """Manual status changes by admins"""

    def test_admin_can_error_a_running_job(self, gated_client):
        client = gated_client
        headers = login(client, **ADMIN)
        job = submit(client, headers).json()
        wait_for_status(client, headers, job["id"], {"translating"})

        response = client.patch(
            f"{API}/jobs/{job['id']}/status",
            json={"status": "error", "errorMessage": "Cancelled by operator"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "error"
        assert response.json()["errorMessage"] == "Cancelled by operator"

        again = client.patch(f"{API}/jobs/{job['id']}/status", json={"status": "completed"}, headers=headers)
        assert again.status_code == 422
        assert again.json()["error"] == "INVALID_TRANSITION"

    def test_cannot_skip_a_step(self, gated_client):
        client = gated_client
        headers = login(client, **ADMIN)
        job = submit(client, headers).json()
        wait_for_status(client, headers, job["id"], {"translating"})

        response = client.patch(f"{API}/jobs/{job['id']}/status", json={"status": "processing"}, headers=headers)

        assert response.status_code == 422
        assert client.get(f"{API}/jobs/{job['id']}", headers=headers).json()["status"] == "translating"

    def test_users_cannot_correct(self, gated_client):
        client = gated_client
        admin_headers = login(client, **ADMIN)
        _, alice_headers = create_user(client, admin_headers, "alice")
        job = submit(client, alice_headers).json()

        response = client.patch(f"{API}/jobs/{job['id']}/status", json={"status": "error"}, headers=alice_headers)

        assert response.status_code == 403

    def test_unknown_job(self, client):
        headers = login(client, **ADMIN)

        response = client.patch(f"{API}/jobs/nope/status", json={"status": "error"}, headers=headers)

        assert response.status_code == 404

    def test_unknown_status_token(self, client):
        headers = login(client, **ADMIN)
        job = submit(client, headers).json()

        response = client.patch(f"{API}/jobs/{job['id']}/status", json={"status": "done"}, headers=headers)

        assert response.status_code == 422


class TestUserEndpoints:
    def test_admin_manages_users(self, client):
        admin_headers = login(client, **ADMIN)
        alice, _ = create_user(client, admin_headers, "alice")
        assert "createdAt" in alice

        listed = client.get(f"{API}/users", headers=admin_headers).json()
        assert [u["username"] for u in listed] == ["admin", "alice"]

        promoted = client.patch(f"{API}/users/{alice['id']}/role", json={"role": "admin"}, headers=admin_headers)
        assert promoted.json()["role"] == "admin"

    def test_duplicate_username(self, client):
        admin_headers = login(client, **ADMIN)
        create_user(client, admin_headers, "alice")

        response = client.post(
            f"{API}/users",
            json={"username": "alice", "password": "whatever1"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_admin_cannot_delete_self(self, client):
        admin_headers = login(client, **ADMIN)
        me = client.get(f"{API}/auth/me", headers=admin_headers).json()

        assert client.delete(f"{API}/users/{me['id']}", headers=admin_headers).status_code == 422

    def test_users_cannot_manage(self, client):
        admin_headers = login(client, **ADMIN)
        _, alice_headers = create_user(client, admin_headers, "alice")

        assert client.get(f"{API}/users", headers=alice_headers).status_code == 403

    def test_jobs_survive_owner_deletion(self, client):
        admin_headers = login(client, **ADMIN)
        alice, alice_headers = create_user(client, admin_headers, "alice")
        job = submit(client, alice_headers).json()

        client.delete(f"{API}/users/{alice['id']}", headers=admin_headers)

        assert client.get(f"{API}/jobs/{job['id']}", headers=admin_headers).status_code == 200


class TestJobFeed:
    """Live feed over WebSocket"""

    def test_rejects_missing_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"{API}/jobs/feed") as websocket:
                websocket.receive_json()

    def test_pushes_snapshots(self, client):
        headers = login(client, **ADMIN)
        token = headers["Authorization"].split()[1]

        with client.websocket_connect(f"{API}/jobs/feed?token={token}") as websocket:
            initial = websocket.receive_json()
            assert initial["jobs"] == []
            assert initial["counts"]["total"] == 0

            job = submit(client, headers).json()

            for _ in range(20):
                snapshot = websocket.receive_json()
                statuses = {j["id"]: j["status"] for j in snapshot["jobs"]}
                if statuses.get(job["id"]) == "completed":
                    break
            else:
                raise AssertionError("Feed never reported the completed job")
            assert snapshot["counts"]["completed"] == 1
