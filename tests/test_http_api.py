"""
Tests for the HTTP API: chat streaming, project status and sync endpoints.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from repochat.configs import get_full_config, settings_from_config
from repochat.http import create_app
from repochat.services import Services
from conftest import FakeProvider, snapshot


def make_settings(codebase_root: Path, **overrides):
    config = get_full_config(codebase_root / "absent.yaml", env={"GITHUB_PAT": "ghp_secret"})
    config.update(
        codebase_root=str(codebase_root),
        projects={
            "frontend": {"name": "Frontend", "folder": "project-frontend", "description": "UI"},
            "backend": {"name": "Backend", "folder": "project-backend"},
            "docs": {"name": "Docs", "folder": "documentation"},
        },
        sync_projects=["project-frontend", "project-backend", "documentation"],
    )
    config.update(overrides)
    return settings_from_config(config)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def services(codebase_root, fake_remote, provider) -> Services:
    return Services(make_settings(codebase_root), remote=fake_remote, provider=provider)


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services))


def sse_events(body: str) -> list:
    """Parse `data:` lines; [DONE] is returned as None."""
    events = []
    for block in body.split("\n\n"):
        if not block.startswith("data: "):
            continue
        data = block[len("data: "):]
        events.append(None if data == "[DONE]" else json.loads(data))
    return events


class TestProjectEndpoints:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["projects"] == ["frontend", "backend", "docs"]

    def test_list_projects(self, client):
        data = client.get("/api/projects").json()
        assert data[0] == {
            "id": "frontend",
            "name": "Frontend",
            "description": "UI",
            "model": data[0]["model"],
        }
        assert [p["id"] for p in data] == ["frontend", "backend", "docs"]

    def test_status_reports_loaded_files(self, client):
        data = client.get("/api/projects/frontend/status").json()
        assert data["status"] == "online"
        assert data["fileCount"] == 2
        assert data["lastLoaded"]

    def test_status_unknown_project_404(self, client):
        response = client.get("/api/projects/nope/status")
        assert response.status_code == 404
        assert response.json()["detail"] == "Project not found"

    def test_refresh_picks_up_disk_changes(self, client, codebase_root):
        assert client.get("/api/projects/frontend/status").json()["fileCount"] == 2
        (codebase_root / "project-frontend" / "notes.md").write_text("# Notes\n")

        # Still served from cache
        assert client.get("/api/projects/frontend/status").json()["fileCount"] == 2

        data = client.post("/api/projects/frontend/refresh").json()
        assert data["success"] is True
        assert data["fileCount"] == 3


class TestChatEndpoint:
    def test_streams_sse(self, client):
        response = client.post("/api/chat", json={"message": "What is this?", "project": "frontend"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert sse_events(response.text) == [
            {"content": "Hello"},
            {"content": ", "},
            {"content": "world"},
            None,
        ]

    def test_defaults_to_first_project(self, client, provider):
        client.post("/api/chat", json={"message": "Hi"})
        system = provider.streams[0][0][0].content
        assert "Current project: Frontend" in system

    def test_history_is_forwarded(self, client, provider):
        client.post(
            "/api/chat",
            json={
                "message": "And now?",
                "project": "frontend",
                "history": [
                    {"role": "user", "content": "First"},
                    {"role": "assistant", "content": "Answer"},
                ],
            },
        )
        messages = provider.streams[0][0]
        assert [m.content for m in messages[1:]] == ["First", "Answer", "And now?"]

    def test_unknown_project_404(self, client):
        response = client.post("/api/chat", json={"message": "Hi", "project": "nope"})
        assert response.status_code == 404

    def test_provider_failure_ends_with_error_event(self, client, provider):
        provider.fail_stream = True
        events = sse_events(client.post("/api/chat", json={"message": "Hi"}).text)
        assert events == [{"content": "Hello"}, {"error": "stream dropped"}]

    def test_error_check_reports_steps(self, client):
        response = client.post(
            "/api/chat",
            json={"message": "", "project": "frontend", "isErrorCheck": True, "code": "x = ("},
        )
        events = sse_events(response.text)
        statuses = [e["status"] for e in events if e and "status" in e]
        assert statuses[0] == "Analyzing code structure..."
        assert len(statuses) == 5
        assert events[-1] is None

    def test_no_projects_503(self, codebase_root, fake_remote, provider):
        settings = make_settings(codebase_root, projects={}, sync_projects=[])
        services = Services(settings, remote=fake_remote, provider=provider)
        response = TestClient(create_app(services)).post("/api/chat", json={"message": "Hi"})
        assert response.status_code == 503


class TestSyncEndpoints:
    def test_webhook_ignores_feature_branch(self, client, fake_remote, codebase_root):
        before = snapshot(codebase_root)

        response = client.post("/api/github-webhook", json={"ref": "refs/heads/feature-x"})

        assert response.status_code == 200
        assert response.json() == {"message": "Ignoring non-main branch push"}
        assert fake_remote.calls == []
        assert snapshot(codebase_root) == before

    def test_webhook_without_body_is_ignored(self, client, fake_remote):
        response = client.post("/api/github-webhook")
        assert response.status_code == 200
        assert fake_remote.calls == []

    def test_webhook_main_syncs_and_invalidates_cache(self, client, codebase_root):
        assert client.get("/api/projects/frontend/status").json()["fileCount"] == 2

        response = client.post("/api/github-webhook", json={"ref": "refs/heads/main"})

        data = response.json()
        assert data["success"] is True
        assert [r["project"] for r in data["results"]] == [
            "project-frontend",
            "project-backend",
            "documentation",
        ]
        assert all(r["success"] for r in data["results"])
        assert not (codebase_root / "project-frontend" / "src" / "old.ts").exists()
        assert client.get("/api/projects/frontend/status").json()["fileCount"] == 4

    def test_manual_sync_all_reports_failures(self, client, fake_remote):
        fake_remote.available = False

        data = client.post("/api/sync-from-github").json()

        assert data["success"] is True
        assert [r["success"] for r in data["results"]] == [False, False, False]
        assert "Bad credentials" in data["results"][0]["error"]

    def test_sync_one_project(self, client, codebase_root):
        response = client.post("/api/sync-project/documentation")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert (codebase_root / "documentation" / "guide.md").read_bytes() == b"# Guide\n"

    def test_sync_one_rejects_unlisted_folder(self, client, fake_remote):
        response = client.post("/api/sync-project/secrets")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Project secrets is not in sync list"
        assert data["syncProjects"] == ["project-frontend", "project-backend", "documentation"]
        assert fake_remote.calls == []

    def test_sync_status_hides_token(self, client):
        response = client.get("/api/sync-status")
        data = response.json()

        assert data["hasGithubToken"] is True
        assert data["syncProjects"] == ["project-frontend", "project-backend", "documentation"]
        assert "ghp_secret" not in response.text


class TestServices:
    def test_default_remote_reads_first_primary_branch(self, codebase_root, provider):
        settings = make_settings(codebase_root, github={"owner": "acme", "repo": "codebase", "branches": ["master", "main"]})
        services = Services(settings, provider=provider)
        assert services.remote.description == "acme/codebase"
        assert services.remote.ref == "master"

    def test_sync_invalidates_projects_by_live_path(self, services):
        """Only projects rooted at the synced folder lose their cached context."""
        services.cache.get("frontend")
        services.cache.get("docs")

        services.invalidate_folder("project-frontend")

        assert services.cache.peek("frontend") is None
        assert services.cache.peek("docs") is not None
