"""End-to-end tests for the FastAPI bridge."""

import re

import pytest
from fastapi.testclient import TestClient

from frontend.api.server import app


@pytest.fixture
def client():
    return TestClient(app)


def record(client, content, session_id=None, files=None):
    resp = client.post(
        "/api/anon/messages",
        json={"session_id": session_id, "content": content, "files": files or {}},
    )
    assert resp.status_code == 200
    return resp.json()["session_id"]


def sign_up(client, session_id=None, email="a@b.com", password="password1"):
    return client.post(
        "/api/auth/sign-up",
        json={"session_id": session_id, "email": email, "password": password},
    )


def sign_in(client, session_id=None, email="a@b.com", password="password1"):
    return client.post(
        "/api/auth/sign-in",
        json={"session_id": session_id, "email": email, "password": password},
    )


class TestAnonymousWork:

    def test_records_turns(self, client):
        sid = record(client, "a pricing table", files={"/App.jsx": "..."})
        resp = client.post("/api/anon/messages", json={"session_id": sid, "content": "make it blue"})

        assert resp.json() == {"session_id": sid, "message_count": 2, "file_count": 1}
        work = client.get(f"/api/anon/{sid}").json()
        assert [m["content"] for m in work["messages"]] == ["a pricing table", "make it blue"]
        assert work["fileSystemData"] == {"/App.jsx": "..."}

    def test_empty_session(self, client):
        sid = client.get("/api/new-session").json()["session_id"]
        assert client.get(f"/api/anon/{sid}").json() == {"messages": [], "fileSystemData": {}}

    def test_unknown_session(self, client):
        assert client.get("/api/anon/nope").status_code == 404


class TestSignUpFlow:

    def test_adopts_anonymous_work(self, client):
        sid = record(client, "a login card", files={"/App.jsx": "export default 1"})

        body = sign_up(client, sid).json()

        assert body["success"] is True
        assert body["adopted"] is True
        assert body["redirect"] == f"/{body['project_id']}"
        assert client.get(f"/api/anon/{sid}").json()["messages"] == []

        project = client.get(f"/api/projects/{body['project_id']}", params={"session_id": sid}).json()
        assert project["name"].startswith("Design from ")
        assert [m["content"] for m in project["messages"]] == ["a login card"]
        assert project["data"] == {"/App.jsx": "export default 1"}

    def test_creates_first_project_without_work(self, client):
        body = sign_up(client).json()

        assert body["success"] is True
        assert body["adopted"] is False
        projects = client.get("/api/projects", params={"session_id": body["session_id"]}).json()
        assert len(projects) == 1
        assert re.fullmatch(r"New Design #\d+", projects[0]["name"])

    def test_rejected_sign_up_keeps_work(self, client):
        sid = record(client, "a navbar")

        body = sign_up(client, sid, password="short").json()

        assert body["success"] is False
        assert body["error"] == "Password must be at least 8 characters"
        assert body["redirect"] is None
        assert len(client.get(f"/api/anon/{sid}").json()["messages"]) == 1


class TestSignInFlow:

    def test_returns_to_most_recent_project(self, client):
        first = sign_up(client).json()
        client.post("/api/auth/sign-out", json={"session_id": first["session_id"]})

        body = sign_in(client, first["session_id"]).json()

        assert body["success"] is True
        assert body["project_id"] == first["project_id"]
        assert len(client.get("/api/projects", params={"session_id": first["session_id"]}).json()) == 1

    def test_adopted_work_becomes_most_recent(self, client):
        first = sign_up(client).json()

        sid = record(client, "a footer")
        adopted = sign_in(client, sid).json()

        assert adopted["adopted"] is True
        projects = client.get("/api/projects", params={"session_id": sid}).json()
        assert [p["id"] for p in projects] == [adopted["project_id"], first["project_id"]]

    def test_wrong_password(self, client):
        sid = sign_up(client).json()["session_id"]
        client.post("/api/auth/sign-out", json={"session_id": sid})

        body = sign_in(client, sid, password="wrong-password").json()

        assert body == {
            "success": False,
            "error": "Invalid credentials",
            "session_id": sid,
            "redirect": None,
            "project_id": None,
            "adopted": False,
        }

    def test_projects_require_sign_in(self, client):
        sid = client.get("/api/new-session").json()["session_id"]
        assert client.get("/api/projects", params={"session_id": sid}).status_code == 401

    def test_unknown_project(self, client):
        sid = sign_up(client).json()["session_id"]
        resp = client.get("/api/projects/missing", params={"session_id": sid})
        assert resp.status_code == 404


class TestFailures:

    def test_directory_fault_becomes_500(self, client, monkeypatch):
        async def broken(self):
            raise RuntimeError("directory offline")

        sid = sign_up(client).json()["session_id"]
        client.post("/api/auth/sign-out", json={"session_id": sid})
        monkeypatch.setattr("frontend.api.accounts.SessionProjectDirectory.list_projects", broken)

        resp = sign_in(client, sid)

        assert resp.status_code == 500
        assert "directory offline" in resp.json()["detail"]
