"""Tests for the reconciliation graph's routing decisions."""

from handoff.graph import after_authenticate, after_list_projects, after_read_work
from handoff.states import AnonymousWorkSnapshot, AuthResult, Project, ReconciliationRequest


def state(**fields) -> dict:
    return {"request": ReconciliationRequest(mode="sign_in", email="a@b.com", password="pw", **fields)}


def test_rejected_credentials_stop():
    assert after_authenticate(state(auth_result=AuthResult(success=False, error="no"))) == "stop"
    assert after_authenticate(state(auth_result=AuthResult(success=True))) == "reconcile"


def test_only_work_with_messages_is_adopted():
    assert after_read_work(state()) == "list"
    assert after_read_work(state(snapshot=AnonymousWorkSnapshot(fileSystemData={"a": "b"}))) == "list"
    assert after_read_work(state(snapshot=AnonymousWorkSnapshot(messages=[{"id": "1"}]))) == "adopt"


def test_empty_directory_bootstraps():
    assert after_list_projects(state()) == "bootstrap"
    assert after_list_projects(state(projects=[Project(id="p1", name="x")])) == "redirect"


def test_password_hidden_from_repr():
    assert "pw" not in repr(state()["request"])
