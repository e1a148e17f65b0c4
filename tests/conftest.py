"""Shared fixtures: mocked collaborators and a reconciler wired to them."""

import os

# Cheap bcrypt for tests; must be set before handoff.config is imported
os.environ.setdefault("HANDOFF_BCRYPT_ROUNDS", "4")

from unittest.mock import AsyncMock, MagicMock

import pytest

from frontend.api import accounts
from frontend.api import session_store
from handoff.reconciler import SessionReconciler
from handoff.states import AuthResult


@pytest.fixture
def auth_gateway():
    gateway = MagicMock()
    gateway.sign_in = AsyncMock(return_value=AuthResult(success=True))
    gateway.sign_up = AsyncMock(return_value=AuthResult(success=True))
    return gateway


@pytest.fixture
def work_store():
    store = MagicMock()
    store.get = MagicMock(return_value=None)
    store.clear = MagicMock()
    return store


@pytest.fixture
def project_directory():
    directory = MagicMock()
    directory.list_projects = AsyncMock(return_value=[])
    directory.create_project = AsyncMock(return_value={"id": "new-project-123", "name": "New Design"})
    return directory


@pytest.fixture
def navigator():
    nav = MagicMock()
    nav.go_to = MagicMock()
    return nav


@pytest.fixture
def reconciler(auth_gateway, work_store, project_directory, navigator):
    return SessionReconciler(auth_gateway, work_store, project_directory, navigator)


@pytest.fixture
def events(reconciler):
    """Every ReconcilerEvent the reconciler publishes, in order."""
    seen = []
    reconciler.subscribe(seen.append)
    return seen


@pytest.fixture(autouse=True)
def clear_registries():
    """Reset in-process sessions, accounts and projects around every test."""
    session_store.reset()
    accounts.reset()
    yield
    session_store.reset()
    accounts.reset()
