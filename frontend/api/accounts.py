"""
accounts.py — In-process accounts and projects
==============================================
Concrete collaborators for the reconciler, bound to one browser Session:

  SessionAuthGateway      — sign_in / sign_up against bcrypt-hashed accounts;
                            success marks the session as signed in
  SessionProjectDirectory — the signed-in user's projects, newest first

Nothing here is persisted across restarts.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

import bcrypt

from frontend.api.session_store import Session
from handoff import config
from handoff.states import AuthResult, Project, ProjectCreationSpec

logger = logging.getLogger(__name__)


class NotAuthenticatedError(Exception):
    """Raised when the project directory is used by a session nobody has signed into."""


@dataclass
class Account:
    id: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass
class StoredProject:
    id: str
    user_id: str
    name: str
    sequence: int
    messages: list[dict] = field(default_factory=list)
    data: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_project(self) -> Project:
        return Project(id=self.id, name=self.name, created_at=self.created_at.isoformat())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "messages": self.messages,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
        }


# Keyed by normalized email / project id
_ACCOUNTS: dict[str, Account] = {}
_PROJECTS: dict[str, StoredProject] = {}
_SEQUENCE = itertools.count(1)


# ─────────────────────────────────────────────────────────────────────────────
# Password hashing
# ─────────────────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _key(email: str) -> str:
    return email.strip().lower()


# ─────────────────────────────────────────────────────────────────────────────
# Auth Gateway
# ─────────────────────────────────────────────────────────────────────────────

class SessionAuthGateway:

    def __init__(self, session: Session) -> None:
        self.session = session

    async def sign_up(self, email: str, password: str) -> AuthResult:
        """
        Registers a new account and signs the session into it.
        Input problems come back as AuthResult(success=False).
        """
        if not email or not password:
            return AuthResult(success=False, error="Email and password are required")
        if len(password) < config.MIN_PASSWORD_LENGTH:
            return AuthResult(
                success=False,
                error=f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters",
            )
        if _key(email) in _ACCOUNTS:
            return AuthResult(success=False, error="Email already registered")

        # Hashing runs in a worker thread
        password_hash = await asyncio.to_thread(hash_password, password)

        # The same email may have registered while hashing
        if _key(email) in _ACCOUNTS:
            return AuthResult(success=False, error="Email already registered")

        account = Account(
            id=str(uuid.uuid4()),
            email=email.strip(),
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        _ACCOUNTS[_key(email)] = account
        self.session.user_id = account.id
        logger.info("[accounts] Registered %s", account.email)
        return AuthResult(success=True)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        account = _ACCOUNTS.get(_key(email)) if email else None
        if account is None or not password:
            return AuthResult(success=False, error="Invalid credentials")

        if not await asyncio.to_thread(verify_password, password, account.password_hash):
            return AuthResult(success=False, error="Invalid credentials")

        self.session.user_id = account.id
        logger.info("[accounts] Signed in %s", account.email)
        return AuthResult(success=True)


# ─────────────────────────────────────────────────────────────────────────────
# Project Directory
# ─────────────────────────────────────────────────────────────────────────────

class SessionProjectDirectory:

    def __init__(self, session: Session) -> None:
        self.session = session

    def _user_id(self) -> str:
        if not self.session.is_authenticated:
            raise NotAuthenticatedError("No user is signed into this session")
        return self.session.user_id

    def stored_projects(self) -> list[StoredProject]:
        """The signed-in user's projects, most recently created first."""
        user_id = self._user_id()
        owned = [p for p in _PROJECTS.values() if p.user_id == user_id]
        return sorted(owned, key=lambda p: p.sequence, reverse=True)

    async def list_projects(self) -> list[Project]:
        return [p.to_project() for p in self.stored_projects()]

    async def create_project(self, spec: ProjectCreationSpec) -> Project:
        stored = StoredProject(
            id=str(uuid.uuid4()),
            user_id=self._user_id(),
            name=spec.name,
            sequence=next(_SEQUENCE),
            messages=list(spec.messages),
            data=dict(spec.data),
        )
        _PROJECTS[stored.id] = stored
        logger.info("[accounts] Created project %s (%r)", stored.id, stored.name)
        return stored.to_project()

    def get_project(self, project_id: str) -> StoredProject | None:
        """Returns the project only if it belongs to the signed-in user."""
        project = _PROJECTS.get(project_id)
        if project is None or project.user_id != self._user_id():
            return None
        return project


def reset() -> None:
    """Drop every account and project."""
    _ACCOUNTS.clear()
    _PROJECTS.clear()
