"""
session_store.py — In-memory browser session registry
=====================================================
Stands in for the browser side of the app: every visitor gets a session id,
and each session carries

  work     — the visitor's anonymous work (InMemoryWorkStore), read and
             cleared by the reconciler when they sign in or sign up
  user_id  — the signed-in account, None while anonymous
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from handoff.work_store import InMemoryWorkStore


@dataclass
class Session:
    session_id: str
    work: InMemoryWorkStore = field(default_factory=InMemoryWorkStore)
    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


# Single global store, keyed by session_id string
_STORE: dict[str, Session] = {}


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def create_session() -> str:
    """Create a new session, return its UUID string."""
    sid = str(uuid.uuid4())
    _STORE[sid] = Session(session_id=sid)
    return sid


def get_session(session_id: str) -> Session | None:
    return _STORE.get(session_id)


def get_or_create(session_id: str | None) -> Session:
    """Return existing session or create one if id is unknown/None."""
    if session_id and session_id in _STORE:
        return _STORE[session_id]
    sid = create_session()
    return _STORE[sid]


def sign_out(session: Session) -> None:
    """Forget the signed-in user. Anonymous work left in the session is kept."""
    session.user_id = None


def record_turn(session: Session, role: str, content: str, files: dict[str, str] | None = None) -> None:
    """Append one anonymous chat message plus any files it wrote."""
    session.work.record_message(
        {"id": str(uuid.uuid4()), "role": role, "content": content}
    )
    for path, body in (files or {}).items():
        session.work.write_file(path, body)


def reset() -> None:
    """Drop every session."""
    _STORE.clear()
