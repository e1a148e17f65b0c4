"""
server.py — Design Handoff FastAPI Bridge
=========================================
Exposes anonymous chat capture, sign-in / sign-up with session reconciliation,
and the signed-in user's projects over a small REST API.

Start with:
    uvicorn frontend.api.server:app --reload --port 8000
"""

from __future__ import annotations

import sys
import pathlib

# ── Make project root importable so `handoff.*` can be found ──
_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from frontend.api import session_store as store
from frontend.api.accounts import SessionAuthGateway, SessionProjectDirectory
from handoff.config import configure_logging
from handoff.reconciler import SessionReconciler

configure_logging()

# ─────────────────────────────────────────────────────────────────────────────
# App
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(title="Design Handoff API", version="1.0.0")

# ─────────────────────────────────────────────────────────────────────────────
# Request / Response schemas
# ─────────────────────────────────────────────────────────────────────────────

class AnonymousTurnRequest(BaseModel):
    session_id: str | None = None
    role: str = "user"
    content: str
    files: dict[str, str] = Field(default_factory=dict)


class AnonymousTurnResponse(BaseModel):
    session_id: str
    message_count: int
    file_count: int


class CredentialsRequest(BaseModel):
    session_id: str | None = None
    email: str
    password: str


class AuthResponse(BaseModel):
    success: bool
    error: str | None = None
    session_id: str
    redirect: str | None = None
    project_id: str | None = None
    adopted: bool = False


class SignOutRequest(BaseModel):
    session_id: str


class ProjectSummary(BaseModel):
    id: str
    name: str
    created_at: str


class ProjectDetail(ProjectSummary):
    messages: list[dict]
    data: dict[str, str]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _require_session(session_id: str) -> store.Session:
    session = store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found.")
    return session


def _directory_for(session: store.Session) -> SessionProjectDirectory:
    if not session.is_authenticated:
        raise HTTPException(status_code=401, detail="Sign in to see projects.")
    return SessionProjectDirectory(session)


async def _authenticate(body: CredentialsRequest, mode: str) -> AuthResponse:
    """
    Runs one reconciliation for the session: authenticate, then adopt the
    anonymous work, resume the latest project, or start a new one.
    """
    session = store.get_or_create(body.session_id)
    reconciler = SessionReconciler(
        auth_gateway=SessionAuthGateway(session),
        work_store=session.work,
        project_directory=SessionProjectDirectory(session),
    )
    run = reconciler.sign_up if mode == "sign_up" else reconciler.sign_in

    try:
        result = await run(body.email, body.password)
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Sign-in failed: {exc}") from exc

    route = reconciler.last_route if result.success else None
    return AuthResponse(
        success=result.success,
        error=result.error,
        session_id=session.session_id,
        redirect=route.path if route else None,
        project_id=route.project_id if route else None,
        adopted=route.adopted if route else False,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/api/new-session")
async def new_session():
    """Create a brand-new anonymous session."""
    sid = store.create_session()
    return {"session_id": sid}


@app.post("/api/anon/messages", response_model=AnonymousTurnResponse)
async def record_anonymous_turn(body: AnonymousTurnRequest):
    """Record one pre-sign-in chat message and the files it produced."""
    session = store.get_or_create(body.session_id)
    store.record_turn(session, body.role, body.content, body.files)

    snapshot = session.work.get()
    return AnonymousTurnResponse(
        session_id=session.session_id,
        message_count=len(snapshot.messages or []),
        file_count=len(snapshot.file_system_data),
    )


@app.get("/api/anon/{session_id}")
async def get_anonymous_work(session_id: str):
    session = _require_session(session_id)
    snapshot = session.work.get()
    if snapshot is None:
        return {"messages": [], "fileSystemData": {}}
    return snapshot.model_dump(by_alias=True)


@app.post("/api/auth/sign-in", response_model=AuthResponse)
async def sign_in(body: CredentialsRequest):
    return await _authenticate(body, "sign_in")


@app.post("/api/auth/sign-up", response_model=AuthResponse)
async def sign_up(body: CredentialsRequest):
    return await _authenticate(body, "sign_up")


@app.post("/api/auth/sign-out")
async def sign_out(body: SignOutRequest):
    session = _require_session(body.session_id)
    store.sign_out(session)
    return {"session_id": session.session_id, "signed_out": True}


@app.get("/api/projects", response_model=list[ProjectSummary])
async def list_projects(session_id: str):
    """The signed-in user's projects, most recent first."""
    directory = _directory_for(_require_session(session_id))
    return [ProjectSummary(**p.to_dict()) for p in directory.stored_projects()]


@app.get("/api/projects/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: str, session_id: str):
    directory = _directory_for(_require_session(session_id))
    project = directory.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found.")
    return ProjectDetail(**project.to_dict())

