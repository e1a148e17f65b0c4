"""
states.py — Design Handoff
==========================
Pydantic models for the post-authentication session reconciliation pipeline.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnonymousWorkSnapshot(BaseModel):
    """
    Everything a visitor produced before signing in: the chat transcript and
    the virtual file system the generated code lives in.
    """
    model_config = ConfigDict(populate_by_name=True)

    messages: Optional[list[dict]] = Field(
        default_factory=list,
        description="Ordered chat messages; opaque to the reconciler",
    )
    file_system_data: dict[str, str] = Field(
        default_factory=dict,
        alias="fileSystemData",
        description="Virtual file system, path -> file content",
    )

    @field_validator("file_system_data", mode="before")
    @classmethod
    def _missing_files_are_empty(cls, value):
        return {} if value is None else value

    @property
    def has_work(self) -> bool:
        # An empty transcript counts as no work, whatever files came with it
        return bool(self.messages)


class AuthResult(BaseModel):
    success: bool
    error: Optional[str] = None


class Project(BaseModel):
    """A persisted project. Server-side fields beyond id/name pass through untouched."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: str


class ProjectCreationSpec(BaseModel):
    name: str
    messages: list[dict] = Field(default_factory=list)
    data: dict[str, str] = Field(default_factory=dict)


class ResolvedRoute(BaseModel):
    """Where a reconciliation decided the session should land."""
    project_id: str
    created: bool = Field(False, description="True if a project was created for this route")
    adopted: bool = Field(False, description="True if anonymous work was adopted into it")

    @property
    def path(self) -> str:
        return f"/{self.project_id}"


class ReconcilerPhase(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    RECONCILING = "reconciling"
    CREATING_PROJECT = "creating_project"
    REDIRECTING = "redirecting"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_loading(self) -> bool:
        return self not in (ReconcilerPhase.IDLE, ReconcilerPhase.FAILED, ReconcilerPhase.DONE)


class ReconcilerEvent(BaseModel):
    """Published to reconciler listeners on every phase transition."""
    phase: ReconcilerPhase
    is_loading: bool
    route: Optional[ResolvedRoute] = None


class ReconciliationRequest(BaseModel):
    """
    State object threaded through the reconciliation graph:
    authenticate → read_work → adopt | list_projects → redirect | bootstrap.
    """
    mode: Literal["sign_in", "sign_up"] = Field(
        description="Which Auth Gateway call to make"
    )
    email: str
    password: str = Field(repr=False)
    auth_result: Optional[AuthResult] = Field(
        None, description="Gateway verdict, returned to the caller unchanged"
    )
    snapshot: Optional[AnonymousWorkSnapshot] = Field(
        None, description="Anonymous work read from the store, if usable"
    )
    projects: list[Project] = Field(
        default_factory=list, description="Directory listing, most recent first"
    )
    creation_spec: Optional[ProjectCreationSpec] = None
    created_project: Optional[Project] = None
    route: Optional[ResolvedRoute] = None
    phase: ReconcilerPhase = ReconcilerPhase.AUTHENTICATING
