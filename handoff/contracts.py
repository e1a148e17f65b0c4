"""
contracts.py — Design Handoff
=============================
Collaborator protocols the reconciler is wired against. Concrete
implementations live in handoff.work_store and frontend.api.accounts;
tests use mocks.
"""

from typing import Optional, Protocol, Sequence, Union

from handoff.states import AnonymousWorkSnapshot, AuthResult, Project, ProjectCreationSpec


class AuthGateway(Protocol):
    """
    Establishes a server-side session. Ordinary credential failures come back
    as AuthResult(success=False, error=...); only infrastructure faults raise.
    """

    async def sign_in(self, email: str, password: str) -> AuthResult:
        ...

    async def sign_up(self, email: str, password: str) -> AuthResult:
        ...


class EphemeralWorkStore(Protocol):
    """Client-local cache holding at most one anonymous work snapshot."""

    def get(self) -> Optional[Union[AnonymousWorkSnapshot, dict]]:
        ...

    def clear(self) -> None:
        ...


class ProjectDirectory(Protocol):

    async def list_projects(self) -> Sequence[Project]:
        """Persisted projects, most recent first. May be empty."""
        ...

    async def create_project(self, spec: ProjectCreationSpec) -> Project:
        ...


class Navigator(Protocol):

    def go_to(self, path: str) -> None:
        ...
