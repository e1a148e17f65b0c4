"""
graph.py — Design Handoff
=========================
Single LangGraph pipeline that decides where a freshly authenticated session lands:

  authenticate  →  END                                  (credential failure)
                →  read_work  →  adopt                  (anonymous work present)
                              →  list_projects  →  redirect   (projects exist)
                                                →  bootstrap  (no projects yet)

Collaborators are passed per run through config["configurable"]:
  auth_gateway, work_store, project_directory, and optionally on_phase.

Exported: reconciliation_agent (compiled graph)
"""

import logging
from typing import Any, Mapping, TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph
from pydantic import ValidationError

from handoff.naming import adopted_project_name, new_design_name
from handoff.states import (
    AnonymousWorkSnapshot,
    AuthResult,
    Project,
    ProjectCreationSpec,
    ReconcilerPhase,
    ReconciliationRequest,
    ResolvedRoute,
)

logger = logging.getLogger(__name__)


class ReconciliationState(TypedDict):
    request: ReconciliationRequest


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _configurable(config: RunnableConfig) -> Mapping[str, Any]:
    return (config or {}).get("configurable", {})


def _enter(request: ReconciliationRequest, config: RunnableConfig, phase: ReconcilerPhase) -> None:
    """Records the phase on the request and reports it to the reconciler, if listening."""
    request.phase = phase
    on_phase = _configurable(config).get("on_phase")
    if on_phase is not None:
        on_phase(phase)


def _coerce_snapshot(raw: Any) -> AnonymousWorkSnapshot | None:
    """
    Normalizes whatever the work store handed back. Mappings are validated;
    anything that does not validate reads as no anonymous work.
    """
    if raw is None or isinstance(raw, AnonymousWorkSnapshot):
        return raw
    if isinstance(raw, Mapping):
        try:
            return AnonymousWorkSnapshot.model_validate(raw)
        except ValidationError as exc:
            logger.warning("[read_work] Ignoring malformed anonymous work: %s", exc)
            return None
    logger.warning("[read_work] Ignoring anonymous work of type %s", type(raw).__name__)
    return None


def _as_project(raw: Any) -> Project:
    return raw if isinstance(raw, Project) else Project.model_validate(raw)


def _created_project(raw: Any, spec: ProjectCreationSpec) -> Project:
    """
    Wraps what createProject returned without validating it: the project
    already exists, and only its id is needed from here on.
    """
    if isinstance(raw, Project):
        return raw
    fields = dict(raw) if isinstance(raw, Mapping) else {"id": getattr(raw, "id")}
    fields["id"] = str(fields["id"])
    if not fields.get("name"):
        fields["name"] = spec.name
    return Project.model_construct(**fields)


# ─────────────────────────────────────────────────────────────────────────────
# Node: authenticate
# ─────────────────────────────────────────────────────────────────────────────

async def authenticate_node(state: ReconciliationState, config: RunnableConfig) -> dict:
    """
    Calls signIn or signUp on the Auth Gateway with the credentials exactly as
    given. A failed result ends the run without touching anything else.
    """
    request = state["request"]
    gateway = _configurable(config)["auth_gateway"]

    call = gateway.sign_up if request.mode == "sign_up" else gateway.sign_in
    result = await call(request.email, request.password)
    if not isinstance(result, AuthResult):
        result = AuthResult.model_validate(result)

    request.auth_result = result
    if result.success:
        logger.info("[authenticate] %s succeeded for %s", request.mode, request.email)
        _enter(request, config, ReconcilerPhase.RECONCILING)
    else:
        logger.info("[authenticate] %s rejected for %s: %s", request.mode, request.email, result.error)
        _enter(request, config, ReconcilerPhase.FAILED)

    return {"request": request}


# ─────────────────────────────────────────────────────────────────────────────
# Node: read_work
# ─────────────────────────────────────────────────────────────────────────────

async def read_work_node(state: ReconciliationState, config: RunnableConfig) -> dict:
    """Reads the Ephemeral Work Store exactly once."""
    request = state["request"]
    store = _configurable(config)["work_store"]

    request.snapshot = _coerce_snapshot(store.get())

    if request.snapshot is None:
        logger.info("[read_work] No anonymous work found")
    elif not request.snapshot.has_work:
        logger.info("[read_work] Anonymous work has no messages, not adopting it")
    else:
        logger.info(
            "[read_work] Found %d message(s) and %d file(s) of anonymous work",
            len(request.snapshot.messages),
            len(request.snapshot.file_system_data),
        )
    return {"request": request}


# ─────────────────────────────────────────────────────────────────────────────
# Node: adopt
# ─────────────────────────────────────────────────────────────────────────────

async def adopt_node(state: ReconciliationState, config: RunnableConfig) -> dict:
    """
    Turns the anonymous work into a new project, then clears the store.
    The store is only cleared once createProject has returned.
    """
    request = state["request"]
    deps = _configurable(config)
    snapshot = request.snapshot

    request.creation_spec = ProjectCreationSpec(
        name=adopted_project_name(),
        messages=snapshot.messages,
        data=snapshot.file_system_data,
    )
    _enter(request, config, ReconcilerPhase.CREATING_PROJECT)
    raw = await deps["project_directory"].create_project(request.creation_spec)
    project = _created_project(raw, request.creation_spec)
    request.created_project = project
    logger.info("[adopt] Created project %s (%r) from anonymous work", project.id, project.name)

    deps["work_store"].clear()
    logger.info("[adopt] Cleared anonymous work")

    request.route = ResolvedRoute(project_id=project.id, created=True, adopted=True)
    _enter(request, config, ReconcilerPhase.REDIRECTING)
    return {"request": request}


# ─────────────────────────────────────────────────────────────────────────────
# Node: list_projects
# ─────────────────────────────────────────────────────────────────────────────

async def list_projects_node(state: ReconciliationState, config: RunnableConfig) -> dict:
    request = state["request"]
    directory = _configurable(config)["project_directory"]

    request.projects = [_as_project(p) for p in await directory.list_projects()]
    logger.info("[list_projects] User has %d project(s)", len(request.projects))
    return {"request": request}


# ─────────────────────────────────────────────────────────────────────────────
# Node: redirect
# ─────────────────────────────────────────────────────────────────────────────

async def redirect_node(state: ReconciliationState, config: RunnableConfig) -> dict:
    """Lands on the most recent project; the directory lists newest first."""
    request = state["request"]
    latest = request.projects[0]

    request.route = ResolvedRoute(project_id=latest.id)
    logger.info("[redirect] Resuming most recent project %s", latest.id)
    _enter(request, config, ReconcilerPhase.REDIRECTING)
    return {"request": request}


# ─────────────────────────────────────────────────────────────────────────────
# Node: bootstrap
# ─────────────────────────────────────────────────────────────────────────────

async def bootstrap_node(state: ReconciliationState, config: RunnableConfig) -> dict:
    """First sign-in with nothing to adopt and nothing to resume: create an empty project."""
    request = state["request"]
    directory = _configurable(config)["project_directory"]

    request.creation_spec = ProjectCreationSpec(name=new_design_name())
    _enter(request, config, ReconcilerPhase.CREATING_PROJECT)
    raw = await directory.create_project(request.creation_spec)
    project = _created_project(raw, request.creation_spec)
    request.created_project = project
    logger.info("[bootstrap] Created empty project %s (%r)", project.id, project.name)

    request.route = ResolvedRoute(project_id=project.id, created=True)
    _enter(request, config, ReconcilerPhase.REDIRECTING)
    return {"request": request}


# ─────────────────────────────────────────────────────────────────────────────
# Conditional edges
# ─────────────────────────────────────────────────────────────────────────────

def after_authenticate(state: ReconciliationState) -> str:
    """
    Returns:
        "reconcile" — credentials accepted
        "stop"      — gateway rejected them
    """
    result = state["request"].auth_result
    return "reconcile" if result and result.success else "stop"


def after_read_work(state: ReconciliationState) -> str:
    snapshot = state["request"].snapshot
    return "adopt" if snapshot is not None and snapshot.has_work else "list"


def after_list_projects(state: ReconciliationState) -> str:
    return "redirect" if state["request"].projects else "bootstrap"


# ─────────────────────────────────────────────────────────────────────────────
# Graph assembly
# ─────────────────────────────────────────────────────────────────────────────

_graph = StateGraph(ReconciliationState)

_graph.add_node("authenticate",  authenticate_node)
_graph.add_node("read_work",     read_work_node)
_graph.add_node("adopt",         adopt_node)
_graph.add_node("list_projects", list_projects_node)
_graph.add_node("redirect",      redirect_node)
_graph.add_node("bootstrap",     bootstrap_node)

_graph.set_entry_point("authenticate")

_graph.add_conditional_edges(
    "authenticate",
    after_authenticate,
    {"reconcile": "read_work", "stop": END},
)
_graph.add_conditional_edges(
    "read_work",
    after_read_work,
    {"adopt": "adopt", "list": "list_projects"},
)
_graph.add_conditional_edges(
    "list_projects",
    after_list_projects,
    {"redirect": "redirect", "bootstrap": "bootstrap"},
)
_graph.add_edge("adopt",     END)
_graph.add_edge("redirect",  END)
_graph.add_edge("bootstrap", END)

# Public export, used by handoff.reconciler
reconciliation_agent = _graph.compile()
