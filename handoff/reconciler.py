"""
reconciler.py — Design Handoff
==============================
SessionReconciler: the object a UI, API route or CLI holds on to while a
visitor signs in or signs up.

It exposes
  is_loading  — True from the moment sign_in/sign_up is called until it
                returns or raises
  phase       — the current ReconcilerPhase
  last_route  — the ResolvedRoute of the last successful run
and publishes a ReconcilerEvent to every subscribed listener on each phase
change.

Overlapping calls are not rejected. Callers are expected to disable whatever
triggers sign_in/sign_up while is_loading is True.
"""

import logging
from typing import Callable, Optional

from handoff import config
from handoff.contracts import AuthGateway, EphemeralWorkStore, Navigator, ProjectDirectory
from handoff.graph import reconciliation_agent
from handoff.states import (
    AuthResult,
    ReconcilerEvent,
    ReconcilerPhase,
    ReconciliationRequest,
    ResolvedRoute,
)

logger = logging.getLogger(__name__)

Listener = Callable[[ReconcilerEvent], None]


class SessionReconciler:

    def __init__(
        self,
        auth_gateway: AuthGateway,
        work_store: EphemeralWorkStore,
        project_directory: ProjectDirectory,
        navigator: Optional[Navigator] = None,
    ):
        self.auth_gateway = auth_gateway
        self.work_store = work_store
        self.project_directory = project_directory
        self.navigator = navigator

        self._phase = ReconcilerPhase.IDLE
        self._listeners: list[Listener] = []
        self.last_route: Optional[ResolvedRoute] = None

    # ── Observable state ─────────────────────────────────────────────────────

    @property
    def phase(self) -> ReconcilerPhase:
        return self._phase

    @property
    def is_loading(self) -> bool:
        return self._phase.is_loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_phase(self, phase: ReconcilerPhase, route: Optional[ResolvedRoute] = None) -> None:
        self._phase = phase
        event = ReconcilerEvent(phase=phase, is_loading=phase.is_loading, route=route)
        for listener in list(self._listeners):
            listener(event)

    # ── Public API ───────────────────────────────────────────────────────────

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self._run("sign_in", email, password)

    async def sign_up(self, email: str, password: str) -> AuthResult:
        return await self._run("sign_up", email, password)

    # ── Internals ────────────────────────────────────────────────────────────

    async def _run(self, mode: str, email: str, password: str) -> AuthResult:
        """
        Authenticates, then resolves which project the session lands on.

        Credential failures come back as the gateway's AuthResult. Any error
        raised by a collaborator after that propagates unchanged; is_loading
        is back to False on every way out.
        """
        try:
            self._set_phase(ReconcilerPhase.AUTHENTICATING)
            request = ReconciliationRequest(mode=mode, email=email, password=password)
            result = await reconciliation_agent.ainvoke(
                {"request": request},
                {
                    "recursion_limit": config.RECURSION_LIMIT,
                    "configurable": {
                        "auth_gateway": self.auth_gateway,
                        "work_store": self.work_store,
                        "project_directory": self.project_directory,
                        "on_phase": self._set_phase,
                    },
                },
            )
            request = result["request"]

            if not request.auth_result.success:
                if self._phase is not ReconcilerPhase.FAILED:
                    self._set_phase(ReconcilerPhase.FAILED)
                return request.auth_result

            route = request.route
            self.last_route = route
            if self.navigator is not None:
                self.navigator.go_to(route.path)
            self._set_phase(ReconcilerPhase.DONE, route=route)
            return request.auth_result

        except Exception:
            logger.exception("[reconciler] %s for %s failed in phase %s", mode, email, self._phase.value)
            self._set_phase(ReconcilerPhase.FAILED)
            raise

        finally:
            # Also covers cancellation, which the except above does not see
            if self.is_loading:
                self._set_phase(ReconcilerPhase.FAILED)
