# file: orgdesk_runtime/session.py
"""
Dashboard Session — wires gateway, reconciler, store and orchestrators.

Lifecycle:
  1. start()  — initial load; on success the store is installed
  2. retry()  — after a failed load, re-run the whole fan-out
  3. reload() — re-read everything into the existing store

Orchestrators exist only once the session is ready; they all share the
one store, so a reload is visible to every screen at once.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from orgdesk_kernel.actions import BaseAction
from orgdesk_kernel.diagnostics import compute_diagnostics
from orgdesk_kernel.domain_types import AppState
from orgdesk_kernel.hashing import canonical_hash
from orgdesk_kernel.store import Listener, Store

from .gateway import RemoteGateway
from .loader import InitialLoadReconciler, LoadStatus
from .notifications import LoggingNotifier, Notifier
from .orchestrators import (
    CompanyNumberOrchestrator,
    ComplianceTagOrchestrator,
    DepartmentOrchestrator,
    FunctionOrchestrator,
    GradeOrchestrator,
    ResponsibilityOrchestrator,
    SettingsOrchestrator,
    StaffOrchestrator,
    TeamOrchestrator,
    UserOrchestrator,
    WorkflowOrchestrator,
)

logger = logging.getLogger(__name__)


class SessionNotReadyError(Exception):
    """Raised when the snapshot or an orchestrator is used before a successful load."""

    def __init__(self, status: LoadStatus, error: Optional[str]) -> None:
        self.status = status
        self.error = error
        super().__init__(error or f"Session is not ready (status={status.value})")


class DashboardSession:

    def __init__(
        self,
        gateway: RemoteGateway,
        notifier: Optional[Notifier] = None,
        validate: bool = False,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier or LoggingNotifier()
        self._validate = validate
        self._reconciler = InitialLoadReconciler(gateway)
        self._store: Optional[Store] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def status(self) -> LoadStatus:
        if self._store is not None:
            return LoadStatus.READY
        return self._reconciler.status

    @property
    def error(self) -> Optional[str]:
        return self._reconciler.error

    @property
    def ready(self) -> bool:
        return self._store is not None

    async def start(self) -> LoadStatus:
        status = await self._reconciler.load()
        if status == LoadStatus.READY:
            self._install(self._reconciler.state)
        return self.status

    async def retry(self) -> LoadStatus:
        return await self.start()

    async def reload(self) -> LoadStatus:
        """
        Re-read everything. A failed reload keeps the current snapshot;
        the failure is available from ``error``.
        """
        status = await self._reconciler.load()
        if status == LoadStatus.READY:
            self._install(self._reconciler.state)
        return status

    def _install(self, state: AppState) -> None:
        if self._store is None:
            self._store = Store(state, validate=self._validate)
            self._build_orchestrators()
            logger.info("Dashboard session ready")
        else:
            self._store.replace_state(state)

    def _build_orchestrators(self) -> None:
        args = (self._gateway, self._store, self._notifier)
        self.departments = DepartmentOrchestrator(*args)
        self.functions = FunctionOrchestrator(*args)
        self.responsibilities = ResponsibilityOrchestrator(*args)
        self.staff = StaffOrchestrator(*args)
        self.teams = TeamOrchestrator(*args)
        self.workflows = WorkflowOrchestrator(*args)
        self.grades = GradeOrchestrator(*args)
        self.compliance_tags = ComplianceTagOrchestrator(*args)
        self.company_numbers = CompanyNumberOrchestrator(*args)
        self.settings = SettingsOrchestrator(*args)
        self.users = UserOrchestrator(*args)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def store(self) -> Store:
        if self._store is None:
            raise SessionNotReadyError(self._reconciler.status, self._reconciler.error)
        return self._store

    @property
    def state(self) -> AppState:
        return self.store.state

    def dispatch(self, action: BaseAction) -> AppState:
        return self.store.dispatch(action)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def state_hash(self) -> str:
        return canonical_hash(self.state)

    def diagnostics(self) -> dict:
        return compute_diagnostics(self.state)
