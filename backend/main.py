# file: backend/main.py
"""
FastAPI Backend — Organisation Dashboard API v1.

One DashboardSession per process: the snapshot is loaded once at
startup, then kept current by the mutation endpoints.
Browser JSON is camelCase; everything behind the edge is snake_case.

Endpoints:
  GET  /api/state         — snapshot + hash + load status
  GET  /api/diagnostics   — counts, department status, dangling refs
  POST /api/reload        — retry a failed load / re-read everything
  POST|PUT|DELETE /api/<screen>/...  — mutation orchestrators
"""
from __future__ import annotations

import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from orgdesk_kernel.domain_types import (
    EmailFormat,
    FunctionType,
    UserRole,
    WorkflowStatus,
    record_to_row,
)
from orgdesk_kernel.keycase import snake_to_camel, to_camel_keys
from orgdesk_kernel.workflow_steps import StepDraft
from orgdesk_runtime.gateway import RemoteGateway
from orgdesk_runtime.orchestrators import (
    FunctionForm,
    MutationOutcome,
    OutcomeStatus,
    ResponsibilityForm,
    StaffForm,
    TeamForm,
    WorkflowForm,
)
from orgdesk_runtime.record_store import MemoryRecordStore, RecordStore, RecordStoreError
from orgdesk_runtime.session import DashboardSession

from backend.config import RECORD_STORE_MEMORY, Settings
from backend.logging_config import configure_logging
from backend.postgres_record_store import PostgresRecordStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Outcome → HTTP status
# ---------------------------------------------------------------------------

_STATUS_CODES = {
    OutcomeStatus.SAVED: 200,
    OutcomeStatus.PARTIAL: 207,
    OutcomeStatus.INVALID: 422,
    OutcomeStatus.REJECTED: 409,
    OutcomeStatus.BUSY: 409,
    OutcomeStatus.FAILED: 502,
}

# ---------------------------------------------------------------------------
# Request models (camelCase on the wire, snake_case in Python)
# ---------------------------------------------------------------------------


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)


class DepartmentRequest(CamelModel):
    name: str
    manager_id: Optional[str] = None


class ManagerRequest(CamelModel):
    staff_id: Optional[str] = None


class FunctionRequest(CamelModel):
    name: str
    department_id: str
    type: FunctionType = FunctionType.INTERNAL
    email: Optional[str] = None
    phone: Optional[str] = None


class ResponsibilityRequest(CamelModel):
    name: str
    function_id: str
    description: str = ""
    sop_link: str = ""
    is_compliance_tagged: bool = False
    compliance_tag_id: Optional[str] = None


class TransferRequest(CamelModel):
    function_id: str
    department_id: Optional[str] = None


class StaffRequest(CamelModel):
    first_name: str
    last_name: str
    department_id: str
    primary_function_id: str
    grade_id: Optional[str] = None
    secondary_function_id: Optional[str] = None
    additional_function_ids: List[str] = []


class TeamRequest(CamelModel):
    name: str
    reporting_department_id: str
    purpose: str = ""
    lead_id: Optional[str] = None
    member_ids: List[str] = []


class StepRequest(CamelModel):
    responsibility_id: str
    step_order: int = 0


class WorkflowRequest(CamelModel):
    name: str
    owner_department_id: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.DRAFT
    steps: List[StepRequest] = []


class GradeRequest(CamelModel):
    name: str
    level: Optional[int] = None


class NameRequest(CamelModel):
    name: str


class NumberRequest(CamelModel):
    phone_number: str


class NumberRangeRequest(CamelModel):
    prefix: str
    start: int
    end: int


class AllocationRequest(CamelModel):
    company_number_id: str
    assign_to_type: str
    target_id: str


class CompanyProfileRequest(CamelModel):
    name: str = ""
    location: str = ""
    website: str = ""
    logo_url: str = ""


class EmailFormatRequest(CamelModel):
    email_domain: str
    email_format: str = EmailFormat.FIRSTNAME_L.value


class ManagerThresholdRequest(CamelModel):
    max_manager_grade_level: int


class RoleRequest(CamelModel):
    role: str = UserRole.STAFF.value


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _build_record_store(settings: Settings) -> RecordStore:
    if settings.record_store == RECORD_STORE_MEMORY:
        logger.warning("Using the in-memory record store; data is lost on restart")
        return MemoryRecordStore()
    if not settings.database_url:
        raise RecordStoreError("DATABASE_URL not configured")
    return PostgresRecordStore(
        settings.database_url,
        ensure_schema=settings.ensure_schema,
        ssl=settings.database_ssl,
    )


def _session(request: Request) -> DashboardSession:
    session: Optional[DashboardSession] = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=500,
            detail=getattr(request.app.state, "startup_error", None) or "Backend not started",
        )
    return session


def _ready_session(request: Request) -> DashboardSession:
    session = _session(request)
    if not session.ready:
        raise HTTPException(
            status_code=503,
            detail=session.error or f"Dashboard not loaded (status={session.status.value})",
        )
    return session


def _serialize(record: Any) -> Any:
    if record is None:
        return None
    if isinstance(record, (tuple, list)):
        return [_serialize(r) for r in record]
    if dataclasses.is_dataclass(record):
        return to_camel_keys(record_to_row(record))
    return record


def _respond(outcome: MutationOutcome) -> JSONResponse:
    logger.info(
        "Mutation %s: %s", outcome.status.value, outcome.message,
        extra={"outcome": outcome.status.value},
    )
    return JSONResponse(
        status_code=_STATUS_CODES[outcome.status],
        content={
            "status": outcome.status.value,
            "message": outcome.message,
            "record": _serialize(outcome.record),
        },
    )


def _state_payload(session: DashboardSession, role: Optional[str] = None) -> dict:
    return {
        "status": session.status.value,
        "error": session.error,
        "stateHash": session.state_hash(),
        "role": role,
        "state": to_camel_keys(session.state.to_dict()),
    }


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


def create_app(
    settings: Optional[Settings] = None,
    record_store: Optional[RecordStore] = None,
) -> FastAPI:
    """
    Build the API. *record_store* overrides the one chosen by settings
    (tests pass a MemoryRecordStore).
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.json_logs)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.session = None
        app.state.startup_error = None
        try:
            store = record_store if record_store is not None else _build_record_store(settings)
        except RecordStoreError as exc:
            logger.error("Record store unavailable: %s", exc)
            app.state.startup_error = str(exc)
        else:
            session = DashboardSession(RemoteGateway(store))
            await session.start()
            app.state.session = session
        yield

    app = FastAPI(
        title="Organisation Dashboard API",
        version="1.0.0",
        description="Organisation dashboard: departments, functions, staff, teams and workflows",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.frontend_url,
            "http://localhost:3000",
            "http://localhost:3001",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_routes(app)
    return app


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


def _register_routes(app: FastAPI) -> None:

    @app.get("/")
    def read_root():
        return {"status": "ok", "message": "Organisation Dashboard backend is running. Endpoints are under /api/"}

    @app.get("/api/health")
    def health(request: Request):
        session = getattr(request.app.state, "session", None)
        return {
            "status": "ok",
            "version": "1.0.0",
            "load": session.status.value if session else "unavailable",
        }

    # -- Snapshot -----------------------------------------------------------

    @app.get("/api/state")
    def get_state(request: Request, x_user_role: Optional[str] = Header(default=None)):
        return _state_payload(_ready_session(request), x_user_role)

    @app.get("/api/diagnostics")
    def get_diagnostics(request: Request):
        return to_camel_keys(_ready_session(request).diagnostics())

    @app.post("/api/reload")
    async def reload_state(request: Request, x_user_role: Optional[str] = Header(default=None)):
        session = _session(request)
        if session.ready:
            await session.reload()
        else:
            await session.retry()
        if not session.ready:
            raise HTTPException(status_code=503, detail=session.error)
        return _state_payload(session, x_user_role)

    # -- Departments --------------------------------------------------------

    @app.post("/api/departments")
    async def add_department(req: DepartmentRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.departments.add(req.name, req.manager_id))

    @app.put("/api/departments/{department_id}")
    async def update_department(department_id: str, req: DepartmentRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.departments.update(department_id, req.name))

    @app.delete("/api/departments/{department_id}")
    async def delete_department(department_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.departments.delete(department_id))

    @app.put("/api/departments/{department_id}/manager")
    async def assign_manager(department_id: str, req: ManagerRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.departments.assign_manager(department_id, req.staff_id))

    # -- Functions ----------------------------------------------------------

    def _function_form(req: FunctionRequest) -> FunctionForm:
        return FunctionForm(
            name=req.name, department_id=req.department_id, type=req.type,
            email=req.email, phone=req.phone,
        )

    @app.post("/api/functions")
    async def add_function(req: FunctionRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.functions.add(_function_form(req)))

    @app.put("/api/functions/{function_id}")
    async def update_function(function_id: str, req: FunctionRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.functions.update(function_id, _function_form(req)))

    @app.delete("/api/functions/{function_id}")
    async def delete_function(function_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.functions.delete(function_id))

    # -- Responsibilities ---------------------------------------------------

    def _responsibility_form(req: ResponsibilityRequest) -> ResponsibilityForm:
        return ResponsibilityForm(
            name=req.name, function_id=req.function_id, description=req.description,
            sop_link=req.sop_link, is_compliance_tagged=req.is_compliance_tagged,
            compliance_tag_id=req.compliance_tag_id,
        )

    @app.post("/api/responsibilities")
    async def add_responsibility(req: ResponsibilityRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.responsibilities.add(_responsibility_form(req)))

    @app.put("/api/responsibilities/{responsibility_id}")
    async def update_responsibility(
        responsibility_id: str, req: ResponsibilityRequest, request: Request,
    ):
        session = _ready_session(request)
        return _respond(
            await session.responsibilities.update(responsibility_id, _responsibility_form(req))
        )

    @app.delete("/api/responsibilities/{responsibility_id}")
    async def delete_responsibility(responsibility_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.responsibilities.delete(responsibility_id))

    @app.post("/api/responsibilities/{responsibility_id}/transfer")
    async def transfer_responsibility(
        responsibility_id: str, req: TransferRequest, request: Request,
    ):
        session = _ready_session(request)
        return _respond(await session.responsibilities.transfer(
            responsibility_id, req.function_id, req.department_id,
        ))

    # -- Staff --------------------------------------------------------------

    def _staff_form(req: StaffRequest) -> StaffForm:
        return StaffForm(
            first_name=req.first_name, last_name=req.last_name,
            department_id=req.department_id, primary_function_id=req.primary_function_id,
            grade_id=req.grade_id, secondary_function_id=req.secondary_function_id,
            additional_function_ids=tuple(req.additional_function_ids),
        )

    @app.post("/api/staff")
    async def add_staff(req: StaffRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.staff.add(_staff_form(req)))

    @app.put("/api/staff/{staff_id}")
    async def update_staff(staff_id: str, req: StaffRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.staff.update(staff_id, _staff_form(req)))

    @app.delete("/api/staff/{staff_id}")
    async def delete_staff(staff_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.staff.delete(staff_id))

    # -- Cross-functional teams ---------------------------------------------

    def _team_form(req: TeamRequest) -> TeamForm:
        return TeamForm(
            name=req.name, reporting_department_id=req.reporting_department_id,
            purpose=req.purpose, lead_id=req.lead_id, member_ids=tuple(req.member_ids),
        )

    @app.post("/api/teams")
    async def add_team(req: TeamRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.teams.add(_team_form(req)))

    @app.put("/api/teams/{team_id}")
    async def update_team(team_id: str, req: TeamRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.teams.update(team_id, _team_form(req)))

    @app.delete("/api/teams/{team_id}")
    async def delete_team(team_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.teams.delete(team_id))

    # -- Workflows ----------------------------------------------------------

    def _workflow_form(req: WorkflowRequest) -> WorkflowForm:
        steps = sorted(req.steps, key=lambda s: s.step_order)
        return WorkflowForm(
            name=req.name, owner_department_id=req.owner_department_id,
            description=req.description, status=req.status,
            steps=tuple(StepDraft(s.responsibility_id, s.step_order) for s in steps),
        )

    @app.post("/api/workflows")
    async def add_workflow(req: WorkflowRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.workflows.add(_workflow_form(req)))

    @app.put("/api/workflows/{workflow_id}")
    async def update_workflow(workflow_id: str, req: WorkflowRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.workflows.update(workflow_id, _workflow_form(req)))

    @app.delete("/api/workflows/{workflow_id}")
    async def delete_workflow(workflow_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.workflows.delete(workflow_id))

    # -- Grades and compliance tags -----------------------------------------

    @app.post("/api/grades")
    async def add_grade(req: GradeRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.grades.add(req.name, req.level))

    @app.put("/api/grades/{grade_id}")
    async def update_grade(grade_id: str, req: GradeRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.grades.update(grade_id, req.name, req.level))

    @app.delete("/api/grades/{grade_id}")
    async def delete_grade(grade_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.grades.delete(grade_id))

    @app.post("/api/compliance-tags")
    async def add_compliance_tag(req: NameRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.compliance_tags.add(req.name))

    @app.put("/api/compliance-tags/{tag_id}")
    async def update_compliance_tag(tag_id: str, req: NameRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.compliance_tags.update(tag_id, req.name))

    @app.delete("/api/compliance-tags/{tag_id}")
    async def delete_compliance_tag(tag_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.compliance_tags.delete(tag_id))

    # -- Company numbers ----------------------------------------------------

    @app.post("/api/company-numbers")
    async def add_company_number(req: NumberRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.company_numbers.add_number(req.phone_number))

    @app.post("/api/company-numbers/range")
    async def add_company_number_range(req: NumberRangeRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.company_numbers.add_range(req.prefix, req.start, req.end))

    @app.delete("/api/company-numbers/{company_number_id}")
    async def delete_company_number(company_number_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.company_numbers.delete_number(company_number_id))

    @app.post("/api/allocations")
    async def allocate_number(req: AllocationRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.company_numbers.allocate(
            req.company_number_id, req.assign_to_type, req.target_id,
        ))

    @app.delete("/api/allocations/{allocation_id}")
    async def release_number(allocation_id: str, request: Request):
        session = _ready_session(request)
        return _respond(await session.company_numbers.release(allocation_id))

    # -- Settings -----------------------------------------------------------

    @app.put("/api/settings/company-profile")
    async def save_company_profile(req: CompanyProfileRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.settings.save_company_profile(
            req.name, req.location, req.website, req.logo_url,
        ))

    @app.put("/api/settings/email-format")
    async def save_email_format(req: EmailFormatRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.settings.save_email_format(req.email_domain, req.email_format))

    @app.put("/api/settings/manager-threshold")
    async def save_manager_threshold(req: ManagerThresholdRequest, request: Request):
        session = _ready_session(request)
        return _respond(
            await session.settings.save_manager_threshold(req.max_manager_grade_level)
        )

    # -- Users --------------------------------------------------------------

    @app.put("/api/users/{user_id}/role")
    async def update_user_role(user_id: str, req: RoleRequest, request: Request):
        session = _ready_session(request)
        return _respond(await session.users.update_role(user_id, req.role))


app = create_app()
