"""
Organisation Dashboard Kernel — Core Domain Types

Pure data. No behaviour, no transition logic.
Every record is a frozen dataclass; every collection in AppState is a tuple,
so snapshots can be shared and compared by identity.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Collection:
    All persisted records of one entity kind, named by a fixed string
    at the record-store boundary (see registry.py).

Singleton:
    An entity kind with exactly one logical record
    (CompanyProfile, AppSettings).

Owned children:
    Join rows deleted together with their parent
    (team → team members, workflow → workflow steps).

────────────────────────────────────────────────
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


# ── Enumerations ──────────────────────────────────────────────

class FunctionType(str, Enum):
    INTERNAL = "Internal"
    EXTERNAL = "External"


class WorkflowStatus(str, Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"


class AssignToType(str, Enum):
    STAFF = "Staff"
    FUNCTION = "Function"
    DEPARTMENT = "Department"


class UserRole(str, Enum):
    STAFF = "Staff"
    ADMIN = "Admin"
    SUPER_ADMIN = "Super Admin"


class EmailFormat(str, Enum):
    FIRSTNAME_L = "firstname.L"
    F_LASTNAME = "F.lastname"


class DepartmentStatus(str, Enum):
    MANAGED = "Managed"
    ACTING = "Acting"
    UNMANAGED = "Unmanaged"


# ── Entity Records ────────────────────────────────────────────

@dataclass(frozen=True)
class Department:
    id: str
    name: str
    manager_id: Optional[str] = None  # weak → Staff
    uid: str = ""


@dataclass(frozen=True)
class OrgFunction:
    id: str
    name: str
    department_id: str
    type: FunctionType = FunctionType.INTERNAL
    email: Optional[str] = None
    phone: Optional[str] = None
    uid: str = ""


@dataclass(frozen=True)
class Responsibility:
    id: str
    name: str
    function_id: str
    description: str = ""
    sop_link: str = ""
    is_compliance_tagged: bool = False
    compliance_tag_id: Optional[str] = None
    uid: str = ""


@dataclass(frozen=True)
class Grade:
    """Seniority band. Level 0 is the most senior."""

    id: str
    level: int
    name: str


@dataclass(frozen=True)
class Staff:
    id: str
    first_name: str
    last_name: str
    department_id: str
    primary_function_id: str
    grade_id: Optional[str] = None
    secondary_function_id: Optional[str] = None
    additional_function_ids: Tuple[str, ...] = ()
    uid: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def function_ids(self) -> Tuple[str, ...]:
        """Primary, secondary and additional function ids, in that order."""
        ids = [self.primary_function_id]
        if self.secondary_function_id:
            ids.append(self.secondary_function_id)
        ids.extend(self.additional_function_ids)
        return tuple(ids)


@dataclass(frozen=True)
class CrossFunctionalTeam:
    id: str
    name: str
    reporting_department_id: str
    purpose: str = ""
    lead_id: Optional[str] = None
    uid: str = ""


@dataclass(frozen=True)
class TeamMember:
    id: str
    team_id: str
    staff_id: str


@dataclass(frozen=True)
class Workflow:
    id: str
    name: str
    owner_department_id: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.DRAFT
    uid: str = ""


@dataclass(frozen=True)
class WorkflowStep:
    id: str
    workflow_id: str
    responsibility_id: str
    step_order: int


@dataclass(frozen=True)
class ComplianceTag:
    id: str
    name: str


@dataclass(frozen=True)
class CompanyNumber:
    id: str
    phone_number: str


@dataclass(frozen=True)
class CompanyNumberAllocation:
    """
    Polymorphic allocation of a company number.
    Exactly one of staff_id / function_id / department_id is set,
    the one matching assign_to_type.
    """

    id: str
    company_number_id: str
    assign_to_type: AssignToType
    staff_id: Optional[str] = None
    function_id: Optional[str] = None
    department_id: Optional[str] = None

    def _references(self) -> Dict[AssignToType, Optional[str]]:
        return {
            AssignToType.STAFF: self.staff_id,
            AssignToType.FUNCTION: self.function_id,
            AssignToType.DEPARTMENT: self.department_id,
        }

    @property
    def target_id(self) -> Optional[str]:
        return self._references()[self.assign_to_type]

    def is_exclusive(self) -> bool:
        """True when only the reference matching assign_to_type is set."""
        present = [k for k, v in self._references().items() if v is not None]
        return present == [self.assign_to_type]


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str
    role: UserRole = UserRole.STAFF
    staff_id: Optional[str] = None


@dataclass(frozen=True)
class CompanyProfile:
    id: str = ""
    name: str = ""
    location: str = ""
    website: str = ""
    logo_url: str = ""


@dataclass(frozen=True)
class AppSettings:
    id: str = ""
    email_domain: str = "company.com"
    email_format: EmailFormat = EmailFormat.FIRSTNAME_L
    max_manager_grade_level: int = 1


def allocation_targets(
    assign_to_type: AssignToType, target_id: Optional[str],
) -> Dict[str, Optional[str]]:
    """The three mutually-exclusive reference fields for an allocation."""
    return {
        "staff_id": target_id if assign_to_type == AssignToType.STAFF else None,
        "function_id": target_id if assign_to_type == AssignToType.FUNCTION else None,
        "department_id": target_id if assign_to_type == AssignToType.DEPARTMENT else None,
    }


# ── Snapshot ──────────────────────────────────────────────────

@dataclass(frozen=True)
class AppState:
    """
    Complete dashboard snapshot.

    Replaced wholesale by every transition; never mutated in place.
    Collections untouched by a transition are shared with the previous
    snapshot.
    """

    departments: Tuple[Department, ...] = ()
    functions: Tuple[OrgFunction, ...] = ()
    responsibilities: Tuple[Responsibility, ...] = ()
    grades: Tuple[Grade, ...] = ()
    staff: Tuple[Staff, ...] = ()
    teams: Tuple[CrossFunctionalTeam, ...] = ()
    team_members: Tuple[TeamMember, ...] = ()
    workflows: Tuple[Workflow, ...] = ()
    workflow_steps: Tuple[WorkflowStep, ...] = ()
    compliance_tags: Tuple[ComplianceTag, ...] = ()
    company_numbers: Tuple[CompanyNumber, ...] = ()
    company_number_allocations: Tuple[CompanyNumberAllocation, ...] = ()
    users: Tuple[User, ...] = ()
    company_profile: CompanyProfile = field(default_factory=CompanyProfile)
    app_settings: AppSettings = field(default_factory=AppSettings)

    def members_of(self, team_id: str) -> Tuple[TeamMember, ...]:
        return tuple(m for m in self.team_members if m.team_id == team_id)

    def steps_of(self, workflow_id: str) -> Tuple[WorkflowStep, ...]:
        """Steps of one workflow sorted by step_order."""
        return tuple(sorted(
            (s for s in self.workflow_steps if s.workflow_id == workflow_id),
            key=lambda s: s.step_order,
        ))

    def to_dict(self) -> dict:
        """Serialise the snapshot to plain dicts (for the API / hashing)."""
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                out[f.name] = [record_to_row(r) for r in value]
            else:
                out[f.name] = record_to_row(value)
        return out


# ── Row conversion ────────────────────────────────────────────

# Field-name → coercion applied when a row becomes a record.
_COERCE = {
    "type": FunctionType,
    "status": WorkflowStatus,
    "assign_to_type": AssignToType,
    "role": UserRole,
    "email_format": EmailFormat,
    "level": int,
    "step_order": int,
    "max_manager_grade_level": int,
    "is_compliance_tagged": bool,
    "additional_function_ids": lambda v: tuple(v or ()),
}


def record_from_row(record_type: type, row: Mapping[str, Any]) -> Any:
    """
    Build a record of *record_type* from a snake_case row mapping.

    Unknown columns are ignored. Missing optional fields take the
    dataclass default; a missing required field raises ValueError.
    """
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if f.name in row:
            value = row[f.name]
            coerce = _COERCE.get(f.name)
            if coerce is not None and value is not None:
                value = coerce(value)
            elif f.name == "uid" and value is None:
                value = ""
            elif f.name == "id" and value is not None:
                value = str(value)
            kwargs[f.name] = value
        elif (
            f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        ):
            raise ValueError(
                f"{record_type.__name__}: missing required field {f.name!r}"
            )
    return record_type(**kwargs)


def record_to_row(record: Any) -> Dict[str, Any]:
    """Plain snake_case dict for a record: enum values, lists for tuples."""
    row: Dict[str, Any] = {}
    for f in dataclasses.fields(record):
        row[f.name] = to_plain(getattr(record, f.name))
    return row


def to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, list)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    return value
