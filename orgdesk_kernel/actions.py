"""
Organisation Dashboard Kernel — Transition Requests ("actions")

Actions are **pure data**. They carry intent and payload only.
They contain ZERO transition logic.

The set is closed: every action type below is handled by exactly one
group handler in transitions.py.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Mapping, Optional, Tuple

from .domain_types import (
    CompanyNumber,
    CompanyNumberAllocation,
    ComplianceTag,
    CrossFunctionalTeam,
    Department,
    Grade,
    OrgFunction,
    Responsibility,
    Staff,
    TeamMember,
    UserRole,
    Workflow,
    WorkflowStep,
    to_plain,
    record_to_row,
)


@dataclass(frozen=True)
class BaseAction:
    """Base for all transition requests — pure data container."""

    action_type: ClassVar[str] = ""

    def to_dict(self) -> dict:
        payload = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if hasattr(value, "__dataclass_fields__"):
                payload[f.name] = record_to_row(value)
            elif isinstance(value, tuple):
                payload[f.name] = [
                    record_to_row(v) if hasattr(v, "__dataclass_fields__") else to_plain(v)
                    for v in value
                ]
            else:
                payload[f.name] = to_plain(value)
        return {"action_type": self.action_type, "payload": payload}


# ---------------------------------------------------------------------------
# Department actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddDepartment(BaseAction):
    action_type: ClassVar[str] = "add_department"
    department: Department


@dataclass(frozen=True)
class UpdateDepartment(BaseAction):
    action_type: ClassVar[str] = "update_department"
    department: Department


@dataclass(frozen=True)
class DeleteDepartment(BaseAction):
    action_type: ClassVar[str] = "delete_department"
    department_id: str


@dataclass(frozen=True)
class AssignManager(BaseAction):
    """Field-level: set (or clear) a department's manager."""

    action_type: ClassVar[str] = "assign_manager"
    department_id: str
    staff_id: Optional[str]


# ---------------------------------------------------------------------------
# Function actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddFunction(BaseAction):
    action_type: ClassVar[str] = "add_function"
    function: OrgFunction


@dataclass(frozen=True)
class UpdateFunction(BaseAction):
    action_type: ClassVar[str] = "update_function"
    function: OrgFunction


@dataclass(frozen=True)
class DeleteFunction(BaseAction):
    action_type: ClassVar[str] = "delete_function"
    function_id: str


# ---------------------------------------------------------------------------
# Responsibility actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddResponsibility(BaseAction):
    action_type: ClassVar[str] = "add_responsibility"
    responsibility: Responsibility


@dataclass(frozen=True)
class UpdateResponsibility(BaseAction):
    action_type: ClassVar[str] = "update_responsibility"
    responsibility: Responsibility


@dataclass(frozen=True)
class DeleteResponsibility(BaseAction):
    action_type: ClassVar[str] = "delete_responsibility"
    responsibility_id: str


@dataclass(frozen=True)
class TransferResponsibility(BaseAction):
    """Field-level: move a responsibility to another function."""

    action_type: ClassVar[str] = "transfer_responsibility"
    responsibility_id: str
    new_function_id: str


# ---------------------------------------------------------------------------
# Staff actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddStaff(BaseAction):
    action_type: ClassVar[str] = "add_staff"
    staff: Staff


@dataclass(frozen=True)
class UpdateStaff(BaseAction):
    action_type: ClassVar[str] = "update_staff"
    staff: Staff


@dataclass(frozen=True)
class DeleteStaff(BaseAction):
    action_type: ClassVar[str] = "delete_staff"
    staff_id: str


# ---------------------------------------------------------------------------
# Cross-functional team actions (parent + owned member rows)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddTeam(BaseAction):
    action_type: ClassVar[str] = "add_team"
    team: CrossFunctionalTeam
    members: Tuple[TeamMember, ...] = ()


@dataclass(frozen=True)
class UpdateTeam(BaseAction):
    """Replace the team and its entire member set in one step."""

    action_type: ClassVar[str] = "update_team"
    team: CrossFunctionalTeam
    members: Tuple[TeamMember, ...] = ()


@dataclass(frozen=True)
class DeleteTeam(BaseAction):
    action_type: ClassVar[str] = "delete_team"
    team_id: str


# ---------------------------------------------------------------------------
# Workflow actions (parent + owned ordered step rows)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddWorkflow(BaseAction):
    action_type: ClassVar[str] = "add_workflow"
    workflow: Workflow
    steps: Tuple[WorkflowStep, ...] = ()


@dataclass(frozen=True)
class UpdateWorkflow(BaseAction):
    """Replace the workflow and its entire step set in one step."""

    action_type: ClassVar[str] = "update_workflow"
    workflow: Workflow
    steps: Tuple[WorkflowStep, ...] = ()


@dataclass(frozen=True)
class DeleteWorkflow(BaseAction):
    action_type: ClassVar[str] = "delete_workflow"
    workflow_id: str


# ---------------------------------------------------------------------------
# Admin: grades, compliance tags
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddGrade(BaseAction):
    action_type: ClassVar[str] = "add_grade"
    grade: Grade


@dataclass(frozen=True)
class UpdateGrade(BaseAction):
    action_type: ClassVar[str] = "update_grade"
    grade: Grade


@dataclass(frozen=True)
class DeleteGrade(BaseAction):
    action_type: ClassVar[str] = "delete_grade"
    grade_id: str


@dataclass(frozen=True)
class AddComplianceTag(BaseAction):
    action_type: ClassVar[str] = "add_compliance_tag"
    tag: ComplianceTag


@dataclass(frozen=True)
class UpdateComplianceTag(BaseAction):
    action_type: ClassVar[str] = "update_compliance_tag"
    tag: ComplianceTag


@dataclass(frozen=True)
class DeleteComplianceTag(BaseAction):
    action_type: ClassVar[str] = "delete_compliance_tag"
    tag_id: str


# ---------------------------------------------------------------------------
# Admin: company numbers and allocations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddCompanyNumbers(BaseAction):
    action_type: ClassVar[str] = "add_company_numbers"
    numbers: Tuple[CompanyNumber, ...]


@dataclass(frozen=True)
class DeleteCompanyNumber(BaseAction):
    """Removes the number and every allocation of it."""

    action_type: ClassVar[str] = "delete_company_number"
    company_number_id: str


@dataclass(frozen=True)
class AllocateNumber(BaseAction):
    action_type: ClassVar[str] = "allocate_number"
    allocation: CompanyNumberAllocation


@dataclass(frozen=True)
class ReleaseNumber(BaseAction):
    action_type: ClassVar[str] = "release_number"
    allocation_id: str


# ---------------------------------------------------------------------------
# Admin: singletons and users
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UpdateAppSettings(BaseAction):
    """Shallow-merge *changes* into AppSettings. Unknown keys are ignored."""

    action_type: ClassVar[str] = "update_app_settings"
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class UpdateCompanyProfile(BaseAction):
    """Shallow-merge *changes* into CompanyProfile. Unknown keys are ignored."""

    action_type: ClassVar[str] = "update_company_profile"
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class UpdateUserRole(BaseAction):
    action_type: ClassVar[str] = "update_user_role"
    user_id: str
    role: UserRole


ALL_ACTION_TYPES: Tuple[type, ...] = (
    AddDepartment, UpdateDepartment, DeleteDepartment, AssignManager,
    AddFunction, UpdateFunction, DeleteFunction,
    AddResponsibility, UpdateResponsibility, DeleteResponsibility,
    TransferResponsibility,
    AddStaff, UpdateStaff, DeleteStaff,
    AddTeam, UpdateTeam, DeleteTeam,
    AddWorkflow, UpdateWorkflow, DeleteWorkflow,
    AddGrade, UpdateGrade, DeleteGrade,
    AddComplianceTag, UpdateComplianceTag, DeleteComplianceTag,
    AddCompanyNumbers, DeleteCompanyNumber, AllocateNumber, ReleaseNumber,
    UpdateAppSettings, UpdateCompanyProfile, UpdateUserRole,
)
