"""
Organisation Dashboard Kernel — Delete Guards

Business rules checked against the current snapshot before any remote
call. Each check returns the rejection message, or None when the delete
may proceed. Deletes are rejected, never cascaded, while dependents exist.
"""

from __future__ import annotations

from typing import Optional

from .domain_types import AppState

DEPARTMENT_HAS_STAFF = "Cannot delete — staff are assigned to this department."
DEPARTMENT_HAS_FUNCTIONS = "Cannot delete — functions exist in this department."
DEPARTMENT_HAS_TEAMS = "Cannot delete — cross-functional teams report to this department."
DEPARTMENT_HAS_WORKFLOWS = "Cannot delete — workflows are owned by this department."
FUNCTION_HAS_STAFF = "Cannot delete — staff are assigned to this function."
FUNCTION_HAS_RESPONSIBILITIES = "Cannot delete — responsibilities are assigned to this function."
STAFF_IS_MANAGER = "Cannot delete — this person is assigned as a department manager."
STAFF_IN_TEAM = "Cannot delete — this person is part of a cross-functional team."
RESPONSIBILITY_IN_WORKFLOW = "Cannot delete — this responsibility is used in a workflow."
GRADE_HAS_STAFF = "Cannot delete — staff are assigned to this grade."
TAG_IN_USE = "Cannot delete — responsibilities use this compliance tag."
NUMBER_IS_ALLOCATED = "Cannot delete — this number is allocated. Release it first."


def department_headcount(state: AppState, department_id: str) -> int:
    return sum(1 for s in state.staff if s.department_id == department_id)


def function_staff_count(state: AppState, function_id: str) -> int:
    return sum(1 for s in state.staff if function_id in s.function_ids())


def check_department_delete(state: AppState, department_id: str) -> Optional[str]:
    if department_headcount(state, department_id) > 0:
        return DEPARTMENT_HAS_STAFF
    if any(f.department_id == department_id for f in state.functions):
        return DEPARTMENT_HAS_FUNCTIONS
    if any(t.reporting_department_id == department_id for t in state.teams):
        return DEPARTMENT_HAS_TEAMS
    if any(w.owner_department_id == department_id for w in state.workflows):
        return DEPARTMENT_HAS_WORKFLOWS
    return None


def check_function_delete(state: AppState, function_id: str) -> Optional[str]:
    if function_staff_count(state, function_id) > 0:
        return FUNCTION_HAS_STAFF
    if any(r.function_id == function_id for r in state.responsibilities):
        return FUNCTION_HAS_RESPONSIBILITIES
    return None


def check_staff_delete(state: AppState, staff_id: str) -> Optional[str]:
    if any(d.manager_id == staff_id for d in state.departments):
        return STAFF_IS_MANAGER
    if any(t.lead_id == staff_id for t in state.teams) or any(
        m.staff_id == staff_id for m in state.team_members
    ):
        return STAFF_IN_TEAM
    return None


def check_responsibility_delete(state: AppState, responsibility_id: str) -> Optional[str]:
    if any(s.responsibility_id == responsibility_id for s in state.workflow_steps):
        return RESPONSIBILITY_IN_WORKFLOW
    return None


def check_grade_delete(state: AppState, grade_id: str) -> Optional[str]:
    if any(s.grade_id == grade_id for s in state.staff):
        return GRADE_HAS_STAFF
    return None


def check_compliance_tag_delete(state: AppState, tag_id: str) -> Optional[str]:
    if any(r.compliance_tag_id == tag_id for r in state.responsibilities):
        return TAG_IN_USE
    return None


def check_company_number_delete(state: AppState, company_number_id: str) -> Optional[str]:
    if any(al.company_number_id == company_number_id for al in state.company_number_allocations):
        return NUMBER_IS_ALLOCATED
    return None


def can_manage(state: AppState, staff_id: str) -> bool:
    """Staff whose grade resolves and sits at or under the manager threshold."""
    staff = next((s for s in state.staff if s.id == staff_id), None)
    if staff is None or not staff.grade_id:
        return False
    grade = next((g for g in state.grades if g.id == staff.grade_id), None)
    return grade is not None and grade.level <= state.app_settings.max_manager_grade_level
