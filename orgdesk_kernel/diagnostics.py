"""
Organisation Dashboard Kernel — Diagnostics

Derived read-side values (department status, staff email, label lookups)
and a diagnostic summary of the current snapshot.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional

from .constants import UNKNOWN_LABEL
from .domain_types import (
    AppSettings,
    AppState,
    Department,
    DepartmentStatus,
    EmailFormat,
    Staff,
)
from .invariants import find_dangling_references, validate_invariants
from .registry import COLLECTIONS


def department_status(state: AppState, department: Department) -> DepartmentStatus:
    """
    Unmanaged: no manager, or the manager / their grade no longer resolves.
    Managed:   manager's grade level <= max_manager_grade_level.
    Acting:    otherwise.
    """
    if not department.manager_id:
        return DepartmentStatus.UNMANAGED
    manager = _find(state.staff, department.manager_id)
    if manager is None:
        return DepartmentStatus.UNMANAGED
    grade = _find(state.grades, manager.grade_id)
    if grade is None:
        return DepartmentStatus.UNMANAGED
    if grade.level <= state.app_settings.max_manager_grade_level:
        return DepartmentStatus.MANAGED
    return DepartmentStatus.ACTING


def generate_email(first_name: str, last_name: str, settings: AppSettings) -> str:
    fn = first_name.lower()
    ln = last_name.lower()
    if settings.email_format == EmailFormat.FIRSTNAME_L:
        return f"{fn}.{ln[:1]}@{settings.email_domain}"
    return f"{fn[:1]}.{ln}@{settings.email_domain}"


def staff_email(staff: Staff, settings: AppSettings) -> str:
    return generate_email(staff.first_name, staff.last_name, settings)


def resolve_label(records: Iterable, record_id: Optional[str], attr: str = "name") -> str:
    """Display label of the record with *record_id*, or "Unknown"."""
    record = _find(records, record_id)
    if record is None:
        return UNKNOWN_LABEL
    return getattr(record, attr)


def staff_name(state: AppState, staff_id: Optional[str]) -> str:
    return resolve_label(state.staff, staff_id, "full_name")


def _find(records: Iterable, record_id: Optional[str]):
    if record_id is None:
        return None
    return next((r for r in records if r.id == record_id), None)


def compute_diagnostics(state: AppState) -> dict:
    """Return a diagnostic dict summarising the current snapshot."""
    counts = {
        spec.name: len(getattr(state, spec.state_field))
        for spec in COLLECTIONS.values()
    }
    statuses = Counter(department_status(state, d).value for d in state.departments)
    dangling = find_dangling_references(state)
    violations = validate_invariants(state)

    warnings: List[str] = list(violations)
    unmanaged = statuses.get(DepartmentStatus.UNMANAGED.value, 0)
    if unmanaged:
        warnings.append(f"{unmanaged} department(s) without a manager")
    if dangling:
        warnings.append(f"{len(dangling)} reference(s) no longer resolve")

    allocated = {al.company_number_id for al in state.company_number_allocations}
    free_numbers = sum(1 for n in state.company_numbers if n.id not in allocated)

    return {
        "counts": counts,
        "department_status": {
            status.value: statuses.get(status.value, 0) for status in DepartmentStatus
        },
        "free_company_numbers": free_numbers,
        "dangling_references": [
            {
                "collection": d.collection,
                "record_id": d.record_id,
                "field": d.field,
                "target_id": d.target_id,
            }
            for d in dangling
        ],
        "warnings": warnings,
    }
