"""
Organisation Dashboard Kernel — Invariant Checks

Two tiers:
  - structural invariants (validate_invariants): unique ids, allocation
    exclusivity, contiguous step orders. Reported as messages; a store
    created with validate=True logs them after each dispatch.
  - referential integrity (find_dangling_references): a deleted record may
    leave sibling references behind. Those are expected and are rendered
    as "Unknown" at read time, so they are listed, never enforced.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional

from .domain_types import AppState
from .registry import COLLECTIONS


class InvariantViolationError(Exception):
    """Raised by assert_invariants when a structural invariant is violated."""

    def __init__(self, violations: List[str]) -> None:
        self.violations = violations
        super().__init__("; ".join(violations))


@dataclass(frozen=True)
class DanglingReference:
    collection: str
    record_id: str
    field: str
    target_id: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_invariants(state: AppState) -> List[str]:
    """Run all structural checks; return one message per violation."""
    violations: List[str] = []
    violations.extend(_check_unique_ids(state))
    violations.extend(_check_allocation_exclusivity(state))
    violations.extend(_check_step_orders(state))
    return violations


def assert_invariants(state: AppState) -> None:
    violations = validate_invariants(state)
    if violations:
        raise InvariantViolationError(violations)


def find_dangling_references(state: AppState) -> List[DanglingReference]:
    """Every non-null reference that does not resolve to an existing record."""
    ids = {
        spec.state_field: {r.id for r in getattr(state, spec.state_field)}
        for spec in COLLECTIONS.values()
    }
    found: List[DanglingReference] = []

    def check(collection: str, record_id: str, field: str,
              target: Optional[str], target_field: str) -> None:
        if target is not None and target not in ids[target_field]:
            found.append(DanglingReference(collection, record_id, field, target))

    for d in state.departments:
        check("department", d.id, "manager_id", d.manager_id, "staff")
    for f in state.functions:
        check("function", f.id, "department_id", f.department_id, "departments")
    for r in state.responsibilities:
        check("responsibility", r.id, "function_id", r.function_id, "functions")
        check("responsibility", r.id, "compliance_tag_id", r.compliance_tag_id, "compliance_tags")
    for s in state.staff:
        check("staff", s.id, "department_id", s.department_id, "departments")
        check("staff", s.id, "grade_id", s.grade_id, "grades")
        check("staff", s.id, "primary_function_id", s.primary_function_id, "functions")
        check("staff", s.id, "secondary_function_id", s.secondary_function_id, "functions")
        for fid in s.additional_function_ids:
            check("staff", s.id, "additional_function_ids", fid, "functions")
    for t in state.teams:
        check("cross_functional_team", t.id, "reporting_department_id",
              t.reporting_department_id, "departments")
        check("cross_functional_team", t.id, "lead_id", t.lead_id, "staff")
    for m in state.team_members:
        check("team_member", m.id, "team_id", m.team_id, "teams")
        check("team_member", m.id, "staff_id", m.staff_id, "staff")
    for w in state.workflows:
        check("workflow", w.id, "owner_department_id", w.owner_department_id, "departments")
    for st in state.workflow_steps:
        check("workflow_step", st.id, "workflow_id", st.workflow_id, "workflows")
        check("workflow_step", st.id, "responsibility_id", st.responsibility_id, "responsibilities")
    for al in state.company_number_allocations:
        check("company_number_allocation", al.id, "company_number_id",
              al.company_number_id, "company_numbers")
        check("company_number_allocation", al.id, "staff_id", al.staff_id, "staff")
        check("company_number_allocation", al.id, "function_id", al.function_id, "functions")
        check("company_number_allocation", al.id, "department_id", al.department_id, "departments")
    for u in state.users:
        check("app_user", u.id, "staff_id", u.staff_id, "staff")
    return found


# ---------------------------------------------------------------------------
# Individual checks (private)
# ---------------------------------------------------------------------------

def _check_unique_ids(state: AppState) -> List[str]:
    out = []
    for spec in COLLECTIONS.values():
        seen = set()
        for record in getattr(state, spec.state_field):
            if record.id in seen:
                out.append(f"{spec.name}: duplicate id {record.id!r}")
            seen.add(record.id)
    return out


def _check_allocation_exclusivity(state: AppState) -> List[str]:
    return [
        f"company_number_allocation {al.id!r}: references do not match "
        f"assign_to_type={al.assign_to_type.value!r}"
        for al in state.company_number_allocations
        if not al.is_exclusive()
    ]


def _check_step_orders(state: AppState) -> List[str]:
    orders: Dict[str, List[int]] = defaultdict(list)
    for st in state.workflow_steps:
        orders[st.workflow_id].append(st.step_order)
    return [
        f"workflow {wid!r}: step orders {sorted(found)} are not 1..{len(found)}"
        for wid, found in sorted(orders.items())
        if sorted(found) != list(range(1, len(found) + 1))
    ]
