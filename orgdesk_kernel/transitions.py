"""
Organisation Dashboard Kernel — Centralized Transition Logic

ALL state-mutation logic lives here.

apply_action(state, action) folds the per-group handlers over the
snapshot. Each group owns a disjoint table of action types, so for any
action at most one group produces a new snapshot; the others pass it
through. Transitions never perform I/O and never fail: an unknown id is
a no-op and returns the input snapshot itself.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, Iterable, Mapping, Tuple

from . import actions as a
from .domain_types import AppState


Handler = Callable[[AppState, a.BaseAction], AppState]


# ---------------------------------------------------------------------------
# Public dispatcher
# ---------------------------------------------------------------------------

def apply_action(state: AppState, action: a.BaseAction) -> AppState:
    """
    Apply *action* to *state* and return the resulting snapshot.
    The input snapshot is never mutated.
    """
    for group in GROUP_HANDLERS:
        state = group(state, action)
    return state


# ---------------------------------------------------------------------------
# Tuple helpers (pure, identity-preserving when nothing changes)
# ---------------------------------------------------------------------------

def _upsert(items: Tuple, records: Iterable) -> Tuple:
    """Append *records*; a record whose id is already present replaces it."""
    incoming = {r.id: r for r in records}
    if not incoming:
        return items
    kept = tuple(incoming.pop(r.id) if r.id in incoming else r for r in items)
    return kept + tuple(incoming.values())


def _replace(items: Tuple, record) -> Tuple:
    if not any(r.id == record.id for r in items):
        return items
    return tuple(record if r.id == record.id else r for r in items)


def _assign(items: Tuple, record_id: str, **changes: Any) -> Tuple:
    if not any(r.id == record_id for r in items):
        return items
    return tuple(
        dataclasses.replace(r, **changes) if r.id == record_id else r
        for r in items
    )


def _remove_where(items: Tuple, predicate: Callable[[Any], bool]) -> Tuple:
    kept = tuple(r for r in items if not predicate(r))
    return items if len(kept) == len(items) else kept


def _remove(items: Tuple, record_id: str) -> Tuple:
    return _remove_where(items, lambda r: r.id == record_id)


def _with(state: AppState, **collections: Any) -> AppState:
    """dataclasses.replace, but returns *state* itself when nothing changed."""
    changed = {
        name: value for name, value in collections.items()
        if getattr(state, name) is not value
    }
    if not changed:
        return state
    return dataclasses.replace(state, **changed)


def _merge(record, changes: Mapping[str, Any]):
    names = {f.name for f in dataclasses.fields(record)}
    known = {k: v for k, v in changes.items() if k in names}
    if not known:
        return record
    return dataclasses.replace(record, **known)


def _replace_with_children(
    state: AppState,
    parent_field: str,
    child_field: str,
    foreign_key: str,
    parent,
    children: Iterable,
    insert_if_missing: bool,
) -> AppState:
    """
    Composite transition: put *parent* in place and swap the parent's
    whole child subset for *children*. Children of other parents are
    left untouched.
    """
    parents = getattr(state, parent_field)
    exists = any(p.id == parent.id for p in parents)
    if not exists and not insert_if_missing:
        return state
    new_parents = _replace(parents, parent) if exists else parents + (parent,)
    kept = tuple(
        c for c in getattr(state, child_field)
        if getattr(c, foreign_key) != parent.id
    )
    new_children = kept + tuple(
        c for c in children if getattr(c, foreign_key) == parent.id
    )
    return dataclasses.replace(
        state, **{parent_field: new_parents, child_field: new_children}
    )


def _group(table: Dict[type, Handler]) -> Handler:
    def handle(state: AppState, action: a.BaseAction) -> AppState:
        fn = table.get(type(action))
        return fn(state, action) if fn is not None else state
    handle.action_types = frozenset(table)
    return handle


# ---------------------------------------------------------------------------
# Department group
# ---------------------------------------------------------------------------

department_transitions = _group({
    a.AddDepartment: lambda s, act: _with(
        s, departments=_upsert(s.departments, [act.department])),
    a.UpdateDepartment: lambda s, act: _with(
        s, departments=_replace(s.departments, act.department)),
    a.DeleteDepartment: lambda s, act: _with(
        s, departments=_remove(s.departments, act.department_id)),
    a.AssignManager: lambda s, act: _with(
        s, departments=_assign(s.departments, act.department_id, manager_id=act.staff_id)),
})


# ---------------------------------------------------------------------------
# Function group
# ---------------------------------------------------------------------------

function_transitions = _group({
    a.AddFunction: lambda s, act: _with(
        s, functions=_upsert(s.functions, [act.function])),
    a.UpdateFunction: lambda s, act: _with(
        s, functions=_replace(s.functions, act.function)),
    a.DeleteFunction: lambda s, act: _with(
        s, functions=_remove(s.functions, act.function_id)),
})


# ---------------------------------------------------------------------------
# Responsibility group
# ---------------------------------------------------------------------------

responsibility_transitions = _group({
    a.AddResponsibility: lambda s, act: _with(
        s, responsibilities=_upsert(s.responsibilities, [act.responsibility])),
    a.UpdateResponsibility: lambda s, act: _with(
        s, responsibilities=_replace(s.responsibilities, act.responsibility)),
    a.DeleteResponsibility: lambda s, act: _with(
        s, responsibilities=_remove(s.responsibilities, act.responsibility_id)),
    a.TransferResponsibility: lambda s, act: _with(
        s, responsibilities=_assign(
            s.responsibilities, act.responsibility_id, function_id=act.new_function_id)),
})


# ---------------------------------------------------------------------------
# Staff group
# ---------------------------------------------------------------------------

staff_transitions = _group({
    a.AddStaff: lambda s, act: _with(s, staff=_upsert(s.staff, [act.staff])),
    a.UpdateStaff: lambda s, act: _with(s, staff=_replace(s.staff, act.staff)),
    a.DeleteStaff: lambda s, act: _with(s, staff=_remove(s.staff, act.staff_id)),
})


# ---------------------------------------------------------------------------
# Team group (team ↔ members)
# ---------------------------------------------------------------------------

def _delete_team(state: AppState, action: a.DeleteTeam) -> AppState:
    return _with(
        state,
        teams=_remove(state.teams, action.team_id),
        team_members=_remove_where(
            state.team_members, lambda m: m.team_id == action.team_id),
    )


team_transitions = _group({
    a.AddTeam: lambda s, act: _replace_with_children(
        s, "teams", "team_members", "team_id", act.team, act.members, True),
    a.UpdateTeam: lambda s, act: _replace_with_children(
        s, "teams", "team_members", "team_id", act.team, act.members, False),
    a.DeleteTeam: _delete_team,
})


# ---------------------------------------------------------------------------
# Workflow group (workflow ↔ ordered steps)
# ---------------------------------------------------------------------------

def _delete_workflow(state: AppState, action: a.DeleteWorkflow) -> AppState:
    return _with(
        state,
        workflows=_remove(state.workflows, action.workflow_id),
        workflow_steps=_remove_where(
            state.workflow_steps, lambda st: st.workflow_id == action.workflow_id),
    )


workflow_transitions = _group({
    a.AddWorkflow: lambda s, act: _replace_with_children(
        s, "workflows", "workflow_steps", "workflow_id", act.workflow, act.steps, True),
    a.UpdateWorkflow: lambda s, act: _replace_with_children(
        s, "workflows", "workflow_steps", "workflow_id", act.workflow, act.steps, False),
    a.DeleteWorkflow: _delete_workflow,
})


# ---------------------------------------------------------------------------
# Admin group (grades, tags, numbers, singletons, users)
# ---------------------------------------------------------------------------

def _delete_company_number(state: AppState, action: a.DeleteCompanyNumber) -> AppState:
    return _with(
        state,
        company_numbers=_remove(state.company_numbers, action.company_number_id),
        company_number_allocations=_remove_where(
            state.company_number_allocations,
            lambda al: al.company_number_id == action.company_number_id,
        ),
    )


admin_transitions = _group({
    a.AddGrade: lambda s, act: _with(s, grades=_upsert(s.grades, [act.grade])),
    a.UpdateGrade: lambda s, act: _with(s, grades=_replace(s.grades, act.grade)),
    a.DeleteGrade: lambda s, act: _with(s, grades=_remove(s.grades, act.grade_id)),
    a.AddComplianceTag: lambda s, act: _with(
        s, compliance_tags=_upsert(s.compliance_tags, [act.tag])),
    a.UpdateComplianceTag: lambda s, act: _with(
        s, compliance_tags=_replace(s.compliance_tags, act.tag)),
    a.DeleteComplianceTag: lambda s, act: _with(
        s, compliance_tags=_remove(s.compliance_tags, act.tag_id)),
    a.AddCompanyNumbers: lambda s, act: _with(
        s, company_numbers=_upsert(s.company_numbers, act.numbers)),
    a.DeleteCompanyNumber: _delete_company_number,
    a.AllocateNumber: lambda s, act: _with(
        s, company_number_allocations=_upsert(
            s.company_number_allocations, [act.allocation])),
    a.ReleaseNumber: lambda s, act: _with(
        s, company_number_allocations=_remove(
            s.company_number_allocations, act.allocation_id)),
    a.UpdateAppSettings: lambda s, act: _with(
        s, app_settings=_merge(s.app_settings, act.changes)),
    a.UpdateCompanyProfile: lambda s, act: _with(
        s, company_profile=_merge(s.company_profile, act.changes)),
    a.UpdateUserRole: lambda s, act: _with(
        s, users=_assign(s.users, act.user_id, role=act.role)),
})


GROUP_HANDLERS: Tuple[Handler, ...] = (
    department_transitions,
    staff_transitions,
    function_transitions,
    responsibility_transitions,
    workflow_transitions,
    team_transitions,
    admin_transitions,
)
