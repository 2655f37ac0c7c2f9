# file: orgdesk_runtime/test_orchestrators.py
"""
Organisation Dashboard Runtime — Mutation Orchestrator Tests

Every test loads a DashboardSession over a seeded MemoryRecordStore and
drives the orchestrators the way the screens do:

  - successful writes land in the snapshot with a success notification
  - failed writes leave the snapshot untouched (same object)
  - guarded deletes are rejected locally without any record-store call
  - parent + children writes: full success, partial success, clear failure
  - the saving flag turns a second concurrent submit into "busy"

Run:  python -m orgdesk_runtime.test_orchestrators
"""

from __future__ import annotations

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orgdesk_kernel.domain_types import AssignToType, EmailFormat, UserRole
from orgdesk_kernel.guards import (
    DEPARTMENT_HAS_STAFF,
    FUNCTION_HAS_STAFF,
    GRADE_HAS_STAFF,
    NUMBER_IS_ALLOCATED,
    RESPONSIBILITY_IN_WORKFLOW,
    STAFF_IN_TEAM,
    STAFF_IS_MANAGER,
    TAG_IN_USE,
)
from orgdesk_kernel.workflow_steps import StepDraft

from orgdesk_runtime.gateway import GatewayResult, RemoteGateway
from orgdesk_runtime.notifications import NotificationKind, RecordingNotifier
from orgdesk_runtime.orchestrators import (
    OutcomeStatus,
    StaffForm,
    TeamForm,
    WorkflowForm,
)
from orgdesk_runtime.orchestrators.admin import INVALID_RANGE
from orgdesk_runtime.orchestrators.base import BUSY_MESSAGE
from orgdesk_runtime.orchestrators.departments import NOT_ELIGIBLE_MANAGER
from orgdesk_runtime.record_store import MemoryRecordStore
from orgdesk_runtime.session import DashboardSession


# ══════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════

def _seed(store: MemoryRecordStore) -> MemoryRecordStore:
    """
    d1 Operations (manager s1, three staff), d2 Finance (no staff).
    s1 holds grade g0 (level 0), s3 holds g3 (level 3), s2 has no grade.
    Team t1 has two members; t2 has one. Workflow w1 runs r1 → r2 → r3.
    Number n1 is allocated to s1; n2 is free.
    Responsibility r1 carries compliance tag ct1.
    """
    store.seed("department", [
        {"id": "d1", "name": "Operations", "manager_id": "s1"},
        {"id": "d2", "name": "Finance"},
    ])
    store.seed("function", [
        {"id": "f1", "name": "Logistics", "department_id": "d1", "type": "Internal"},
        {"id": "f2", "name": "Payroll", "department_id": "d2", "type": "Internal"},
    ])
    store.seed("responsibility", [
        {"id": "r1", "name": "Dispatch", "function_id": "f1",
         "is_compliance_tagged": True, "compliance_tag_id": "ct1"},
        {"id": "r2", "name": "Invoice", "function_id": "f1"},
        {"id": "r3", "name": "Reconcile", "function_id": "f2"},
        {"id": "r4", "name": "Archive", "function_id": "f2"},
    ])
    store.seed("compliance_tag", [{"id": "ct1", "name": "GDPR"}])
    store.seed("grade", [
        {"id": "g0", "level": 0, "name": "Director"},
        {"id": "g3", "level": 3, "name": "Analyst"},
    ])
    store.seed("staff", [
        {"id": "s1", "first_name": "Ada", "last_name": "Lovelace",
         "department_id": "d1", "primary_function_id": "f1", "grade_id": "g0"},
        {"id": "s2", "first_name": "Alan", "last_name": "Turing",
         "department_id": "d1", "primary_function_id": "f1"},
        {"id": "s3", "first_name": "Grace", "last_name": "Hopper",
         "department_id": "d1", "primary_function_id": "f1", "grade_id": "g3"},
    ])
    store.seed("cross_functional_team", [
        {"id": "t1", "name": "Launch", "reporting_department_id": "d1", "lead_id": "s2"},
        {"id": "t2", "name": "Audit", "reporting_department_id": "d1"},
    ])
    store.seed("team_member", [
        {"id": "tm1", "team_id": "t1", "staff_id": "s2"},
        {"id": "tm2", "team_id": "t1", "staff_id": "s3"},
        {"id": "tm3", "team_id": "t2", "staff_id": "s3"},
    ])
    store.seed("workflow", [
        {"id": "w1", "name": "Month end", "owner_department_id": "d1", "status": "Active"},
    ])
    store.seed("workflow_step", [
        {"id": "ws1", "workflow_id": "w1", "responsibility_id": "r1", "step_order": 1},
        {"id": "ws2", "workflow_id": "w1", "responsibility_id": "r2", "step_order": 2},
        {"id": "ws3", "workflow_id": "w1", "responsibility_id": "r3", "step_order": 3},
    ])
    store.seed("company_number", [
        {"id": "n1", "phone_number": "02000001"},
        {"id": "n2", "phone_number": "02000002"},
    ])
    store.seed("company_number_allocation", [
        {"id": "al1", "company_number_id": "n1", "assign_to_type": "Staff", "staff_id": "s1"},
    ])
    store.seed("app_user", [
        {"id": "u1", "username": "ada", "email": "ada@company.com", "role": "Admin", "staff_id": "s1"},
    ])
    return store


def _session(cascade: bool = True, gateway_cls: type = RemoteGateway):
    """Loaded session, its record store (call log cleared) and notifier."""
    store = _seed(MemoryRecordStore(cascade=cascade))
    notifier = RecordingNotifier()
    session = DashboardSession(gateway_cls(store), notifier, validate=True)
    asyncio.run(session.start())
    assert session.ready, session.error
    store.reset_calls()
    return session, store, notifier


def _header(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


# ══════════════════════════════════════════════════════════════
# Core flows
# ══════════════════════════════════════════════════════════════

def test_create_department_without_manager() -> None:
    _header("Create department 'Legal' with no manager")
    session, store, notifier = _session()
    before = len(session.state.departments)

    outcome = asyncio.run(session.departments.add("Legal"))

    assert outcome.status == OutcomeStatus.SAVED, outcome
    assert len(session.state.departments) == before + 1
    legal = session.state.departments[-1]
    assert legal.name == "Legal" and legal.manager_id is None
    assert legal.uid == "003"
    assert notifier.last.kind == NotificationKind.SUCCESS
    assert notifier.last.message == "Department added"
    assert store.count_calls() == 1
    print("  [PASS]")


def test_department_with_staff_is_not_deleted() -> None:
    _header("Delete department with three staff is rejected")
    session, store, notifier = _session()
    before = session.state

    outcome = asyncio.run(session.departments.delete("d1"))

    assert outcome.status == OutcomeStatus.REJECTED
    assert outcome.message == DEPARTMENT_HAS_STAFF
    assert notifier.last.message == "Cannot delete — staff are assigned to this department."
    assert notifier.last.kind == NotificationKind.ERROR
    assert store.count_calls() == 0
    assert session.state is before
    print("  [PASS]")


def test_team_created_when_member_insert_fails() -> None:
    _header("Team created, member insert fails")
    session, store, notifier = _session()
    store.fail("insert_many", "team_member", error="insert blocked")

    outcome = asyncio.run(session.teams.add(TeamForm(
        name="Pricing", reporting_department_id="d2", member_ids=("s1", "s2"),
    )))

    assert outcome.status == OutcomeStatus.PARTIAL
    team = next(t for t in session.state.teams if t.name == "Pricing")
    assert session.state.members_of(team.id) == ()
    assert notifier.last.kind == NotificationKind.ERROR
    assert notifier.last.message == "Team created, but failed to add members: insert blocked"
    print("  [PASS]")


def test_workflow_steps_replaced() -> None:
    _header("Workflow steps [A,B,C] become [C,A]")
    session, store, notifier = _session()

    outcome = asyncio.run(session.workflows.update("w1", WorkflowForm(
        name="Month end", owner_department_id="d1",
        steps=(StepDraft("r3"), StepDraft("r1")),
    )))

    assert outcome.status == OutcomeStatus.SAVED, outcome
    steps = session.state.steps_of("w1")
    assert [(s.responsibility_id, s.step_order) for s in steps] == [("r3", 1), ("r1", 2)]
    remote = sorted(store.rows("workflow_step"), key=lambda r: r["step_order"])
    assert [(r["responsibility_id"], r["step_order"]) for r in remote] == [("r3", 1), ("r1", 2)]
    assert notifier.last.message == "Workflow updated"
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Failure handling
# ══════════════════════════════════════════════════════════════

def test_failed_write_leaves_snapshot_untouched() -> None:
    _header("Failed update keeps the same snapshot object")
    session, store, notifier = _session()
    before = session.state
    store.fail("update", "department", error="permission denied")

    outcome = asyncio.run(session.departments.update("d2", "Treasury"))

    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.message == "Failed to update department: permission denied"
    assert session.state is before
    assert notifier.last.kind == NotificationKind.ERROR
    assert not session.departments.saving
    print("  [PASS]")


def test_unexpected_store_error_is_contained() -> None:
    _header("Unexpected record-store exception becomes a failed outcome")
    session, store, notifier = _session()
    before = session.state
    store.fail("insert", "grade", error="boom", unexpected=True)

    outcome = asyncio.run(session.grades.add("Lead", 1))

    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.message == "Failed to add grade: boom"
    assert session.state is before
    assert not session.grades.saving
    print("  [PASS]")


def test_team_update_partial_failure_empties_members() -> None:
    _header("Team update: parent saved, members insert fails")
    session, store, notifier = _session()
    store.fail("insert_many", "team_member")

    outcome = asyncio.run(session.teams.update("t1", TeamForm(
        name="Launch 2", reporting_department_id="d1", member_ids=("s1",),
    )))

    assert outcome.status == OutcomeStatus.PARTIAL
    assert session.state.teams[0].name == "Launch 2"
    assert session.state.members_of("t1") == ()
    assert [m.id for m in session.state.members_of("t2")] == ["tm3"]
    assert [r for r in store.rows("team_member") if r["team_id"] == "t1"] == []
    assert notifier.last.message.startswith("Team updated, but failed to add members")
    print("  [PASS]")


def test_workflow_created_when_step_insert_fails() -> None:
    _header("Workflow created, step insert fails")
    session, store, notifier = _session()
    store.fail("insert_many", "workflow_step", error="insert blocked")

    outcome = asyncio.run(session.workflows.add(WorkflowForm(
        name="Close", owner_department_id="d2",
        steps=(StepDraft("r3"), StepDraft("r4")),
    )))

    assert outcome.status == OutcomeStatus.PARTIAL
    workflow = next(w for w in session.state.workflows if w.name == "Close")
    assert outcome.record.id == workflow.id
    assert session.state.steps_of(workflow.id) == ()
    assert len(session.state.steps_of("w1")) == 3
    assert notifier.last.kind == NotificationKind.ERROR
    assert notifier.last.message == "Workflow created, but failed to add steps: insert blocked"
    print("  [PASS]")


def test_workflow_update_partial_failure_empties_steps() -> None:
    _header("Workflow update: parent saved, steps insert fails")
    session, store, notifier = _session()
    store.fail("insert_many", "workflow_step")

    outcome = asyncio.run(session.workflows.update("w1", WorkflowForm(
        name="Month end v2", owner_department_id="d1", steps=(StepDraft("r2"),),
    )))

    assert outcome.status == OutcomeStatus.PARTIAL
    assert session.state.workflows[0].name == "Month end v2"
    assert session.state.steps_of("w1") == ()
    assert [r for r in store.rows("workflow_step") if r["workflow_id"] == "w1"] == []
    assert notifier.last.message.startswith("Workflow updated, but failed to add steps")
    print("  [PASS]")


def test_workflow_update_clear_failure_stops_before_insert() -> None:
    _header("Workflow update: clearing old steps fails")
    session, store, notifier = _session()
    before = session.state
    store.fail("delete_where", "workflow_step", error="locked")

    outcome = asyncio.run(session.workflows.update("w1", WorkflowForm(
        name="Month end", owner_department_id="d1", steps=(StepDraft("r1"),),
    )))

    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.message == "Workflow updated, but failed to update steps: locked"
    assert session.state is before
    assert store.count_calls("insert_many") == 0
    assert len(store.rows("workflow_step")) == 3
    print("  [PASS]")


def test_team_update_clear_failure_stops_before_insert() -> None:
    _header("Team update: clearing old members fails")
    session, store, notifier = _session()
    before = session.state
    store.fail("delete_where", "team_member", error="locked")

    outcome = asyncio.run(session.teams.update("t1", TeamForm(
        name="Launch", reporting_department_id="d1", member_ids=("s1",),
    )))

    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.message == "Team updated, but failed to update members: locked"
    assert session.state is before
    assert store.count_calls("insert_many") == 0
    print("  [PASS]")


def test_team_update_replaces_members() -> None:
    _header("Team update replaces exactly that team's members")
    session, store, notifier = _session()

    outcome = asyncio.run(session.teams.update("t1", TeamForm(
        name="Launch", reporting_department_id="d1", lead_id="s2",
        member_ids=("s1", "s1", "s2"),
    )))

    assert outcome.status == OutcomeStatus.SAVED
    assert sorted(m.staff_id for m in session.state.members_of("t1")) == ["s1", "s2"]
    assert [m.id for m in session.state.members_of("t2")] == ["tm3"]
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Guards and validation
# ══════════════════════════════════════════════════════════════

def test_guarded_deletes_make_no_calls() -> None:
    _header("Guarded deletes: rejected, zero record-store calls")
    session, store, notifier = _session()
    before = session.state
    cases = [
        (session.functions.delete("f1"), FUNCTION_HAS_STAFF),
        (session.staff.delete("s1"), STAFF_IS_MANAGER),
        (session.staff.delete("s3"), STAFF_IN_TEAM),
        (session.responsibilities.delete("r2"), RESPONSIBILITY_IN_WORKFLOW),
        (session.grades.delete("g0"), GRADE_HAS_STAFF),
        (session.company_numbers.delete_number("n1"), NUMBER_IS_ALLOCATED),
        (session.compliance_tags.delete("ct1"), TAG_IN_USE),
    ]
    for coro, message in cases:
        outcome = asyncio.run(coro)
        assert outcome.status == OutcomeStatus.REJECTED
        assert outcome.message == message
        assert notifier.last.kind == NotificationKind.ERROR
    assert store.count_calls() == 0
    assert session.state is before
    assert next(s for s in session.state.staff if s.id == "s1").grade_id == "g0"
    print("  [PASS]")


def test_unused_grade_is_deleted() -> None:
    _header("Grade nobody holds can be deleted")
    session, store, notifier = _session()

    added = asyncio.run(session.grades.add("Intern", 5))
    assert added.status == OutcomeStatus.SAVED

    outcome = asyncio.run(session.grades.delete(added.record.id))
    assert outcome.status == OutcomeStatus.SAVED
    assert outcome.message == "Grade deleted"
    assert [g.id for g in session.state.grades] == ["g0", "g3"]
    print("  [PASS]")


def test_non_numeric_input_is_invalid() -> None:
    _header("Non-numeric levels and ranges: invalid, no calls")
    session, store, notifier = _session()
    outcomes = [
        asyncio.run(session.grades.add("Lead", "abc")),
        asyncio.run(session.grades.update("g0", "Director", None)),
        asyncio.run(session.company_numbers.add_range("0300", "one", 3)),
        asyncio.run(session.settings.save_manager_threshold("high")),
    ]
    assert all(o.status == OutcomeStatus.INVALID for o in outcomes), outcomes
    assert outcomes[0].message == "Grade level must be 0 or higher"
    assert store.count_calls() == 0
    assert notifier.notifications == []

    outcome = asyncio.run(session.grades.add("Lead", "2"))
    assert outcome.status == OutcomeStatus.SAVED
    assert outcome.record.level == 2
    print("  [PASS]")


def test_invalid_forms_make_no_calls_and_no_notifications() -> None:
    _header("Invalid forms: no calls, no notifications")
    session, store, notifier = _session()
    outcomes = [
        asyncio.run(session.departments.add("   ")),
        asyncio.run(session.staff.add(StaffForm("", "X", "d1", "f1"))),
        asyncio.run(session.workflows.add(WorkflowForm(
            name="W", owner_department_id="d1", steps=(StepDraft(""),),
        ))),
        asyncio.run(session.company_numbers.allocate("n1", AssignToType.STAFF, "s2")),
        asyncio.run(session.company_numbers.allocate("n2", AssignToType.FUNCTION, "ghost")),
    ]
    assert all(o.status == OutcomeStatus.INVALID for o in outcomes), outcomes
    assert outcomes[3].message == "This number is already allocated"
    assert store.count_calls() == 0
    assert notifier.notifications == []
    print("  [PASS]")


def test_concurrent_submit_is_busy() -> None:
    _header("Second submit while saving returns busy")
    session, store, notifier = _session()

    async def both():
        return await asyncio.gather(
            session.departments.add("Legal"),
            session.departments.add("Legal again"),
        )

    first, second = asyncio.run(both())
    assert first.status == OutcomeStatus.SAVED
    assert second.status == OutcomeStatus.BUSY
    assert second.message == BUSY_MESSAGE
    assert store.count_calls("insert") == 1
    assert [d.name for d in session.state.departments][-1] == "Legal"
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Cascades
# ══════════════════════════════════════════════════════════════

def test_local_cascade_without_remote_cascade() -> None:
    """The snapshot drops the team's members even when the store keeps them."""
    _header("Delete team: local cascade only touches that team")
    session, store, notifier = _session(cascade=False)

    outcome = asyncio.run(session.teams.delete("t1"))

    assert outcome.status == OutcomeStatus.SAVED
    assert [t.id for t in session.state.teams] == ["t2"]
    assert [m.id for m in session.state.team_members] == ["tm3"]
    assert len(store.rows("team_member")) == 3
    print("  [PASS]")


def test_number_is_deleted_after_release() -> None:
    _header("Allocated number: release first, then delete")
    session, store, notifier = _session()

    outcome = asyncio.run(session.company_numbers.delete_number("n1"))
    assert outcome.status == OutcomeStatus.REJECTED
    assert [al.id for al in session.state.company_number_allocations] == ["al1"]

    outcome = asyncio.run(session.company_numbers.release("al1"))
    assert outcome.status == OutcomeStatus.SAVED

    outcome = asyncio.run(session.company_numbers.delete_number("n1"))
    assert outcome.status == OutcomeStatus.SAVED
    assert outcome.message == "Number deleted"
    assert [n.id for n in session.state.company_numbers] == ["n2"]
    assert store.rows("company_number_allocation") == []
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Admin, settings and field-level operations
# ══════════════════════════════════════════════════════════════

def test_number_range_partial_and_rejected() -> None:
    _header("Number range: duplicates fail individually, bad range rejected")
    session, store, notifier = _session()

    outcome = asyncio.run(session.company_numbers.add_range("0200", 0, 3))
    assert outcome.status == OutcomeStatus.PARTIAL
    assert outcome.message == "Added 2 numbers. 2 failed (possibly duplicates)."
    assert len(session.state.company_numbers) == 4
    assert notifier.last.kind == NotificationKind.SUCCESS

    store.reset_calls()
    outcome = asyncio.run(session.company_numbers.add_range("0300", 10, 5))
    assert outcome.status == OutcomeStatus.REJECTED
    assert outcome.message == INVALID_RANGE
    assert store.count_calls() == 0
    print("  [PASS]")


def test_allocate_and_release() -> None:
    _header("Allocate a free number to a function, then release it")
    session, store, notifier = _session()

    outcome = asyncio.run(session.company_numbers.allocate("n2", AssignToType.FUNCTION, "f2"))
    assert outcome.status == OutcomeStatus.SAVED
    allocation = outcome.record
    assert allocation.function_id == "f2"
    assert allocation.staff_id is None and allocation.department_id is None

    outcome = asyncio.run(session.company_numbers.release(allocation.id))
    assert outcome.status == OutcomeStatus.SAVED
    assert [al.id for al in session.state.company_number_allocations] == ["al1"]
    print("  [PASS]")


def test_settings_upsert_keeps_identity() -> None:
    _header("Settings: first save inserts, later saves update the same row")
    session, store, notifier = _session()

    first = asyncio.run(session.settings.save_email_format("acme.test", EmailFormat.F_LASTNAME))
    assert first.status == OutcomeStatus.SAVED
    assert session.state.app_settings.email_domain == "acme.test"
    assert session.state.app_settings.email_format == EmailFormat.F_LASTNAME

    second = asyncio.run(session.settings.save_manager_threshold(3))
    assert second.status == OutcomeStatus.SAVED
    assert second.record.id == first.record.id
    assert session.state.app_settings.max_manager_grade_level == 3
    assert session.state.app_settings.email_domain == "acme.test"
    assert len(store.rows("app_settings")) == 1

    outcome = asyncio.run(session.settings.save_company_profile("Acme", location="Leeds"))
    assert outcome.status == OutcomeStatus.SAVED
    assert session.state.company_profile.name == "Acme"
    print("  [PASS]")


def test_field_level_operations() -> None:
    _header("Assign manager, transfer responsibility, change role")
    session, store, notifier = _session()

    outcome = asyncio.run(session.departments.assign_manager("d2", "s1"))
    assert outcome.status == OutcomeStatus.SAVED
    assert session.state.departments[1].manager_id == "s1"

    outcome = asyncio.run(session.departments.assign_manager("d2", None))
    assert outcome.status == OutcomeStatus.SAVED
    assert session.state.departments[1].manager_id is None

    outcome = asyncio.run(session.responsibilities.transfer("r4", "f1", department_id="d2"))
    assert outcome.status == OutcomeStatus.INVALID

    outcome = asyncio.run(session.responsibilities.transfer("r4", "f1"))
    assert outcome.status == OutcomeStatus.SAVED
    assert outcome.message == "Responsibility transferred"
    r4 = next(r for r in session.state.responsibilities if r.id == "r4")
    assert r4.function_id == "f1"

    outcome = asyncio.run(session.users.update_role("u1", UserRole.SUPER_ADMIN))
    assert outcome.status == OutcomeStatus.SAVED
    assert session.state.users[0].role == UserRole.SUPER_ADMIN
    assert store.rows("app_user")[0]["role"] == "Super Admin"
    print("  [PASS]")


def test_manager_must_meet_grade_threshold() -> None:
    _header("Manager assignment: ungraded or too junior staff are invalid")
    session, store, notifier = _session()

    ungraded = asyncio.run(session.departments.assign_manager("d2", "s2"))
    junior = asyncio.run(session.departments.assign_manager("d2", "s3"))
    for outcome in (ungraded, junior):
        assert outcome.status == OutcomeStatus.INVALID
        assert outcome.message == NOT_ELIGIBLE_MANAGER
    assert store.count_calls() == 0
    assert notifier.notifications == []
    assert session.state.departments[1].manager_id is None

    asyncio.run(session.settings.save_manager_threshold(3))
    outcome = asyncio.run(session.departments.assign_manager("d2", "s3"))
    assert outcome.status == OutcomeStatus.SAVED
    assert store.rows("department")[1]["manager_id"] == "s3"
    print("  [PASS]")


class _RecordlessGateway(RemoteGateway):
    """Reports every update as successful but hands back no record."""

    async def update_one(self, collection, record_id, fields):
        return GatewayResult()


def test_update_without_record_is_failed() -> None:
    _header("Role change: success without a record is a failure")
    session, store, notifier = _session(gateway_cls=_RecordlessGateway)
    before = session.state

    outcome = asyncio.run(session.users.update_role("u1", UserRole.SUPER_ADMIN))

    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.message == "Failed to update role: Unknown error"
    assert session.state is before
    assert notifier.last.kind == NotificationKind.ERROR
    print("  [PASS]")


def test_staff_lifecycle() -> None:
    _header("Staff add / update / delete")
    session, store, notifier = _session()

    outcome = asyncio.run(session.staff.add(StaffForm(
        " Katherine ", "Johnson", "d2", "f2", additional_function_ids=("f1",),
    )))
    assert outcome.status == OutcomeStatus.SAVED
    staff = outcome.record
    assert staff.first_name == "Katherine"
    assert staff.additional_function_ids == ("f1",)
    assert staff.uid == "004"

    outcome = asyncio.run(session.staff.update(staff.id, StaffForm(
        "Katherine", "Johnson", "d2", "f2", grade_id="g0",
    )))
    assert outcome.status == OutcomeStatus.SAVED
    assert session.state.staff[-1].grade_id == "g0"
    assert session.state.staff[-1].additional_function_ids == ()

    outcome = asyncio.run(session.staff.delete(staff.id))
    assert outcome.status == OutcomeStatus.SAVED
    assert outcome.message == "Staff member deleted"
    assert all(s.id != staff.id for s in session.state.staff)
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Runner
# ══════════════════════════════════════════════════════════════

def main() -> None:
    tests = [
        test_create_department_without_manager,
        test_department_with_staff_is_not_deleted,
        test_team_created_when_member_insert_fails,
        test_workflow_steps_replaced,
        test_failed_write_leaves_snapshot_untouched,
        test_unexpected_store_error_is_contained,
        test_team_update_partial_failure_empties_members,
        test_team_update_clear_failure_stops_before_insert,
        test_workflow_created_when_step_insert_fails,
        test_workflow_update_partial_failure_empties_steps,
        test_workflow_update_clear_failure_stops_before_insert,
        test_team_update_replaces_members,
        test_guarded_deletes_make_no_calls,
        test_unused_grade_is_deleted,
        test_non_numeric_input_is_invalid,
        test_invalid_forms_make_no_calls_and_no_notifications,
        test_concurrent_submit_is_busy,
        test_local_cascade_without_remote_cascade,
        test_number_is_deleted_after_release,
        test_number_range_partial_and_rejected,
        test_allocate_and_release,
        test_settings_upsert_keeps_identity,
        test_field_level_operations,
        test_manager_must_meet_grade_threshold,
        test_update_without_record_is_failed,
        test_staff_lifecycle,
    ]
    failed = 0
    for fn in tests:
        try:
            fn()
        except Exception as e:
            print(f"\n[ERROR] {fn.__name__}: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print(f"\n{'='*60}")
    print(f"  RESULTS: {len(tests) - failed}/{len(tests)} tests passed")
    print(f"{'='*60}")
    sys.exit(0 if failed == 0 else 1)


if __name__ == "__main__":
    main()
